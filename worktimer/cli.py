"""One-shot command line front-end: ``worktimer session <command>``."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Callable, Dict, List, Optional, TextIO

from .config import settings
from .exceptions import NoActiveTimer, WorkTimerError
from .services import StoreManager
from .utils import format_clock, format_elapsed

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="worktimer", description="Automatic time tracking from the command line.")
    parser.add_argument("--data-dir", default=None, help="Directory holding day files (default: per-user data dir).")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")

    sub = parser.add_subparsers(dest="command", required=True)
    session = sub.add_parser("session", help="Manage timer sessions (start/stop/pause/resume/status).")
    session_sub = session.add_subparsers(dest="action", required=True)

    start = session_sub.add_parser("start", help="Start a new timer session.")
    start.add_argument("task", help="Task name.")
    start.add_argument("-d", "--description", default=None, help="Optional task description.")

    session_sub.add_parser("stop", help="Stop the running session and record it.")
    session_sub.add_parser("pause", help="Pause the running session.")
    session_sub.add_parser("resume", help="Resume the paused session.")
    session_sub.add_parser("status", help="Show the running session.")
    return parser


def handle_start(args: argparse.Namespace, manager: StoreManager, out: TextIO) -> int:
    timer = manager.start_timer(args.task, args.description)
    print("Session started", file=out)
    print(f"  Task: {timer.task_name}", file=out)
    if timer.description:
        print(f"  Description: {timer.description}", file=out)
    print(f"  Started at: {format_clock(timer.start_time)}", file=out)
    return 0


def handle_stop(args: argparse.Namespace, manager: StoreManager, out: TextIO) -> int:
    timer = manager.load_active_timer()
    if timer is None:
        raise NoActiveTimer("No session is running")
    elapsed = manager.get_timer_elapsed(timer)
    record = manager.stop_timer()
    print("Session stopped", file=out)
    print(f"  Task: {timer.task_name}", file=out)
    print(f"  Duration: {format_elapsed(elapsed)}", file=out)
    print(f"  Started at: {format_clock(timer.start_time)}", file=out)
    print(f"  Ended at: {record.end}", file=out)
    return 0


def handle_pause(args: argparse.Namespace, manager: StoreManager, out: TextIO) -> int:
    timer = manager.pause_timer()
    print("Session paused", file=out)
    print(f"  Task: {timer.task_name}", file=out)
    print(f"  Elapsed: {format_elapsed(manager.get_timer_elapsed(timer))}", file=out)
    return 0


def handle_resume(args: argparse.Namespace, manager: StoreManager, out: TextIO) -> int:
    timer = manager.resume_timer()
    print("Session resumed", file=out)
    print(f"  Task: {timer.task_name}", file=out)
    print(f"  Elapsed: {format_elapsed(manager.get_timer_elapsed(timer))}", file=out)
    return 0


def handle_status(args: argparse.Namespace, manager: StoreManager, out: TextIO) -> int:
    timer = manager.load_active_timer()
    if timer is None:
        print("No session is currently running", file=out)
        return 0
    print("Session status", file=out)
    print(f"  Task: {timer.task_name}", file=out)
    print(f"  Status: {timer.status.value.capitalize()}", file=out)
    print(f"  Elapsed: {format_elapsed(manager.get_timer_elapsed(timer))}", file=out)
    print(f"  Started at: {format_clock(timer.start_time)}", file=out)
    if timer.description:
        print(f"  Description: {timer.description}", file=out)
    return 0


HANDLERS: Dict[str, Callable[[argparse.Namespace, StoreManager, TextIO], int]] = {
    "start": handle_start,
    "stop": handle_stop,
    "pause": handle_pause,
    "resume": handle_resume,
    "status": handle_status,
}


def run(
    argv: Optional[List[str]] = None,
    *,
    out: TextIO = sys.stdout,
    err: TextIO = sys.stderr,
) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else settings.log_level)
    try:
        manager = StoreManager(args.data_dir)
        return HANDLERS[args.action](args, manager, out)
    except WorkTimerError as exc:
        logger.debug("Command failed", exc_info=True)
        print(f"Error: {exc}", file=err)
        return 1


__all__ = ["build_parser", "run"]
