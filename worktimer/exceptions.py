"""Error taxonomy of the time-tracking store."""

from __future__ import annotations

import datetime as dt
from pathlib import Path
from typing import Optional


class WorkTimerError(RuntimeError):
    """Base class for every failure surfaced to the front-ends."""


class InvalidTime(WorkTimerError, ValueError):
    """Hour/minute out of range or malformed ``HH:MM`` text."""


class EmptyName(WorkTimerError, ValueError):
    """Record or task name is blank after trimming."""


class CorruptData(WorkTimerError):
    """A stored JSON file could not be parsed."""

    def __init__(self, message: str, *, path: Optional[Path] = None) -> None:
        super().__init__(message)
        self.path = path


class IoFailure(WorkTimerError):
    """Filesystem read, write or directory creation failed."""

    def __init__(self, message: str, *, path: Optional[Path] = None) -> None:
        super().__init__(message)
        self.path = path


class RecordNotFound(WorkTimerError):
    def __init__(self, record_id: int, date: Optional[dt.date] = None) -> None:
        where = f" on {date.isoformat()}" if date else ""
        super().__init__(f"Record {record_id} not found{where}")
        self.record_id = record_id
        self.date = date


class TimerAlreadyRunning(WorkTimerError):
    def __init__(self, message: str = "A timer is already running") -> None:
        super().__init__(message)


class NoActiveTimer(WorkTimerError):
    def __init__(self, message: str = "No timer is currently running") -> None:
        super().__init__(message)


class InvalidTransition(WorkTimerError):
    """Timer status change not allowed from the current status."""


__all__ = [
    "WorkTimerError",
    "InvalidTime",
    "EmptyName",
    "CorruptData",
    "IoFailure",
    "RecordNotFound",
    "TimerAlreadyRunning",
    "NoActiveTimer",
    "InvalidTransition",
]
