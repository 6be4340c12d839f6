from __future__ import annotations

import datetime as dt
import logging
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from .config import ensure_dir, resolve_data_dir
from .exceptions import CorruptData, IoFailure
from .models import DayData
from .timer import TimerState

logger = logging.getLogger(__name__)

TIMER_FILE_NAME = "running_timer.json"


class FileStore:
    """One pretty-printed JSON file per day plus one for the active timer.

    Files are rewritten whole on every save; there is no locking and no
    atomic rename.
    """

    def __init__(self, data_dir: Optional[Path] = None) -> None:
        self.data_dir = ensure_dir(Path(data_dir)) if data_dir is not None else resolve_data_dir()

    def get_file_path(self, date: dt.date) -> Path:
        return self.data_dir / f"{date.isoformat()}.json"

    @property
    def timer_path(self) -> Path:
        return self.data_dir / TIMER_FILE_NAME

    # ------------------------------------------------------------------
    # Day files
    # ------------------------------------------------------------------
    def load(self, date: dt.date) -> DayData:
        path = self.get_file_path(date)
        contents = self._read(path)
        if contents is None:
            return DayData.empty(date)
        try:
            return DayData.model_validate_json(contents)
        except ValidationError as exc:
            raise CorruptData(f"Failed to parse day file: {path}", path=path) from exc

    def save(self, day_data: DayData) -> None:
        path = self.get_file_path(day_data.date)
        self._write(path, day_data.model_dump_json(indent=2))

    def get_file_modified_time(self, date: dt.date) -> Optional[int]:
        """Modification time in nanoseconds, or ``None`` when there is no file."""
        path = self.get_file_path(date)
        try:
            return path.stat().st_mtime_ns
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise IoFailure(f"Failed to stat file: {path}", path=path) from exc

    # ------------------------------------------------------------------
    # Active timer
    # ------------------------------------------------------------------
    def load_active_timer(self) -> Optional[TimerState]:
        path = self.timer_path
        contents = self._read(path)
        if contents is None:
            return None
        try:
            return TimerState.model_validate_json(contents)
        except ValidationError as exc:
            raise CorruptData(f"Failed to parse timer file: {path}", path=path) from exc

    def save_active_timer(self, timer: TimerState) -> None:
        self._write(self.timer_path, timer.model_dump_json(indent=2))

    def clear_active_timer(self) -> None:
        path = self.timer_path
        try:
            path.unlink()
        except FileNotFoundError:
            return
        except OSError as exc:
            raise IoFailure(f"Failed to delete timer file: {path}", path=path) from exc
        logger.debug("Removed %s", path)

    # ------------------------------------------------------------------
    def _read(self, path: Path) -> Optional[str]:
        try:
            contents = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except UnicodeDecodeError as exc:
            raise CorruptData(f"File is not valid UTF-8: {path}", path=path) from exc
        except OSError as exc:
            raise IoFailure(f"Failed to read file: {path}", path=path) from exc
        logger.debug("Read %s", path)
        return contents

    def _write(self, path: Path, contents: str) -> None:
        try:
            path.write_text(contents, encoding="utf-8")
        except OSError as exc:
            raise IoFailure(f"Failed to write file: {path}", path=path) from exc
        logger.debug("Wrote %s", path)


__all__ = ["FileStore", "TIMER_FILE_NAME"]
