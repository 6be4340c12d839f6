from __future__ import annotations

import datetime as dt
import logging
from pathlib import Path
from typing import Dict, Optional

from .exceptions import NoActiveTimer, RecordNotFound, TimerAlreadyRunning
from .models import DayData, WorkRecord
from .storage import FileStore
from .timer import TimerState, TimerStatus
from .utils import normalize_name

logger = logging.getLogger(__name__)


def _now() -> dt.datetime:
    return dt.datetime.now().astimezone()


class StoreManager:
    """Entry point used by both front-ends.

    Wraps the file store with a ``date -> last known mtime`` map so a
    long-lived caller can tell its own writes apart from writes made by
    another process, and drives the active-timer lifecycle.
    """

    def __init__(self, data_dir: Optional[Path] = None, *, store: Optional[FileStore] = None) -> None:
        self.store = store or FileStore(data_dir)
        self._known_mtimes: Dict[dt.date, Optional[int]] = {}

    @property
    def data_dir(self) -> Path:
        return self.store.data_dir

    # ------------------------------------------------------------------
    # Modification tracking
    # ------------------------------------------------------------------
    def load_with_tracking(self, date: dt.date) -> DayData:
        day_data = self.store.load(date)
        self._track(date)
        return day_data

    def check_and_reload(self, date: dt.date) -> Optional[DayData]:
        """Return the day's data if its file changed since it was last seen."""
        current = self.store.get_file_modified_time(date)
        if date in self._known_mtimes and self._known_mtimes[date] == current:
            return None
        logger.info("External change detected for %s, reloading", date.isoformat())
        day_data = self.store.load(date)
        self._known_mtimes[date] = current
        return day_data

    def save(self, day_data: DayData) -> None:
        self.store.save(day_data)
        self._track(day_data.date)

    def get_last_modified(self, date: dt.date) -> Optional[int]:
        return self._known_mtimes.get(date)

    def _track(self, date: dt.date) -> None:
        mtime = self.store.get_file_modified_time(date)
        self._known_mtimes[date] = mtime
        logger.debug("Tracking %s at mtime %s", date.isoformat(), mtime)

    # ------------------------------------------------------------------
    # Record operations (load -> mutate -> save -> retrack)
    # ------------------------------------------------------------------
    def add_record(self, date: dt.date, record: WorkRecord) -> None:
        day_data = self.store.load(date)
        day_data.add_record(record)
        self.save(day_data)
        logger.info("Added record %s to %s", record.id, date.isoformat())

    def update_record(self, date: dt.date, record: WorkRecord) -> None:
        day_data = self.store.load(date)
        day_data.add_record(record)
        self.save(day_data)
        logger.info("Updated record %s on %s", record.id, date.isoformat())

    def remove_record(self, date: dt.date, record_id: int) -> WorkRecord:
        day_data = self.store.load(date)
        removed = day_data.remove_record(record_id)
        if removed is None:
            raise RecordNotFound(record_id, date)
        self.save(day_data)
        logger.info("Removed record %s from %s", record_id, date.isoformat())
        return removed

    # ------------------------------------------------------------------
    # Timer lifecycle
    # ------------------------------------------------------------------
    def load_active_timer(self) -> Optional[TimerState]:
        return self.store.load_active_timer()

    def get_timer_status(self) -> Optional[TimerState]:
        return self.load_active_timer()

    def _require_timer(self) -> TimerState:
        timer = self.store.load_active_timer()
        if timer is None:
            raise NoActiveTimer()
        return timer

    def start_timer(
        self,
        task_name: str,
        description: Optional[str] = None,
        source_record_id: Optional[int] = None,
        source_record_date: Optional[dt.date] = None,
    ) -> TimerState:
        task_name = normalize_name(task_name)
        if self.store.load_active_timer() is not None:
            raise TimerAlreadyRunning()
        timer = TimerState.begin(
            task_name,
            description=description,
            source_record_id=source_record_id,
            source_record_date=source_record_date,
            now=_now(),
        )
        self.store.save_active_timer(timer)
        logger.info("Timer started for %r", timer.task_name)
        return timer

    def pause_timer(self) -> TimerState:
        timer = self._require_timer()
        timer.mark_paused(_now())
        self.store.save_active_timer(timer)
        logger.info("Timer paused for %r", timer.task_name)
        return timer

    def resume_timer(self) -> TimerState:
        timer = self._require_timer()
        timer.mark_resumed(_now())
        self.store.save_active_timer(timer)
        logger.info("Timer resumed for %r", timer.task_name)
        return timer

    def stop_timer(self) -> WorkRecord:
        """Stop the active timer and write it into its day file.

        The returned record only describes the stopped session; its id is a
        placeholder; reload the day to see the persisted id.
        """
        timer = self._require_timer()
        timer.mark_stopped(_now())
        session_record = timer.to_work_record()

        target_date = timer.source_record_date or timer.date
        day_data = self.store.load(target_date)

        existing = day_data.get_record(timer.source_record_id) if timer.source_record_id is not None else None
        if existing is not None:
            existing.set_times(end=session_record.end)
            logger.info("Extended record %s on %s to %s", existing.id, target_date.isoformat(), existing.end)
        else:
            if timer.source_record_id is not None:
                logger.warning(
                    "Source record %s missing on %s, inserting a new record",
                    timer.source_record_id,
                    target_date.isoformat(),
                )
            new_record = session_record.model_copy(update={"id": day_data.next_id()})
            day_data.add_record(new_record)
            logger.info("Inserted record %s on %s", new_record.id, target_date.isoformat())

        self.save(day_data)
        self.store.clear_active_timer()
        logger.info("Timer stopped for %r", timer.task_name)
        return session_record

    def get_timer_elapsed(self, timer: TimerState) -> dt.timedelta:
        if timer.status == TimerStatus.PAUSED:
            return timer.elapsed()
        return timer.elapsed(_now())


__all__ = ["StoreManager"]
