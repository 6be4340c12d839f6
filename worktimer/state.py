from __future__ import annotations

import datetime as dt
import logging
from typing import Any, Dict, Optional, Tuple, Union

from .config import Settings, settings as default_settings
from .exceptions import InvalidTransition, NoActiveTimer, RecordNotFound, WorkTimerError
from .history import UndoHistory
from .models import ClockTime, DayData, WorkRecord
from .services import StoreManager
from .timer import TimerState, TimerStatus
from .utils import normalize_description, normalize_name

logger = logging.getLogger(__name__)

DEFAULT_RECORD_NAME = "New Task"
DEFAULT_RECORD_SPAN = ((9, 0), (17, 0))
BREAK_RECORD_NAME = "Break"
BREAK_RECORD_SPAN = ((12, 0), (12, 15))

TimeInput = Union[ClockTime, str]


def _coerce_time(value: TimeInput) -> ClockTime:
    if isinstance(value, ClockTime):
        return value
    return ClockTime.parse(str(value))


class EditorSession:
    """In-memory state of the interactive editor for one displayed day.

    Every mutating action snapshots the day onto the undo history first and
    is saved through the store manager right away. Failures are kept in
    ``last_error_message`` and leave the in-memory day untouched.
    """

    def __init__(
        self,
        manager: StoreManager,
        date: Optional[dt.date] = None,
        *,
        config: Optional[Settings] = None,
    ) -> None:
        self.manager = manager
        self.config = config or default_settings
        self.current_date: dt.date = date or dt.date.today()
        self.history = UndoHistory(self.config.history_depth)
        self.day_data: DayData = manager.load_with_tracking(self.current_date)
        self.active_timer: Optional[TimerState] = manager.load_active_timer()
        self.last_file_modified: Optional[int] = manager.get_last_modified(self.current_date)
        self.last_error_message: Optional[str] = None

    @property
    def poll_interval(self) -> float:
        return self.config.poll_interval_ms / 1000

    # ------------------------------------------------------------------
    # Error reporting
    # ------------------------------------------------------------------
    def _report(self, exc: WorkTimerError) -> None:
        logger.debug("Editor action failed: %s", exc)
        self.last_error_message = str(exc)

    def clear_error(self) -> None:
        self.last_error_message = None

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------
    def save(self) -> bool:
        try:
            self.manager.save(self.day_data)
        except WorkTimerError as exc:
            self._report(exc)
            return False
        self.last_file_modified = self.manager.get_last_modified(self.current_date)
        return True

    def poll(self) -> bool:
        """Pick up writes made by another process; return True if reloaded."""
        try:
            reloaded = self.manager.check_and_reload(self.current_date)
            timer = self.manager.load_active_timer()
        except WorkTimerError as exc:
            self._report(exc)
            return False
        self.active_timer = timer
        if reloaded is None:
            return False
        self.day_data = reloaded
        self.last_file_modified = self.manager.get_last_modified(self.current_date)
        return True

    def change_date(self, date: dt.date) -> bool:
        if not self.save():
            return False
        try:
            day_data = self.manager.load_with_tracking(date)
        except WorkTimerError as exc:
            self._report(exc)
            return False
        self.current_date = date
        self.day_data = day_data
        self.history.clear()
        self.last_file_modified = self.manager.get_last_modified(date)
        return True

    # ------------------------------------------------------------------
    # Record editing
    # ------------------------------------------------------------------
    def _append(self, name: str, span: Tuple[Tuple[int, int], Tuple[int, int]]) -> WorkRecord:
        (start_hour, start_minute), (end_hour, end_minute) = span
        self.history.push(self.day_data)
        record = WorkRecord.create(
            self.day_data.next_id(),
            name,
            ClockTime.of(start_hour, start_minute),
            ClockTime.of(end_hour, end_minute),
        )
        self.day_data.add_record(record)
        self.save()
        return record

    def add_new_record(self) -> WorkRecord:
        return self._append(DEFAULT_RECORD_NAME, DEFAULT_RECORD_SPAN)

    def add_break(self) -> WorkRecord:
        return self._append(BREAK_RECORD_NAME, BREAK_RECORD_SPAN)

    def delete_record(self, record_id: int) -> bool:
        if self.day_data.get_record(record_id) is None:
            self._report(RecordNotFound(record_id, self.current_date))
            return False
        self.history.push(self.day_data)
        self.day_data.remove_record(record_id)
        return self.save()

    def delete_records(self, first_index: int, last_index: int) -> int:
        """Delete the start-sorted records between two indexes, inclusive.

        The whole range is one undo step. Returns how many were removed.
        """
        low, high = sorted((first_index, last_index))
        doomed = [record.id for record in self.day_data.get_sorted_records()[max(low, 0) : high + 1]]
        if not doomed:
            return 0
        self.history.push(self.day_data)
        for record_id in doomed:
            self.day_data.remove_record(record_id)
        self.save()
        return len(doomed)

    def update_record(self, record_id: int, updates: Dict[str, Any]) -> bool:
        """Apply ``name``/``start``/``end``/``description`` changes to a record."""
        record = self.day_data.get_record(record_id)
        if record is None:
            self._report(RecordNotFound(record_id, self.current_date))
            return False
        try:
            name = normalize_name(updates["name"]) if updates.get("name") is not None else None
            start = _coerce_time(updates["start"]) if updates.get("start") is not None else None
            end = _coerce_time(updates["end"]) if updates.get("end") is not None else None
        except WorkTimerError as exc:
            self._report(exc)
            return False

        self.history.push(self.day_data)
        if name is not None:
            record.name = name
        if "description" in updates:
            record.description = normalize_description(updates["description"])
        record.set_times(start=start, end=end)
        return self.save()

    def set_now(self, record_id: int, field: str) -> bool:
        if field not in {"start", "end"}:
            raise ValueError(f"Unknown time field: {field}")
        return self.update_record(record_id, {field: ClockTime.now()})

    def undo(self) -> bool:
        previous = self.history.undo(self.day_data)
        if previous is None:
            return False
        self.day_data = previous
        return self.save()

    def redo(self) -> bool:
        following = self.history.redo(self.day_data)
        if following is None:
            return False
        self.day_data = following
        return self.save()

    # ------------------------------------------------------------------
    # Timer
    # ------------------------------------------------------------------
    def start_timer_for_record(self, record_id: int) -> bool:
        """Start a timer that continues an existing record of this day."""
        record = self.day_data.get_record(record_id)
        if record is None:
            self._report(RecordNotFound(record_id, self.current_date))
            return False
        return self._start(record.name, record.description or None, record.id, self.current_date)

    def start_timer(self, task_name: str, description: Optional[str] = None) -> bool:
        return self._start(task_name, description, None, None)

    def _start(
        self,
        task_name: str,
        description: Optional[str],
        source_record_id: Optional[int],
        source_record_date: Optional[dt.date],
    ) -> bool:
        try:
            self.active_timer = self.manager.start_timer(
                task_name, description, source_record_id, source_record_date
            )
        except WorkTimerError as exc:
            self._report(exc)
            return False
        return True

    def toggle_pause(self) -> bool:
        try:
            timer = self.manager.load_active_timer()
            if timer is None:
                raise NoActiveTimer()
            if timer.status == TimerStatus.RUNNING:
                self.active_timer = self.manager.pause_timer()
            elif timer.status == TimerStatus.PAUSED:
                self.active_timer = self.manager.resume_timer()
            else:
                raise InvalidTransition(f"Cannot pause or resume a {timer.status.value} timer")
        except WorkTimerError as exc:
            self._report(exc)
            return False
        return True

    def stop_timer(self) -> Optional[WorkRecord]:
        try:
            record = self.manager.stop_timer()
            self.active_timer = None
            self.day_data = self.manager.load_with_tracking(self.current_date)
        except WorkTimerError as exc:
            self._report(exc)
            return None
        self.last_file_modified = self.manager.get_last_modified(self.current_date)
        return record

    def timer_elapsed(self) -> Optional[dt.timedelta]:
        if self.active_timer is None:
            return None
        return self.manager.get_timer_elapsed(self.active_timer)


__all__ = ["EditorSession"]
