"""Active timer state and its status transitions.

A persisted timer is always ``running`` or ``paused``; ``stopped`` only
exists while a timer is being converted into a work record.
"""

from __future__ import annotations

import datetime as dt
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, field_validator

from .exceptions import InvalidTransition
from .models import ClockTime, WorkRecord
from .utils import normalize_name

PLACEHOLDER_RECORD_ID = 1


def _now() -> dt.datetime:
    return dt.datetime.now().astimezone()


def _as_aware(value: dt.datetime) -> dt.datetime:
    if value.tzinfo is None:
        return value.astimezone()
    return value


def _local(value: dt.datetime) -> dt.datetime:
    return _as_aware(value).astimezone()


class TimerStatus(str, Enum):
    RUNNING = "running"
    PAUSED = "paused"
    STOPPED = "stopped"


class TimerState(BaseModel):
    id: Optional[int] = None
    task_name: str
    description: Optional[str] = None
    start_time: dt.datetime
    end_time: Optional[dt.datetime] = None
    date: dt.date
    status: TimerStatus = TimerStatus.RUNNING
    paused_duration_secs: int = 0
    paused_at: Optional[dt.datetime] = None
    created_at: dt.datetime
    updated_at: dt.datetime
    source_record_id: Optional[int] = None
    source_record_date: Optional[dt.date] = None

    @field_validator("start_time", "end_time", "paused_at", "created_at", "updated_at")
    @classmethod
    def _ensure_aware(cls, value: Optional[dt.datetime]) -> Optional[dt.datetime]:
        if value is None:
            return None
        return _as_aware(value)

    @field_validator("task_name", mode="before")
    @classmethod
    def _trim_task_name(cls, value: Any) -> str:
        return normalize_name(value)

    @classmethod
    def begin(
        cls,
        task_name: str,
        description: Optional[str] = None,
        source_record_id: Optional[int] = None,
        source_record_date: Optional[dt.date] = None,
        now: Optional[dt.datetime] = None,
    ) -> "TimerState":
        now = _as_aware(now or _now())
        return cls(
            task_name=normalize_name(task_name),
            description=description,
            start_time=now,
            date=_local(now).date(),
            status=TimerStatus.RUNNING,
            paused_duration_secs=0,
            created_at=now,
            updated_at=now,
            source_record_id=source_record_id,
            source_record_date=source_record_date,
        )

    @property
    def is_running(self) -> bool:
        return self.status == TimerStatus.RUNNING

    @property
    def is_paused(self) -> bool:
        return self.status == TimerStatus.PAUSED

    def mark_paused(self, now: dt.datetime) -> None:
        if self.status == TimerStatus.PAUSED:
            raise InvalidTransition("Timer is already paused")
        if self.status != TimerStatus.RUNNING:
            raise InvalidTransition("Can only pause a running timer")
        now = _as_aware(now)
        self.paused_at = now
        self.status = TimerStatus.PAUSED
        self.updated_at = now

    def mark_resumed(self, now: dt.datetime) -> None:
        if self.status != TimerStatus.PAUSED:
            raise InvalidTransition("Can only resume a paused timer")
        now = _as_aware(now)
        if self.paused_at is not None:
            self.paused_duration_secs += int((now - self.paused_at).total_seconds())
        self.paused_at = None
        self.status = TimerStatus.RUNNING
        self.updated_at = now

    def mark_stopped(self, now: dt.datetime) -> None:
        now = _as_aware(now)
        if self.status == TimerStatus.STOPPED:
            if self.end_time is None:
                self.end_time = now
            return
        if self.status == TimerStatus.PAUSED and self.paused_at is not None:
            self.paused_duration_secs += int((now - self.paused_at).total_seconds())
            self.paused_at = None
        self.end_time = now
        self.status = TimerStatus.STOPPED
        self.updated_at = now

    def elapsed(self, now: Optional[dt.datetime] = None) -> dt.timedelta:
        """Active time so far, excluding pauses and never negative."""
        if self.status == TimerStatus.PAUSED and self.paused_at is not None:
            end_point = self.paused_at
        elif self.status == TimerStatus.STOPPED and self.end_time is not None:
            end_point = self.end_time
        else:
            end_point = _as_aware(now or _now())
        elapsed = end_point - self.start_time - dt.timedelta(seconds=self.paused_duration_secs)
        return max(elapsed, dt.timedelta(0))

    def to_work_record(self, record_id: int = PLACEHOLDER_RECORD_ID) -> WorkRecord:
        if self.status != TimerStatus.STOPPED:
            raise InvalidTransition("Can only convert stopped timers to a work record")
        if self.end_time is None:
            raise InvalidTransition("Stopped timer must have an end time")
        return WorkRecord.create(
            record_id,
            self.task_name,
            ClockTime.from_datetime(_local(self.start_time)),
            ClockTime.from_datetime(_local(self.end_time)),
            description=self.description or "",
        )


__all__ = ["TimerStatus", "TimerState", "PLACEHOLDER_RECORD_ID"]
