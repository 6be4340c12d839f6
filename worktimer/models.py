from __future__ import annotations

import datetime as dt
from collections import defaultdict
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .exceptions import InvalidTime
from .utils import format_minutes, normalize_name

MINUTES_PER_DAY = 24 * 60


def _check_range(hour: int, minute: int) -> None:
    if not isinstance(hour, int) or not isinstance(minute, int):
        raise InvalidTime(f"Time components must be integers, got {hour!r}:{minute!r}")
    if not 0 <= hour <= 23:
        raise InvalidTime(f"Hour must be 0-23, got {hour}")
    if not 0 <= minute <= 59:
        raise InvalidTime(f"Minute must be 0-59, got {minute}")


class ClockTime(BaseModel):
    """Wall-clock time of day with minute precision."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    hour: int = Field(ge=0, le=23, strict=True)
    minute: int = Field(ge=0, le=59, strict=True)

    @classmethod
    def of(cls, hour: int, minute: int) -> "ClockTime":
        _check_range(hour, minute)
        return cls(hour=hour, minute=minute)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, ClockTime):
            return NotImplemented
        return self.to_minutes() < other.to_minutes()

    def __le__(self, other: object) -> bool:
        if not isinstance(other, ClockTime):
            return NotImplemented
        return self.to_minutes() <= other.to_minutes()

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, ClockTime):
            return NotImplemented
        return self.to_minutes() > other.to_minutes()

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, ClockTime):
            return NotImplemented
        return self.to_minutes() >= other.to_minutes()

    def __str__(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"

    def to_minutes(self) -> int:
        return self.hour * 60 + self.minute

    @classmethod
    def from_minutes(cls, minutes: int) -> "ClockTime":
        if not 0 <= minutes < MINUTES_PER_DAY:
            raise InvalidTime(f"Minutes must be 0-1439, got {minutes}")
        hour, minute = divmod(minutes, 60)
        return cls.of(hour, minute)

    @classmethod
    def parse(cls, text: str) -> "ClockTime":
        parts = text.strip().split(":")
        if len(parts) != 2:
            raise InvalidTime(f"Invalid time format: {text}")
        hour_text, minute_text = parts
        if not hour_text.isdigit():
            raise InvalidTime(f"Invalid hour: {hour_text}")
        if not minute_text.isdigit():
            raise InvalidTime(f"Invalid minute: {minute_text}")
        return cls.of(int(hour_text), int(minute_text))

    @classmethod
    def from_datetime(cls, value: dt.datetime) -> "ClockTime":
        return cls.of(value.hour, value.minute)

    @classmethod
    def now(cls) -> "ClockTime":
        return cls.from_datetime(dt.datetime.now().astimezone())


class WorkRecord(BaseModel):
    """A completed work interval within one day.

    ``total_minutes`` is derived from ``start`` and ``end`` and is recomputed
    whenever either changes, including on load.
    """

    id: int = Field(ge=0)
    name: str
    start: ClockTime
    end: ClockTime
    total_minutes: int = 0
    description: str = ""

    @field_validator("name", mode="before")
    @classmethod
    def _trim_name(cls, value: Any) -> str:
        return normalize_name(value)

    @field_validator("description", mode="before")
    @classmethod
    def _default_description(cls, value: Any) -> str:
        return "" if value is None else value

    @model_validator(mode="after")
    def _derive_total(self) -> "WorkRecord":
        self.total_minutes = self.calculate_duration(self.start, self.end)
        return self

    @classmethod
    def create(
        cls,
        id: int,
        name: str,
        start: ClockTime,
        end: ClockTime,
        description: str = "",
    ) -> "WorkRecord":
        return cls(id=id, name=normalize_name(name), start=start, end=end, description=description or "")

    @staticmethod
    def calculate_duration(start: ClockTime, end: ClockTime) -> int:
        start_mins = start.to_minutes()
        end_mins = end.to_minutes()
        if end_mins >= start_mins:
            return end_mins - start_mins
        return (MINUTES_PER_DAY - start_mins) + end_mins

    def update_duration(self) -> None:
        self.total_minutes = self.calculate_duration(self.start, self.end)

    def set_times(self, start: Optional[ClockTime] = None, end: Optional[ClockTime] = None) -> None:
        if start is not None:
            self.start = start
        if end is not None:
            self.end = end
        self.update_duration()

    def rename(self, name: str) -> None:
        self.name = normalize_name(name)

    def format_duration(self) -> str:
        return format_minutes(self.total_minutes)


class DayData(BaseModel):
    """All work records of one calendar day.

    ``last_id`` never decreases, so ids are not reused after deletion.
    """

    date: dt.date
    last_id: int = Field(default=0, ge=0)
    work_records: Dict[int, WorkRecord] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _reconcile_ids(self) -> "DayData":
        records = {record.id: record for record in self.work_records.values()}
        self.work_records = records
        if records:
            self.last_id = max(self.last_id, max(records))
        return self

    @classmethod
    def empty(cls, date: dt.date) -> "DayData":
        return cls(date=date)

    def add_record(self, record: WorkRecord) -> None:
        if record.id > self.last_id:
            self.last_id = record.id
        self.work_records[record.id] = record

    def remove_record(self, record_id: int) -> Optional[WorkRecord]:
        return self.work_records.pop(record_id, None)

    def get_record(self, record_id: int) -> Optional[WorkRecord]:
        return self.work_records.get(record_id)

    def next_id(self) -> int:
        self.last_id += 1
        return self.last_id

    def get_sorted_records(self) -> List[WorkRecord]:
        return sorted(self.work_records.values(), key=lambda record: record.start.to_minutes())

    def get_grouped_totals(self) -> List[Tuple[str, int]]:
        totals: Dict[str, int] = defaultdict(int)
        for record in self.work_records.values():
            totals[record.name] += record.total_minutes
        return sorted(totals.items(), key=lambda item: item[1], reverse=True)

    def total_minutes(self) -> int:
        return sum(record.total_minutes for record in self.work_records.values())

    def snapshot(self) -> "DayData":
        return self.model_copy(deep=True)


__all__ = ["ClockTime", "WorkRecord", "DayData", "MINUTES_PER_DAY"]
