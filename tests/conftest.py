from __future__ import annotations

import datetime as dt
import os
from pathlib import Path

import pytest

from worktimer import services
from worktimer.models import ClockTime, WorkRecord
from worktimer.services import StoreManager


class FakeClock:
    def __init__(self, start: dt.datetime):
        self.now = start

    def __call__(self) -> dt.datetime:
        return self.now

    def advance(self, **kwargs) -> dt.datetime:
        self.now = self.now + dt.timedelta(**kwargs)
        return self.now


def make_record(record_id: int, name: str, start_hour: int, end_hour: int, description: str = "") -> WorkRecord:
    return WorkRecord.create(record_id, name, ClockTime.of(start_hour, 0), ClockTime.of(end_hour, 0), description=description)


def bump_mtime(path: Path, seconds: int = 2) -> None:
    stat = path.stat()
    shifted = stat.st_mtime_ns + seconds * 1_000_000_000
    os.utime(path, ns=(stat.st_atime_ns, shifted))


@pytest.fixture()
def data_dir(tmp_path: Path) -> Path:
    path = tmp_path / "data"
    path.mkdir()
    return path


@pytest.fixture()
def manager(data_dir: Path) -> StoreManager:
    return StoreManager(data_dir)


@pytest.fixture()
def sample_day() -> dt.date:
    return dt.date(2025, 11, 6)


@pytest.fixture()
def clock(monkeypatch, sample_day: dt.date) -> FakeClock:
    fake = FakeClock(dt.datetime.combine(sample_day, dt.time(9, 0)).astimezone())
    monkeypatch.setattr(services, "_now", fake)
    return fake
