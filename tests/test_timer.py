from __future__ import annotations

import datetime as dt

import pytest

from worktimer.exceptions import InvalidTransition
from worktimer.models import ClockTime
from worktimer.timer import PLACEHOLDER_RECORD_ID, TimerState, TimerStatus

START = dt.datetime(2025, 11, 6, 9, 0).astimezone()


def _timer(**kwargs) -> TimerState:
    return TimerState.begin("Work", now=START, **kwargs)


def test_begin_sets_running_defaults():
    timer = _timer(description="Notes")
    assert timer.status == TimerStatus.RUNNING
    assert timer.start_time == START
    assert timer.created_at == timer.updated_at == START
    assert timer.date == dt.date(2025, 11, 6)
    assert timer.end_time is None
    assert timer.paused_at is None
    assert timer.paused_duration_secs == 0
    assert timer.description == "Notes"
    assert timer.is_running and not timer.is_paused


def test_status_values_are_lowercase():
    assert [status.value for status in TimerStatus] == ["running", "paused", "stopped"]
    assert '"status":"paused"' in _timer(source_record_id=1).model_copy(update={"status": TimerStatus.PAUSED}).model_dump_json()


def test_pause_and_resume_accumulate_whole_seconds():
    timer = _timer()
    timer.mark_paused(START + dt.timedelta(minutes=5))
    assert timer.is_paused
    assert timer.paused_at == START + dt.timedelta(minutes=5)

    timer.mark_resumed(START + dt.timedelta(minutes=7, seconds=30, milliseconds=900))
    assert timer.is_running
    assert timer.paused_at is None
    assert timer.paused_duration_secs == 150
    assert timer.updated_at == START + dt.timedelta(minutes=7, seconds=30, milliseconds=900)

    timer.mark_paused(START + dt.timedelta(minutes=10))
    timer.mark_resumed(START + dt.timedelta(minutes=11))
    assert timer.paused_duration_secs == 210


def test_invalid_transitions_raise():
    timer = _timer()
    with pytest.raises(InvalidTransition):
        timer.mark_resumed(START)
    timer.mark_paused(START)
    with pytest.raises(InvalidTransition):
        timer.mark_paused(START)

    stopped = _timer()
    stopped.mark_stopped(START + dt.timedelta(minutes=1))
    with pytest.raises(InvalidTransition):
        stopped.mark_paused(START)
    with pytest.raises(InvalidTransition):
        stopped.mark_resumed(START)


def test_elapsed_running_paused_and_stopped():
    timer = _timer()
    assert timer.elapsed(START + dt.timedelta(minutes=30)) == dt.timedelta(minutes=30)

    timer.mark_paused(START + dt.timedelta(minutes=30))
    assert timer.elapsed(START + dt.timedelta(hours=5)) == dt.timedelta(minutes=30)

    timer.mark_resumed(START + dt.timedelta(minutes=50))
    assert timer.elapsed(START + dt.timedelta(minutes=60)) == dt.timedelta(minutes=40)

    timer.mark_stopped(START + dt.timedelta(minutes=70))
    assert timer.status == TimerStatus.STOPPED
    assert timer.elapsed(START + dt.timedelta(days=1)) == dt.timedelta(minutes=50)


def test_elapsed_is_clamped_at_zero():
    assert _timer().elapsed(START - dt.timedelta(minutes=1)) == dt.timedelta(0)


def test_stopping_a_paused_timer_folds_in_the_pause():
    timer = _timer()
    timer.mark_paused(START + dt.timedelta(minutes=10))
    timer.mark_stopped(START + dt.timedelta(minutes=25))
    assert timer.paused_at is None
    assert timer.paused_duration_secs == 900
    assert timer.end_time == START + dt.timedelta(minutes=25)


def test_to_work_record_requires_stopped_timer():
    timer = _timer(description="Write tests")
    with pytest.raises(InvalidTransition):
        timer.to_work_record()

    timer.mark_stopped(START + dt.timedelta(minutes=95))
    record = timer.to_work_record()
    assert record.id == PLACEHOLDER_RECORD_ID
    assert record.name == "Work"
    assert record.description == "Write tests"
    assert record.start == ClockTime.of(9, 0)
    assert record.end == ClockTime.of(10, 35)
    assert record.total_minutes == 95


def test_naive_timestamps_are_made_aware():
    timer = TimerState.model_validate(
        {
            "task_name": " Legacy ",
            "start_time": "2025-11-06T09:00:00",
            "date": "2025-11-06",
            "status": "running",
            "created_at": "2025-11-06T09:00:00",
            "updated_at": "2025-11-06T09:00:00",
        }
    )
    assert timer.task_name == "Legacy"
    assert timer.start_time.tzinfo is not None
