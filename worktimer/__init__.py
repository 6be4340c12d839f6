"""Local time tracking: per-day work records and a shared active timer."""

from .exceptions import WorkTimerError
from .models import ClockTime, DayData, WorkRecord
from .services import StoreManager
from .timer import TimerState, TimerStatus

__version__ = "0.1.0"

__all__ = [
    "ClockTime",
    "DayData",
    "StoreManager",
    "TimerState",
    "TimerStatus",
    "WorkRecord",
    "WorkTimerError",
]
