from __future__ import annotations

import datetime as dt
from typing import Any

from .exceptions import EmptyName


def normalize_name(value: Any) -> str:
    """Return the trimmed name, rejecting blank values."""
    text = str(value).strip() if value is not None else ""
    if not text:
        raise EmptyName("Name cannot be empty")
    return text


def normalize_description(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def format_minutes(total_minutes: int) -> str:
    hours, minutes = divmod(max(int(total_minutes), 0), 60)
    return f"{hours}h {minutes:02d}m"


def format_elapsed(duration: dt.timedelta) -> str:
    total = max(int(duration.total_seconds()), 0)
    hours, rem = divmod(total, 3600)
    minutes, seconds = divmod(rem, 60)
    if hours > 0:
        return f"{hours}h {minutes:02d}m {seconds:02d}s"
    return f"{minutes}m {seconds:02d}s"


def format_clock(value: dt.datetime) -> str:
    return value.strftime("%H:%M:%S")
