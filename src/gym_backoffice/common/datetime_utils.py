from __future__ import annotations

import re
from datetime import date, datetime, time
from typing import Union

from ..core.exceptions import ValidationError

_WALL_TIME = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")
_CUTOFF_TIME = re.compile(r"^([01]\d|2[0-3]):[0-5]\d(:[0-5]\d)?$")


def parse_iso_date(value: Union[str, date, datetime]) -> date:
    """Parse YYYY-MM-DD string into date.

    A datetime is reduced to its calendar day, which is how attendance dates
    are normalized before they are used as part of a key.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    try:
        if len(text) > 10 and text[10] == "T":
            # Full ISO timestamp; the time part must be valid too.
            return datetime.fromisoformat(text).date()
        return datetime.strptime(text, "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"Invalid date {value!r}, expected YYYY-MM-DD") from None


def parse_wall_time(value: Union[str, time]) -> time:
    """Parse HH:MM or HH:MM:SS into a time of day."""
    if isinstance(value, time):
        return value
    m = _WALL_TIME.match(str(value).strip())
    if not m:
        raise ValidationError(f"Invalid time {value!r}, expected HH:MM or HH:MM:SS")
    hours, minutes = int(m.group(1)), int(m.group(2))
    seconds = int(m.group(3)) if m.group(3) else 0
    if hours > 23 or minutes > 59 or seconds > 59:
        raise ValidationError(f"Invalid time {value!r}, expected HH:MM or HH:MM:SS")
    return time(hour=hours, minute=minutes, second=seconds)


def parse_cutoff_time(value: Union[str, time]) -> time:
    """Parse an end-of-day cutoff.

    HH:MM is widened to the last second of that minute (22:00 -> 22:00:59).
    """
    if isinstance(value, time):
        return value
    text = str(value).strip()
    if not _CUTOFF_TIME.match(text):
        raise ValidationError("Invalid end_time format. Use HH:MM:SS or HH:MM (e.g., 23:59:59 or 22:00)")
    if text.count(":") == 1:
        text = f"{text}:59"
    return parse_wall_time(text)


def format_wall_time(value: time) -> str:
    if value.second:
        return value.strftime("%H:%M:%S")
    return value.strftime("%H:%M")


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()
