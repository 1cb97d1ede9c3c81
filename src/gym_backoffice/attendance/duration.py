from __future__ import annotations

from datetime import time
from typing import Optional, Union

from ..common.datetime_utils import parse_wall_time

MINUTES_PER_DAY = 24 * 60

TimeLike = Union[str, time]


def _minute_of_day(value: TimeLike) -> int:
    t = parse_wall_time(value)
    return t.hour * 60 + t.minute


def duration(check_in: Optional[TimeLike], check_out: Optional[TimeLike]) -> Optional[str]:
    """Elapsed time between two wall-clock times, e.g. "2h 30m".

    Seconds are ignored. A checkout earlier than the check-in is taken to be
    on the following day. Returns None unless both times are known.
    """

    if check_in in (None, "") or check_out in (None, ""):
        return None

    start = _minute_of_day(check_in)
    end = _minute_of_day(check_out)
    if end < start:
        end += MINUTES_PER_DAY

    hours, minutes = divmod(end - start, 60)
    if hours == 0:
        return f"{minutes}m"
    if minutes == 0:
        return f"{hours}h"
    return f"{hours}h {minutes}m"
