from __future__ import annotations

import logging
from datetime import date, datetime, time
from typing import Optional, Union

from ..common.clock import Clock
from ..common.datetime_utils import parse_cutoff_time
from ..core.constants import DEFAULT_CUTOFF_TIME
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


def is_stale(record_date: date, now: datetime, cutoff: time) -> bool:
    """Whether an open record's day has unambiguously ended.

    Earlier days always have. Today only once now is past the cutoff. Future
    days never have.
    """

    today = now.date()
    if record_date < today:
        return True
    if record_date == today:
        return now > datetime.combine(today, cutoff)
    return False


class EndOfDaySweeper:
    """Force-closes attendance records left IN past their day's cutoff.

    Closing is a conditional update on "still IN, no checkout", so repeated
    or overlapping sweeps close each record once and only count their own
    closes.
    """

    def __init__(self, attendance: AttendanceRepository, clock: Clock, *, cutoff_time: Union[str, time] = DEFAULT_CUTOFF_TIME):
        self._attendance = attendance
        self._clock = clock
        self._cutoff = parse_cutoff_time(cutoff_time)

    @property
    def cutoff(self) -> time:
        return self._cutoff

    def sweep(self, cutoff_time: Union[str, time, None] = None, now: Optional[datetime] = None) -> int:
        cutoff = parse_cutoff_time(cutoff_time) if cutoff_time is not None else self._cutoff
        now = now or self._clock.now()

        closed = 0
        for record in self._attendance.list_open():
            if record.check_out_time is not None or not is_stale(record.attendance_date, now, cutoff):
                continue
            if self._attendance.close_open(attendance_id=record.attendance_id, check_out_time=cutoff):
                closed += 1

        if closed:
            logger.info("Auto-checkout closed %d attendance record(s) at %s", closed, cutoff.strftime("%H:%M:%S"))
        return closed
