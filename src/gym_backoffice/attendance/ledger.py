from __future__ import annotations

import logging
from datetime import date, datetime, time
from typing import Optional, Union

from ..common.clock import Clock
from ..common.datetime_utils import parse_iso_date, parse_wall_time
from ..core.enums import AttendanceStatus
from ..core.exceptions import UniquenessViolation
from .model import AttendancePatch, AttendanceRecord
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

ATTENDANCE_KEY = "uq_attendance_client_date"
ALREADY_RECORDED = "This attendance record already exists for this client and date. Please try again."


def next_state(existing: Optional[AttendanceRecord], at: time) -> AttendancePatch:
    """State after one check-in event at the given time.

    No record -> IN. IN -> OUT (check-in time kept). OUT -> IN again with a
    fresh check-in time and no checkout.
    """

    if existing is None:
        return AttendancePatch(status=AttendanceStatus.IN, check_in_time=at)

    if existing.status == AttendanceStatus.IN:
        return AttendancePatch(
            status=AttendanceStatus.OUT,
            check_in_time=existing.check_in_time,
            check_out_time=at,
        )

    # Third event of the day: toggles back rather than opening a second session.
    return AttendancePatch(status=AttendanceStatus.IN, check_in_time=at)


class AttendanceLedger:
    """Owns the per-client, per-day attendance record.

    Callers run EndOfDaySweeper before recording, so records from earlier
    days are already closed when a new event arrives.

    Each event is read-decide-write. A write that finds the record no longer
    in the state that was read (another event or a sweep got there first)
    raises UniquenessViolation instead of overwriting it.
    """

    def __init__(self, attendance: AttendanceRepository, clock: Clock):
        self._attendance = attendance
        self._clock = clock

    def record_check_in(
        self,
        client_ref: str,
        attendance_date: Union[date, datetime, str],
        check_in_time: Union[time, str],
    ) -> AttendanceRecord:
        day = parse_iso_date(attendance_date)
        at = parse_wall_time(check_in_time)

        existing = self._attendance.get_for_client_and_date(client_ref, day)
        patch = next_state(existing, at)
        now = self._clock.now()

        if existing is None:
            try:
                return self._attendance.create(client_ref=client_ref, attendance_date=day, patch=patch, now=now)
            except UniquenessViolation as exc:
                logger.warning("Concurrent first check-in for %s on %s", client_ref, day)
                raise UniquenessViolation(ALREADY_RECORDED, key=exc.key) from exc

        if not self._attendance.transition(current=existing, patch=patch, now=now):
            logger.warning("Attendance %s changed before check-in at %s", existing.attendance_id, at)
            raise UniquenessViolation(ALREADY_RECORDED, key=ATTENDANCE_KEY)

        updated = self._attendance.get_for_client_and_date(client_ref, day)
        if updated is None:
            raise RuntimeError(f"Attendance for {client_ref} on {day} vanished after check-in")
        return updated
