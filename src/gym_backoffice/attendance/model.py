from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional

from ..core.enums import AttendanceStatus
from .duration import duration


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: a client's attendance for one calendar day.

    (client_ref, attendance_date) is the natural key. OUT records always
    carry a checkout time, IN records never do.
    """

    attendance_id: int
    client_ref: str
    attendance_date: date
    check_in_time: time
    check_out_time: Optional[time]
    status: AttendanceStatus
    created_at: datetime
    # Read-model fields joined from the client, for display.
    client_number: Optional[int] = None
    client_name: Optional[str] = None
    photo_url: Optional[str] = None

    @property
    def duration(self) -> Optional[str]:
        if self.status != AttendanceStatus.OUT:
            return None
        return duration(self.check_in_time, self.check_out_time)


@dataclass(frozen=True)
class AttendancePatch:
    """Full presence state written by one check-in event."""

    status: AttendanceStatus
    check_in_time: time
    check_out_time: Optional[time] = None
