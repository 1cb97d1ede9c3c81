from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional, Protocol, Sequence

from .model import AttendancePatch, AttendanceRecord


class AttendanceRepository(Protocol):
    def get_for_client_and_date(self, client_ref: str, attendance_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def create(
        self,
        *,
        client_ref: str,
        attendance_date: date,
        patch: AttendancePatch,
        now: datetime,
    ) -> AttendanceRecord:
        """Insert the first record of the day for client_ref.

        Raises UniquenessViolation when (client_ref, attendance_date) already
        has a record.
        """

        raise NotImplementedError

    def transition(
        self,
        *,
        current: AttendanceRecord,
        patch: AttendancePatch,
        now: datetime,
    ) -> bool:
        """Overwrite the presence state of current, only if it is unchanged.

        The write is guarded on the status and check-in time that were read.
        Returns False when the record changed (or vanished) meanwhile.
        """

        raise NotImplementedError

    def list_open(self) -> Sequence[AttendanceRecord]:
        """Records with status IN and no checkout time."""

        raise NotImplementedError

    def close_open(self, *, attendance_id: int, check_out_time: time) -> bool:
        """Force a checkout, only if the record is still open.

        Returns False when the record was closed (or deleted) meanwhile.
        """

        raise NotImplementedError

    def query(
        self,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        client_ref: Optional[str] = None,
    ) -> Sequence[AttendanceRecord]:
        """Records filtered by inclusive date range and/or client.

        Newest day first, latest check-in first within a day.
        """

        raise NotImplementedError

    def delete(self, attendance_id: int) -> bool:
        raise NotImplementedError
