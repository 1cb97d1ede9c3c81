from __future__ import annotations

import logging
from datetime import time
from typing import Any, Optional, Protocol

from ..common.datetime_utils import format_wall_time, parse_cutoff_time, parse_iso_date, parse_wall_time
from ..core.exceptions import ClientNotFound, NotFoundError, ValidationError
from .ledger import AttendanceLedger
from .model import AttendanceRecord
from .repository import AttendanceRepository
from .sweeper import EndOfDaySweeper

logger = logging.getLogger(__name__)


class ClientResolver(Protocol):
    def resolve_client(self, client_id: Any) -> str:
        """Internal reference for a client number (or legacy reference).

        Raises ClientNotFound.
        """

        raise NotImplementedError


class AttendanceService:
    """Use cases around attendance.

    Every read and write sweeps first, so stale open records are closed
    before anything is looked at.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        ledger: AttendanceLedger,
        sweeper: EndOfDaySweeper,
        clients: ClientResolver,
    ):
        self._attendance = attendance
        self._ledger = ledger
        self._sweeper = sweeper
        self._clients = clients

    def record_check_in(self, client_id: Any, attendance_date: Any, attendance_time: Any) -> AttendanceRecord:
        if client_id in (None, "") or not attendance_date or not attendance_time:
            raise ValidationError("Client ID, date, and time are required")

        day = parse_iso_date(attendance_date)
        at = parse_wall_time(attendance_time)

        self._sweeper.sweep()
        client_ref = self._clients.resolve_client(client_id)
        record = self._ledger.record_check_in(client_ref, day, at)
        logger.debug("Client %s is %s on %s", client_id, record.status.value, day)
        return record

    def list_attendance(self, *, attendance_date: Any = None, client_id: Any = None) -> list[AttendanceRecord]:
        day = parse_iso_date(attendance_date) if attendance_date else None

        self._sweeper.sweep()

        client_ref: Optional[str] = None
        if client_id not in (None, ""):
            try:
                client_ref = self._clients.resolve_client(client_id)
            except ClientNotFound:
                return []

        return list(self._attendance.query(start_date=day, end_date=day, client_ref=client_ref))

    def force_checkout(self, end_time: Any = None) -> tuple[int, time]:
        cutoff = parse_cutoff_time(end_time) if end_time else self._sweeper.cutoff
        return self._sweeper.sweep(cutoff), cutoff

    def delete_attendance(self, attendance_id: Any) -> None:
        try:
            attendance_id = int(attendance_id)
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid attendance ID: {attendance_id!r}") from None
        if not self._attendance.delete(attendance_id):
            raise NotFoundError(f"Attendance record {attendance_id} not found")

    @staticmethod
    def to_payload(record: AttendanceRecord) -> dict:
        return {
            "id": record.attendance_id,
            "client_id": record.client_number,
            "client_name": record.client_name,
            "photo_url": record.photo_url,
            "attendance_date": record.attendance_date.isoformat(),
            "check_in_time": format_wall_time(record.check_in_time),
            "check_out_time": format_wall_time(record.check_out_time) if record.check_out_time else None,
            "status": record.status.value,
            "duration": record.duration,
            "created_at": record.created_at.isoformat(),
        }
