from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional, Sequence

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_time
from .model import AttendancePatch, AttendanceRecord
from .repository import AttendanceRepository

_SELECT = """
    SELECT ar.attendance_id, ar.client_ref, ar.attendance_date, ar.check_in_time, ar.check_out_time,
           ar.status, ar.created_at,
           c.client_number, CONCAT(c.first_name, ' ', c.last_name) AS client_name, c.photo_url
    FROM attendance_records ar
    LEFT JOIN clients c ON c.client_ref = ar.client_ref
"""


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        client_ref=r["client_ref"],
        attendance_date=r["attendance_date"],
        check_in_time=normalize_mysql_time(r["check_in_time"]),
        check_out_time=normalize_mysql_time(r.get("check_out_time")),
        status=AttendanceStatus(r["status"]),
        created_at=r["created_at"],
        client_number=r.get("client_number"),
        client_name=(r.get("client_name") or "").strip() or None,
        photo_url=r.get("photo_url"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_client_and_date(self, client_ref: str, attendance_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{_SELECT} WHERE ar.client_ref=%s AND ar.attendance_date=%s",
                (client_ref, attendance_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def create(
        self,
        *,
        client_ref: str,
        attendance_date: date,
        patch: AttendancePatch,
        now: datetime,
    ) -> AttendanceRecord:
        # Plain INSERT: a concurrent first check-in hits uq_attendance_client_date.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(
                    client_ref, attendance_date, check_in_time, check_out_time, status, created_at, updated_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    client_ref,
                    attendance_date,
                    patch.check_in_time,
                    patch.check_out_time,
                    patch.status.value,
                    now,
                    now,
                ),
            )

        record = self.get_for_client_and_date(client_ref, attendance_date)
        if record is None:
            raise RuntimeError(f"Attendance for {client_ref} on {attendance_date} vanished after insert")
        return record

    def transition(self, *, current: AttendanceRecord, patch: AttendancePatch, now: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET status=%s, check_in_time=%s, check_out_time=%s, updated_at=%s
                WHERE attendance_id=%s AND status=%s AND check_in_time=%s
                """,
                (
                    patch.status.value,
                    patch.check_in_time,
                    patch.check_out_time,
                    now,
                    int(current.attendance_id),
                    current.status.value,
                    current.check_in_time,
                ),
            )
            return cur.rowcount > 0

    def list_open(self) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE ar.status='IN' AND ar.check_out_time IS NULL ORDER BY ar.attendance_date")
            return [_to_record(r) for r in fetchall(cur)]

    def close_open(self, *, attendance_id: int, check_out_time: time) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET status='OUT', check_out_time=%s, updated_at=NOW()
                WHERE attendance_id=%s AND status='IN' AND check_out_time IS NULL
                """,
                (check_out_time, int(attendance_id)),
            )
            return cur.rowcount > 0

    def query(
        self,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        client_ref: Optional[str] = None,
    ) -> Sequence[AttendanceRecord]:
        clauses: list[str] = []
        params: list[object] = []

        if start_date is not None:
            clauses.append("ar.attendance_date >= %s")
            params.append(start_date)
        if end_date is not None:
            clauses.append("ar.attendance_date <= %s")
            params.append(end_date)
        if client_ref is not None:
            clauses.append("ar.client_ref=%s")
            params.append(client_ref)

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{_SELECT} {where} ORDER BY ar.attendance_date DESC, ar.check_in_time DESC",
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def delete(self, attendance_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance_records WHERE attendance_id=%s", (int(attendance_id),))
            return cur.rowcount > 0
