from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Mapping, Optional, Sequence

from ..core.enums import IdentifierKind
from ..core.exceptions import UniquenessViolation
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from ..identifiers.mysql_identifier_repository import raise_if_identifier_collision
from .model import Client
from .repository import ClientRepository

# Columns written from service-validated fields (everything but keys and timestamps).
WRITABLE_COLUMNS = (
    "first_name",
    "last_name",
    "email",
    "phone",
    "date_of_birth",
    "age",
    "height",
    "weight",
    "gender",
    "blood_group",
    "bmi",
    "aadhar_number",
    "photo_url",
    "address",
    "membership_plan_ref",
    "joining_date",
    "expiry_date",
    "membership_fee",
    "discount",
    "payment_date",
    "payment_mode",
    "transaction_id",
    "paid_amount",
    "emergency_contact_name",
    "emergency_contact_phone",
    "medical_conditions",
    "fitness_goals",
    "first_time_in_gym",
    "previous_gym_details",
)

_SELECT = f"""
    SELECT c.client_ref, c.client_number, c.created_at, c.updated_at,
           {", ".join("c." + col for col in WRITABLE_COLUMNS)},
           p.plan_number AS membership_plan_number, p.name AS membership_plan_name
    FROM clients c
    LEFT JOIN membership_plans p ON p.plan_ref = c.membership_plan_ref
"""


def _plain(value: Any) -> Any:
    return float(value) if isinstance(value, Decimal) else value


def _to_client(r: dict) -> Client:
    values = {col: _plain(r.get(col)) for col in WRITABLE_COLUMNS}
    values["discount"] = values.get("discount") or 0.0
    return Client(
        client_ref=r["client_ref"],
        client_number=r.get("client_number"),
        created_at=r["created_at"],
        updated_at=r["updated_at"],
        membership_plan_number=r.get("membership_plan_number"),
        membership_plan_name=r.get("membership_plan_name"),
        **values,
    )


class MySQLClientRepository(ClientRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _query(self, where: str, params: tuple, order_by: str) -> list[Client]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE {where} ORDER BY {order_by}", params)
            return [_to_client(r) for r in fetchall(cur)]

    def _get_one(self, where: str, params: tuple) -> Optional[Client]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE {where} LIMIT 1", params)
            r = fetchone(cur)
            return _to_client(r) if r else None

    def list_all(self) -> Sequence[Client]:
        return self._query("c.client_number >= 1", (), "c.client_number ASC")

    def list_expiring(self, *, start: date, end: date) -> Sequence[Client]:
        return self._query(
            "c.client_number >= 1 AND c.expiry_date BETWEEN %s AND %s",
            (start, end),
            "c.expiry_date ASC, c.client_number ASC",
        )

    def get_by_number(self, client_number: int) -> Optional[Client]:
        return self._get_one("c.client_number=%s", (int(client_number),))

    def get_by_ref(self, client_ref: str) -> Optional[Client]:
        return self._get_one("c.client_ref=%s", (client_ref,))

    def create(self, *, client_number: int, fields: Mapping[str, Any], now: datetime) -> Client:
        client_ref = str(uuid.uuid4())
        columns = [col for col in WRITABLE_COLUMNS if col in fields]
        names = ", ".join(["client_ref", "client_number", *columns, "created_at", "updated_at"])
        placeholders = ",".join(["%s"] * (len(columns) + 4))
        params = (client_ref, int(client_number), *(fields[col] for col in columns), now, now)

        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(f"INSERT INTO clients({names}) VALUES({placeholders})", params)
        except UniquenessViolation as exc:
            raise_if_identifier_collision(exc, IdentifierKind.CLIENT, client_number)
            raise

        created = self.get_by_ref(client_ref)
        if created is None:
            raise RuntimeError(f"Client {client_ref} vanished after insert")
        return created

    def update(self, client_ref: str, *, fields: Mapping[str, Any], now: datetime) -> Optional[Client]:
        columns = [col for col in WRITABLE_COLUMNS if col in fields]
        if columns:
            assignments = ", ".join(f"{col}=%s" for col in columns)
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    f"UPDATE clients SET {assignments}, updated_at=%s WHERE client_ref=%s",
                    (*(fields[col] for col in columns), now, client_ref),
                )
        return self.get_by_ref(client_ref)

    def delete(self, client_ref: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM clients WHERE client_ref=%s", (client_ref,))
            return cur.rowcount > 0
