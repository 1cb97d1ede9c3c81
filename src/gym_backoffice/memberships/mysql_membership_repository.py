from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Mapping, Optional, Sequence

from ..core.enums import IdentifierKind
from ..core.exceptions import UniquenessViolation
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from ..identifiers.mysql_identifier_repository import raise_if_identifier_collision
from .model import MembershipPlan
from .repository import MembershipPlanRepository

_COLUMNS = "plan_ref, plan_number, name, description, duration_days, price, is_active, created_at, updated_at"
_WRITABLE = ("name", "description", "duration_days", "price", "is_active")


def _to_plan(r: dict) -> MembershipPlan:
    return MembershipPlan(
        plan_ref=r["plan_ref"],
        plan_number=r.get("plan_number"),
        name=r["name"],
        description=r.get("description"),
        duration_days=int(r["duration_days"]),
        price=float(r.get("price") or 0),
        is_active=bool(r.get("is_active", True)),
        created_at=r["created_at"],
        updated_at=r["updated_at"],
    )


class MySQLMembershipPlanRepository(MembershipPlanRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _get_one(self, where: str, params: tuple) -> Optional[MembershipPlan]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM membership_plans WHERE {where} LIMIT 1", params)
            r = fetchone(cur)
            return _to_plan(r) if r else None

    def list_all(self, *, include_inactive: bool = False) -> Sequence[MembershipPlan]:
        where = "plan_number >= 1" if include_inactive else "plan_number >= 1 AND is_active=1"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM membership_plans WHERE {where} ORDER BY plan_number")
            return [_to_plan(r) for r in fetchall(cur)]

    def get_by_number(self, plan_number: int) -> Optional[MembershipPlan]:
        return self._get_one("plan_number=%s", (int(plan_number),))

    def get_by_ref(self, plan_ref: str) -> Optional[MembershipPlan]:
        return self._get_one("plan_ref=%s", (plan_ref,))

    def find_by_terms(self, *, duration_days: int, price: float) -> Optional[MembershipPlan]:
        return self._get_one("duration_days=%s AND price=%s", (int(duration_days), price))

    def create(self, *, plan_number: int, fields: Mapping[str, Any], now: datetime) -> MembershipPlan:
        plan_ref = str(uuid.uuid4())
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO membership_plans(
                        plan_ref, plan_number, name, description, duration_days, price, is_active, created_at, updated_at
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        plan_ref,
                        int(plan_number),
                        fields["name"],
                        fields.get("description"),
                        int(fields["duration_days"]),
                        fields.get("price") or 0,
                        1 if fields.get("is_active", True) else 0,
                        now,
                        now,
                    ),
                )
        except UniquenessViolation as exc:
            raise_if_identifier_collision(exc, IdentifierKind.MEMBERSHIP_PLAN, plan_number)
            raise

        created = self.get_by_ref(plan_ref)
        if created is None:
            raise RuntimeError(f"Membership plan {plan_ref} vanished after insert")
        return created

    def update(self, plan_ref: str, *, fields: Mapping[str, Any], now: datetime) -> Optional[MembershipPlan]:
        changes = [(col, fields[col]) for col in _WRITABLE if col in fields]
        if changes:
            assignments = ", ".join(f"{col}=%s" for col, _ in changes)
            params = [int(v) if isinstance(v, bool) else v for _, v in changes]
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    f"UPDATE membership_plans SET {assignments}, updated_at=%s WHERE plan_ref=%s",
                    (*params, now, plan_ref),
                )
        return self.get_by_ref(plan_ref)

    def delete(self, plan_ref: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM membership_plans WHERE plan_ref=%s", (plan_ref,))
            return cur.rowcount > 0
