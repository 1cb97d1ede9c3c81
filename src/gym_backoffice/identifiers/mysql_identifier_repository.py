from __future__ import annotations

from typing import Sequence

from ..core.enums import IdentifierKind
from ..core.exceptions import IdentifierCollision, UniquenessViolation
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import UnnumberedEntity
from .repository import IdentifierRepository

# kind -> (table, ref column, number column, label expression, unique key name)
NAMESPACES = {
    IdentifierKind.CLIENT: (
        "clients",
        "client_ref",
        "client_number",
        "CONCAT(first_name, ' ', last_name)",
        "uq_clients_number",
    ),
    IdentifierKind.MEMBERSHIP_PLAN: (
        "membership_plans",
        "plan_ref",
        "plan_number",
        "name",
        "uq_membership_plans_number",
    ),
}


def raise_if_identifier_collision(exc: UniquenessViolation, kind: IdentifierKind, number: int) -> None:
    """Re-raise a duplicate on kind's number index as IdentifierCollision."""

    if exc.key == NAMESPACES[kind][4]:
        raise IdentifierCollision(kind, number, key=exc.key) from exc


class MySQLIdentifierRepository(IdentifierRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_identifiers(self, kind: IdentifierKind) -> Sequence[object]:
        table, _, number_col, _, _ = NAMESPACES[kind]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {number_col} AS number FROM {table} ORDER BY {number_col}")
            return [r["number"] for r in fetchall(cur)]

    def list_unnumbered(self, kind: IdentifierKind) -> Sequence[UnnumberedEntity]:
        table, ref_col, number_col, label_expr, _ = NAMESPACES[kind]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {ref_col} AS ref, {label_expr} AS label, {number_col} AS number
                FROM {table}
                WHERE {number_col} IS NULL OR {number_col} < 1
                ORDER BY created_at
                """
            )
            return [
                UnnumberedEntity(ref=r["ref"], label=r["label"] or "", current_value=r["number"])
                for r in fetchall(cur)
            ]

    def assign_identifier(self, kind: IdentifierKind, *, ref: str, number: int) -> bool:
        table, ref_col, number_col, _, _ = NAMESPACES[kind]
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(f"UPDATE {table} SET {number_col}=%s WHERE {ref_col}=%s", (int(number), ref))
                return cur.rowcount > 0
        except UniquenessViolation as exc:
            raise_if_identifier_collision(exc, kind, number)
            raise
