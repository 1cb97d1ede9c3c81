"""Bulk import of clients from the legacy gym software's CSV export.

Columns are positional; the header row is skipped. Each distinct
(duration, price) subscription becomes a membership plan, created on first
use.
"""

from __future__ import annotations

import csv
import io
import logging
import re
from dataclasses import dataclass, field
from typing import Optional

from ..clients.service import ClientService
from ..core.constants import DEFAULT_PLAN_DURATION_DAYS, IMPORT_ERROR_LIMIT
from ..core.exceptions import DomainError
from ..memberships.service import MembershipService

logger = logging.getLogger(__name__)

# Column positions in the export.
COL_USER_ID = 0
COL_FIRST_NAME = 1
COL_LAST_NAME = 2
COL_GENDER = 3
COL_PT_ENABLED = 4
COL_SUB_MONTHS = 5
COL_SUB_AMOUNT = 6
COL_PAID_AMOUNT = 7
COL_PENDING = 8
COL_RECENT_PAID = 9
COL_JOINED = 10
COL_RENEWED = 11
COL_EXPIRY = 12
COL_MOBILE = 13
COL_AADHAR = 14
COL_HEIGHT = 15
COL_WEIGHT = 16
COL_EMAIL = 17
COL_DOB = 18
COL_GYM_GOAL = 19
COL_ADDRESS = 20
COL_ADDED_BY = 21

# Common plans map to exact durations; anything else is 30 days a month.
MONTHS_TO_DAYS = {1: 30, 2: 60, 3: 90, 6: 180, 12: 365, 13: 395, 14: 420, 15: 450}

DEFAULT_DATE_OF_BIRTH = "1990-01-01"
DEFAULT_MOBILE = "0000000000"
EMERGENCY_CONTACT_PLACEHOLDER = "Emergency Contact"


@dataclass(frozen=True)
class ImportRow:
    line_number: int
    user_id: str
    first_name: str
    last_name: str
    gender: str
    subscription_months: str
    subscription_amount: float
    paid_amount: float
    recent_paid_date: str
    joined_date: str
    renewed_date: str
    expiry_date: str
    mobile: str
    aadhar: str
    height: str
    weight: str
    email: str
    date_of_birth: str
    gym_goal: str
    address: str


@dataclass
class ImportResult:
    created: int = 0
    skipped: int = 0
    errors: list[str] = field(default_factory=list)

    def to_payload(self) -> dict:
        return {
            "message": f"Import complete. Created: {self.created}, Skipped: {self.skipped}",
            "created": self.created,
            "skipped": self.skipped,
            "errors": self.errors[:IMPORT_ERROR_LIMIT],
        }


def _amount(value: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def parse_csv_rows(csv_text: str) -> list[ImportRow]:
    """Data rows of the export (header skipped, blank lines dropped)."""

    reader = csv.reader(io.StringIO(csv_text.lstrip("\ufeff")))
    rows: list[ImportRow] = []

    for index, raw in enumerate(reader):
        cells = [cell.strip() for cell in raw]
        if index == 0 or not any(cells):
            continue

        def cell(col: int) -> str:
            return cells[col] if col < len(cells) else ""

        rows.append(
            ImportRow(
                line_number=reader.line_num,
                user_id=cell(COL_USER_ID),
                first_name=cell(COL_FIRST_NAME) or "Unknown",
                last_name=cell(COL_LAST_NAME) or ".",
                gender=cell(COL_GENDER),
                subscription_months=cell(COL_SUB_MONTHS),
                subscription_amount=_amount(cell(COL_SUB_AMOUNT)),
                paid_amount=_amount(cell(COL_PAID_AMOUNT)),
                recent_paid_date=cell(COL_RECENT_PAID),
                joined_date=cell(COL_JOINED),
                renewed_date=cell(COL_RENEWED),
                expiry_date=cell(COL_EXPIRY),
                mobile=re.sub(r"\s", "", cell(COL_MOBILE)) or DEFAULT_MOBILE,
                aadhar=cell(COL_AADHAR),
                height=cell(COL_HEIGHT),
                weight=cell(COL_WEIGHT),
                email=cell(COL_EMAIL),
                date_of_birth=cell(COL_DOB),
                gym_goal=cell(COL_GYM_GOAL),
                address=cell(COL_ADDRESS) or "N/A",
            )
        )

    return rows


def to_duration_days(subscription_months: str) -> int:
    """'3 Months' -> 90, '12 Months' -> 365, '5 Months' -> 150."""

    digits = re.sub(r"\D", "", subscription_months or "")
    if not digits:
        return DEFAULT_PLAN_DURATION_DAYS
    months = int(digits)
    return MONTHS_TO_DAYS.get(months, months * 30)


def row_to_client_payload(row: ImportRow, plan_number: Optional[int]) -> dict:
    joining_date = row.joined_date or row.renewed_date
    payment_date = row.recent_paid_date or joining_date

    return {
        "first_name": row.first_name,
        "last_name": row.last_name,
        "email": row.email or None,
        "phone": row.mobile,
        "date_of_birth": row.date_of_birth or DEFAULT_DATE_OF_BIRTH,
        "address": row.address,
        "emergency_contact_name": EMERGENCY_CONTACT_PLACEHOLDER,
        "emergency_contact_phone": row.mobile,
        "membership_plan": plan_number,
        "joining_date": joining_date or None,
        "expiry_date": row.expiry_date or None,
        "membership_fee": row.subscription_amount or None,
        "discount": 0,
        "paid_amount": row.paid_amount or None,
        "payment_date": payment_date or None,
        "gender": row.gender or None,
        "height": row.height or None,
        "weight": row.weight or None,
        "aadhar_number": row.aadhar or None,
        "fitness_goals": row.gym_goal or None,
    }


class ClientImporter:
    def __init__(self, clients: ClientService, memberships: MembershipService):
        self._clients = clients
        self._memberships = memberships

    def import_csv(self, csv_text: str) -> ImportResult:
        rows = parse_csv_rows(csv_text)
        result = ImportResult()
        plan_numbers: dict[tuple[int, float], int] = {}

        for row in rows:
            try:
                duration_days = to_duration_days(row.subscription_months)
                price = row.subscription_amount or 0.0
                key = (duration_days, price)
                if key not in plan_numbers:
                    plan = self._memberships.find_or_create(duration_days=duration_days, price=price)
                    plan_numbers[key] = plan.plan_number

                self._clients.create_client(row_to_client_payload(row, plan_numbers[key]))
                result.created += 1
            except DomainError as exc:
                result.errors.append(f"Row {row.line_number} ({row.first_name} {row.last_name}): {exc}")
                result.skipped += 1

        logger.info("CSV import finished: created=%d skipped=%d", result.created, result.skipped)
        return result
