from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any, Mapping, Optional

from ..common.clock import Clock
from ..common.datetime_utils import parse_iso_date
from ..common.validators import (
    optional_number,
    optional_text,
    parse_human_id,
    require_non_empty,
    require_positive_int,
)
from ..core.enums import IdentifierKind
from ..core.exceptions import ClientNotFound, NotFoundError, ValidationError
from ..identifiers.allocator import IdentifierAllocator
from ..identifiers.model import RenumberedEntity
from ..memberships.service import MembershipService
from .model import Client
from .repository import ClientRepository

logger = logging.getLogger(__name__)

_REQUIRED_TEXT = {
    "first_name": "First name",
    "last_name": "Last name",
    "phone": "Phone",
    "address": "Address",
    "emergency_contact_name": "Emergency contact name",
    "emergency_contact_phone": "Emergency contact phone",
}
_OPTIONAL_TEXT = (
    "gender",
    "blood_group",
    "aadhar_number",
    "photo_url",
    "payment_mode",
    "transaction_id",
    "medical_conditions",
    "fitness_goals",
    "first_time_in_gym",
    "previous_gym_details",
)
_OPTIONAL_NUMBERS = ("height", "weight", "bmi", "membership_fee", "paid_amount")
_OPTIONAL_DATES = ("joining_date", "expiry_date", "payment_date")


class ClientService:
    """Use cases: manage clients and resolve the ids staff type in."""

    def __init__(
        self,
        clients: ClientRepository,
        memberships: MembershipService,
        allocator: IdentifierAllocator,
        clock: Clock,
    ):
        self._clients = clients
        self._memberships = memberships
        self._allocator = allocator
        self._clock = clock

    def find_client(self, client_id: Any) -> Optional[Client]:
        """Look a client up by running number, or by internal reference.

        Internal references are still accepted for older links.
        """
        if client_id is None or str(client_id).strip() == "":
            return None
        number = parse_human_id(client_id)
        if number is not None:
            return self._clients.get_by_number(number)
        return self._clients.get_by_ref(str(client_id).strip())

    def get_client(self, client_id: Any) -> Client:
        client = self.find_client(client_id)
        if not client:
            raise ClientNotFound(client_id)
        return client

    def resolve_client(self, client_id: Any) -> str:
        return self.get_client(client_id).client_ref

    def list_clients(self) -> list[Client]:
        return [c for c in self._clients.list_all() if c.client_number and c.client_number >= 1]

    def list_expiring(self) -> list[Client]:
        """Clients whose membership ends between today and the end of next week."""
        today = self._clock.now().date()
        week_start = today - timedelta(days=today.weekday())
        next_week_end = week_start + timedelta(days=13)
        return list(self._clients.list_expiring(start=today, end=next_week_end))

    def _clean(self, payload: Mapping[str, Any], *, partial: bool) -> dict:
        fields: dict[str, Any] = {}

        for key, label in _REQUIRED_TEXT.items():
            if not partial or key in payload:
                fields[key] = require_non_empty(payload.get(key), label)

        if not partial or "date_of_birth" in payload:
            if not payload.get("date_of_birth"):
                raise ValidationError("Date of birth is required")
            fields["date_of_birth"] = parse_iso_date(payload["date_of_birth"])

        if "email" in payload:
            email = optional_text(payload.get("email"))
            fields["email"] = email.lower() if email else None

        for key in _OPTIONAL_TEXT:
            if key in payload:
                fields[key] = optional_text(payload.get(key))

        for key in _OPTIONAL_NUMBERS:
            if key in payload:
                fields[key] = optional_number(payload.get(key), key.replace("_", " ").capitalize())

        for key in _OPTIONAL_DATES:
            if key in payload:
                fields[key] = parse_iso_date(payload[key]) if payload.get(key) else None

        if "age" in payload:
            fields["age"] = require_positive_int(payload["age"], "Age") if payload.get("age") not in (None, "") else None

        if not partial or "discount" in payload:
            fields["discount"] = optional_number(payload.get("discount"), "Discount") or 0.0

        if "membership_plan" in payload:
            fields["membership_plan_ref"] = self._resolve_plan(payload.get("membership_plan"))

        return fields

    def _resolve_plan(self, plan_id: Any) -> Optional[str]:
        if plan_id is None or str(plan_id).strip() == "":
            return None
        try:
            return self._memberships.get_plan(plan_id).plan_ref
        except NotFoundError as exc:
            raise ValidationError(f"{exc}. Please select a valid membership.") from exc

    def create_client(self, payload: Mapping[str, Any]) -> Client:
        fields = self._clean(payload, partial=False)
        now = self._clock.now()
        client = self._allocator.create_with_identifier(
            IdentifierKind.CLIENT,
            lambda number: self._clients.create(client_number=number, fields=fields, now=now),
        )
        logger.info("Created client #%s (%s)", client.client_number, client.full_name)
        return client

    def update_client(self, client_id: Any, payload: Mapping[str, Any]) -> Client:
        client = self.get_client(client_id)
        fields = self._clean(payload, partial=True)
        updated = self._clients.update(client.client_ref, fields=fields, now=self._clock.now())
        if not updated:
            raise ClientNotFound(client_id)
        return updated

    def delete_client(self, client_id: Any) -> None:
        client = self.get_client(client_id)
        if not self._clients.delete(client.client_ref):
            raise ClientNotFound(client_id)
        logger.info("Deleted client #%s (%s)", client.client_number, client.full_name)

    def renumber(self) -> list[RenumberedEntity]:
        return self._allocator.repair(IdentifierKind.CLIENT)

    @staticmethod
    def to_payload(client: Client) -> dict:
        def _d(value):
            return value.isoformat() if value else None

        return {
            "client_id": client.client_number,
            "first_name": client.first_name,
            "last_name": client.last_name,
            "email": client.email,
            "phone": client.phone,
            "date_of_birth": _d(client.date_of_birth),
            "age": client.age,
            "height": client.height,
            "weight": client.weight,
            "gender": client.gender,
            "blood_group": client.blood_group,
            "bmi": client.bmi,
            "aadhar_number": client.aadhar_number,
            "photo_url": client.photo_url,
            "address": client.address,
            "membership_plan": client.membership_plan_number,
            "membership_name": client.membership_plan_name,
            "joining_date": _d(client.joining_date),
            "expiry_date": _d(client.expiry_date),
            "membership_fee": client.membership_fee,
            "discount": client.discount,
            "payment_date": _d(client.payment_date),
            "payment_mode": client.payment_mode,
            "transaction_id": client.transaction_id,
            "paid_amount": client.paid_amount,
            "emergency_contact_name": client.emergency_contact_name,
            "emergency_contact_phone": client.emergency_contact_phone,
            "medical_conditions": client.medical_conditions,
            "fitness_goals": client.fitness_goals,
            "first_time_in_gym": client.first_time_in_gym,
            "previous_gym_details": client.previous_gym_details,
            "created_at": client.created_at.isoformat(),
            "updated_at": _d(client.updated_at),
        }
