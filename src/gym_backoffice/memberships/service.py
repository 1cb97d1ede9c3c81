from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from ..common.clock import Clock
from ..common.validators import (
    optional_number,
    optional_text,
    parse_bool,
    parse_human_id,
    require_non_empty,
    require_positive_int,
)
from ..core.enums import IdentifierKind
from ..core.exceptions import NotFoundError, ValidationError
from ..identifiers.allocator import IdentifierAllocator
from ..identifiers.model import RenumberedEntity
from .model import MembershipPlan
from .repository import MembershipPlanRepository

logger = logging.getLogger(__name__)


def format_amount(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else f"{value:.2f}"


class MembershipService:
    """Use cases: manage membership plans."""

    def __init__(self, plans: MembershipPlanRepository, allocator: IdentifierAllocator, clock: Clock):
        self._plans = plans
        self._allocator = allocator
        self._clock = clock

    def list_plans(self, *, include_inactive: bool = False) -> list[MembershipPlan]:
        plans = self._plans.list_all(include_inactive=include_inactive)
        return [p for p in plans if p.plan_number and p.plan_number >= 1]

    def find_plan(self, plan_id: Any) -> Optional[MembershipPlan]:
        number = parse_human_id(plan_id)
        if number is not None:
            return self._plans.get_by_number(number)
        return self._plans.get_by_ref(str(plan_id))

    def get_plan(self, plan_id: Any) -> MembershipPlan:
        plan = self.find_plan(plan_id)
        if not plan:
            raise NotFoundError(f"Membership with ID {plan_id} not found")
        return plan

    def _clean(self, payload: Mapping[str, Any], *, partial: bool) -> dict:
        fields: dict[str, Any] = {}

        if not partial or "name" in payload:
            fields["name"] = require_non_empty(payload.get("name"), "Name")
        if "description" in payload:
            fields["description"] = optional_text(payload.get("description"))
        if not partial or "duration_days" in payload:
            fields["duration_days"] = require_positive_int(payload.get("duration_days"), "Duration (days)")
        if not partial or "price" in payload:
            price = optional_number(payload.get("price"), "Price")
            if price is not None and price < 0:
                raise ValidationError("Price cannot be negative")
            fields["price"] = price or 0.0
        if not partial or "is_active" in payload:
            fields["is_active"] = parse_bool(payload.get("is_active"), default=True)

        return fields

    def create_plan(self, payload: Mapping[str, Any]) -> MembershipPlan:
        fields = self._clean(payload, partial=False)
        now = self._clock.now()
        plan = self._allocator.create_with_identifier(
            IdentifierKind.MEMBERSHIP_PLAN,
            lambda number: self._plans.create(plan_number=number, fields=fields, now=now),
        )
        logger.info("Created membership plan #%s (%s)", plan.plan_number, plan.name)
        return plan

    def update_plan(self, plan_id: Any, payload: Mapping[str, Any]) -> MembershipPlan:
        plan = self.get_plan(plan_id)
        fields = self._clean(payload, partial=True)
        updated = self._plans.update(plan.plan_ref, fields=fields, now=self._clock.now())
        if not updated:
            raise NotFoundError(f"Membership with ID {plan_id} not found")
        return updated

    def delete_plan(self, plan_id: Any) -> None:
        plan = self.get_plan(plan_id)
        if not self._plans.delete(plan.plan_ref):
            raise NotFoundError(f"Membership with ID {plan_id} not found")

    def find_or_create(self, *, duration_days: int, price: float) -> MembershipPlan:
        """Plan with exactly these terms, created on first use."""

        existing = self._plans.find_by_terms(duration_days=duration_days, price=price)
        if existing and existing.plan_number:
            return existing

        months = round(duration_days / 30)
        name = f"{months} Month{'s' if months != 1 else ''} - ₹{format_amount(price)}"
        return self.create_plan({"name": name, "duration_days": duration_days, "price": price, "is_active": True})

    def renumber(self) -> list[RenumberedEntity]:
        return self._allocator.repair(IdentifierKind.MEMBERSHIP_PLAN)

    @staticmethod
    def to_payload(plan: MembershipPlan) -> dict:
        return {
            "membership_id": plan.plan_number,
            "name": plan.name,
            "description": plan.description,
            "duration_days": plan.duration_days,
            "price": plan.price,
            "is_active": plan.is_active,
            "created_at": plan.created_at.isoformat(),
            "updated_at": plan.updated_at.isoformat(),
        }
