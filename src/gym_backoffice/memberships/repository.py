from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Optional, Protocol, Sequence

from .model import MembershipPlan


class MembershipPlanRepository(Protocol):
    def list_all(self, *, include_inactive: bool = False) -> Sequence[MembershipPlan]:
        raise NotImplementedError

    def get_by_number(self, plan_number: int) -> Optional[MembershipPlan]:
        raise NotImplementedError

    def get_by_ref(self, plan_ref: str) -> Optional[MembershipPlan]:
        raise NotImplementedError

    def find_by_terms(self, *, duration_days: int, price: float) -> Optional[MembershipPlan]:
        raise NotImplementedError

    def create(self, *, plan_number: int, fields: Mapping[str, Any], now: datetime) -> MembershipPlan:
        """Insert a plan under plan_number.

        Raises IdentifierCollision when plan_number is already taken.
        """

        raise NotImplementedError

    def update(self, plan_ref: str, *, fields: Mapping[str, Any], now: datetime) -> Optional[MembershipPlan]:
        raise NotImplementedError

    def delete(self, plan_ref: str) -> bool:
        raise NotImplementedError
