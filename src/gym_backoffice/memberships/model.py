from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class MembershipPlan:
    """Domain entity: a membership plan clients subscribe to.

    plan_ref is the internal reference used by relations; plan_number is the
    dense number shown to staff.
    """

    plan_ref: str
    plan_number: Optional[int]
    name: str
    description: Optional[str]
    duration_days: int
    price: float
    is_active: bool
    created_at: datetime
    updated_at: datetime
