from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional


@dataclass(frozen=True)
class Client:
    """Domain entity: a gym client (member).

    client_ref is the stable internal reference every relation uses;
    client_number is the dense running number staff type in at the desk.
    """

    client_ref: str
    client_number: Optional[int]
    first_name: str
    last_name: str
    email: Optional[str]
    phone: str
    date_of_birth: date
    address: str
    emergency_contact_name: str
    emergency_contact_phone: str
    created_at: datetime
    updated_at: datetime
    age: Optional[int] = None
    height: Optional[float] = None
    weight: Optional[float] = None
    gender: Optional[str] = None
    blood_group: Optional[str] = None
    bmi: Optional[float] = None
    aadhar_number: Optional[str] = None
    photo_url: Optional[str] = None
    membership_plan_ref: Optional[str] = None
    membership_plan_number: Optional[int] = None
    membership_plan_name: Optional[str] = None
    joining_date: Optional[date] = None
    expiry_date: Optional[date] = None
    membership_fee: Optional[float] = None
    discount: float = 0.0
    payment_date: Optional[date] = None
    payment_mode: Optional[str] = None
    transaction_id: Optional[str] = None
    paid_amount: Optional[float] = None
    medical_conditions: Optional[str] = None
    fitness_goals: Optional[str] = None
    first_time_in_gym: Optional[str] = None
    previous_gym_details: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
