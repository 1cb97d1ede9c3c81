from __future__ import annotations

import dataclasses
import uuid
from datetime import date, datetime, time
from typing import Optional

import pytest

from gym_backoffice.attendance.model import AttendancePatch, AttendanceRecord
from gym_backoffice.clients.model import Client
from gym_backoffice.container import Container, build_services
from gym_backoffice.core.enums import AttendanceStatus, IdentifierKind
from gym_backoffice.core.exceptions import IdentifierCollision, UniquenessViolation
from gym_backoffice.identifiers.model import UnnumberedEntity
from gym_backoffice.memberships.model import MembershipPlan


class FixedClock:
    def __init__(self, now: datetime):
        self.current = now

    def now(self) -> datetime:
        return self.current


class InMemoryPlans:
    def __init__(self):
        self.by_ref: dict[str, MembershipPlan] = {}

    def add(self, *, plan_number: Optional[int], name: str, duration_days: int = 30, price: float = 1000.0, is_active: bool = True) -> MembershipPlan:
        plan = MembershipPlan(
            plan_ref=str(uuid.uuid4()),
            plan_number=plan_number,
            name=name,
            description=None,
            duration_days=duration_days,
            price=price,
            is_active=is_active,
            created_at=datetime(2026, 1, 1, 9, 0, 0),
            updated_at=datetime(2026, 1, 1, 9, 0, 0),
        )
        self.by_ref[plan.plan_ref] = plan
        return plan

    def list_all(self, *, include_inactive=False):
        plans = [p for p in self.by_ref.values() if include_inactive or p.is_active]
        return sorted(plans, key=lambda p: p.plan_number or 0)

    def get_by_number(self, plan_number):
        return next((p for p in self.by_ref.values() if p.plan_number == plan_number), None)

    def get_by_ref(self, plan_ref):
        return self.by_ref.get(plan_ref)

    def find_by_terms(self, *, duration_days, price):
        return next(
            (p for p in self.by_ref.values() if p.duration_days == duration_days and p.price == price),
            None,
        )

    def create(self, *, plan_number, fields, now):
        if self.get_by_number(plan_number):
            raise IdentifierCollision(IdentifierKind.MEMBERSHIP_PLAN, plan_number, key="uq_membership_plans_number")
        if any(p.name == fields["name"] for p in self.by_ref.values()):
            raise UniquenessViolation(f"Duplicate entry '{fields['name']}'", key="uq_membership_plans_name")
        plan = MembershipPlan(
            plan_ref=str(uuid.uuid4()),
            plan_number=plan_number,
            description=fields.get("description"),
            created_at=now,
            updated_at=now,
            **{k: fields[k] for k in ("name", "duration_days", "price", "is_active")},
        )
        self.by_ref[plan.plan_ref] = plan
        return plan

    def update(self, plan_ref, *, fields, now):
        plan = self.by_ref.get(plan_ref)
        if not plan:
            return None
        self.by_ref[plan_ref] = dataclasses.replace(plan, updated_at=now, **fields)
        return self.by_ref[plan_ref]

    def delete(self, plan_ref):
        return self.by_ref.pop(plan_ref, None) is not None


class InMemoryClients:
    def __init__(self, plans: InMemoryPlans):
        self.plans = plans
        self.by_ref: dict[str, Client] = {}

    def _with_plan(self, client: Client) -> Client:
        plan = self.plans.get_by_ref(client.membership_plan_ref) if client.membership_plan_ref else None
        return dataclasses.replace(
            client,
            membership_plan_number=plan.plan_number if plan else None,
            membership_plan_name=plan.name if plan else None,
        )

    def add(self, *, client_number: Optional[int], first_name: str = "Asha", last_name: str = "Rao", **extra) -> Client:
        client = Client(
            client_ref=str(uuid.uuid4()),
            client_number=client_number,
            first_name=first_name,
            last_name=last_name,
            email=None,
            phone="9876543210",
            date_of_birth=date(1995, 5, 17),
            address="12 MG Road",
            emergency_contact_name="Ravi Rao",
            emergency_contact_phone="9876500000",
            created_at=datetime(2026, 1, 1, 9, 0, 0),
            updated_at=datetime(2026, 1, 1, 9, 0, 0),
            **extra,
        )
        self.by_ref[client.client_ref] = client
        return client

    def list_all(self):
        valid = [c for c in self.by_ref.values() if c.client_number and c.client_number >= 1]
        return [self._with_plan(c) for c in sorted(valid, key=lambda c: c.client_number)]

    def list_expiring(self, *, start, end):
        hits = [c for c in self.by_ref.values() if c.expiry_date and start <= c.expiry_date <= end]
        return [self._with_plan(c) for c in sorted(hits, key=lambda c: c.expiry_date)]

    def get_by_number(self, client_number):
        client = next((c for c in self.by_ref.values() if c.client_number == client_number), None)
        return self._with_plan(client) if client else None

    def get_by_ref(self, client_ref):
        client = self.by_ref.get(client_ref)
        return self._with_plan(client) if client else None

    def create(self, *, client_number, fields, now):
        if any(c.client_number == client_number for c in self.by_ref.values()):
            raise IdentifierCollision(IdentifierKind.CLIENT, client_number, key="uq_clients_number")
        client = Client(
            client_ref=str(uuid.uuid4()),
            client_number=client_number,
            created_at=now,
            updated_at=now,
            **{"email": None, **fields},
        )
        self.by_ref[client.client_ref] = client
        return self._with_plan(client)

    def update(self, client_ref, *, fields, now):
        client = self.by_ref.get(client_ref)
        if not client:
            return None
        self.by_ref[client_ref] = dataclasses.replace(client, updated_at=now, **fields)
        return self._with_plan(self.by_ref[client_ref])

    def delete(self, client_ref):
        return self.by_ref.pop(client_ref, None) is not None


class InMemoryAttendance:
    def __init__(self, clients: InMemoryClients):
        self.clients = clients
        self.by_id: dict[int, AttendanceRecord] = {}
        self._next_id = 1

    def _with_client(self, record: AttendanceRecord) -> AttendanceRecord:
        client = self.clients.by_ref.get(record.client_ref)
        if not client:
            return record
        return dataclasses.replace(
            record,
            client_number=client.client_number,
            client_name=client.full_name,
            photo_url=client.photo_url,
        )

    def add(self, *, client_ref: str, attendance_date: date, check_in_time: time, check_out_time: Optional[time] = None, status: AttendanceStatus = AttendanceStatus.IN) -> AttendanceRecord:
        record = AttendanceRecord(
            attendance_id=self._next_id,
            client_ref=client_ref,
            attendance_date=attendance_date,
            check_in_time=check_in_time,
            check_out_time=check_out_time,
            status=status,
            created_at=datetime.combine(attendance_date, check_in_time),
        )
        self.by_id[record.attendance_id] = record
        self._next_id += 1
        return record

    def get_for_client_and_date(self, client_ref, attendance_date):
        record = next(
            (r for r in self.by_id.values() if r.client_ref == client_ref and r.attendance_date == attendance_date),
            None,
        )
        return self._with_client(record) if record else None

    def create(self, *, client_ref, attendance_date, patch: AttendancePatch, now):
        if any(r.client_ref == client_ref and r.attendance_date == attendance_date for r in self.by_id.values()):
            raise UniquenessViolation(
                f"Duplicate entry '{client_ref}-{attendance_date}'", key="uq_attendance_client_date"
            )
        record = self.add(
            client_ref=client_ref,
            attendance_date=attendance_date,
            check_in_time=patch.check_in_time,
            check_out_time=patch.check_out_time,
            status=patch.status,
        )
        self.by_id[record.attendance_id] = dataclasses.replace(record, created_at=now)
        return self._with_client(self.by_id[record.attendance_id])

    def transition(self, *, current, patch: AttendancePatch, now):
        stored = self.by_id.get(current.attendance_id)
        if not stored or stored.status != current.status or stored.check_in_time != current.check_in_time:
            return False
        self.by_id[stored.attendance_id] = dataclasses.replace(
            stored,
            status=patch.status,
            check_in_time=patch.check_in_time,
            check_out_time=patch.check_out_time,
        )
        return True

    def list_open(self):
        return [
            self._with_client(r)
            for r in self.by_id.values()
            if r.status == AttendanceStatus.IN and r.check_out_time is None
        ]

    def close_open(self, *, attendance_id, check_out_time):
        record = self.by_id.get(attendance_id)
        if not record or record.status != AttendanceStatus.IN or record.check_out_time is not None:
            return False
        self.by_id[attendance_id] = dataclasses.replace(
            record, status=AttendanceStatus.OUT, check_out_time=check_out_time
        )
        return True

    def query(self, *, start_date=None, end_date=None, client_ref=None):
        hits = [
            r
            for r in self.by_id.values()
            if (start_date is None or r.attendance_date >= start_date)
            and (end_date is None or r.attendance_date <= end_date)
            and (client_ref is None or r.client_ref == client_ref)
        ]
        hits.sort(key=lambda r: (r.attendance_date, r.check_in_time), reverse=True)
        return [self._with_client(r) for r in hits]

    def delete(self, attendance_id):
        return self.by_id.pop(attendance_id, None) is not None


class InMemoryIdentifiers:
    def __init__(self, clients: InMemoryClients, plans: InMemoryPlans):
        self._stores = {
            IdentifierKind.CLIENT: (clients.by_ref, "client_number"),
            IdentifierKind.MEMBERSHIP_PLAN: (plans.by_ref, "plan_number"),
        }

    def list_identifiers(self, kind):
        store, attr = self._stores[kind]
        return [getattr(e, attr) for e in store.values()]

    def list_unnumbered(self, kind):
        store, attr = self._stores[kind]
        broken = []
        for ref, entity in store.items():
            value = getattr(entity, attr)
            if value is None or value < 1:
                label = getattr(entity, "full_name", None) or getattr(entity, "name", "")
                broken.append(UnnumberedEntity(ref=ref, label=label, current_value=value))
        return broken

    def assign_identifier(self, kind, *, ref, number):
        store, attr = self._stores[kind]
        if ref not in store:
            return False
        store[ref] = dataclasses.replace(store[ref], **{attr: number})
        return True


@pytest.fixture
def clock() -> FixedClock:
    # A Sunday afternoon.
    return FixedClock(datetime(2026, 3, 15, 14, 0, 0))


@pytest.fixture
def plans() -> InMemoryPlans:
    return InMemoryPlans()


@pytest.fixture
def clients(plans) -> InMemoryClients:
    return InMemoryClients(plans)


@pytest.fixture
def attendance(clients) -> InMemoryAttendance:
    return InMemoryAttendance(clients)


@pytest.fixture
def identifiers(clients, plans) -> InMemoryIdentifiers:
    return InMemoryIdentifiers(clients, plans)


@pytest.fixture
def container(clients, plans, attendance, identifiers, clock) -> Container:
    return build_services(
        clients_repo=clients,
        plans_repo=plans,
        attendance_repo=attendance,
        identifiers_repo=identifiers,
        clock=clock,
    )
