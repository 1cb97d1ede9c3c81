from __future__ import annotations

from datetime import date, time

import pytest

from gym_backoffice.core.enums import AttendanceStatus
from gym_backoffice.core.exceptions import ClientNotFound, NotFoundError, ValidationError


def test_client_toggles_in_out_in_on_the_same_day(container, clients):
    clients.add(client_number=7, first_name="Meera", last_name="Iyer")
    service = container.attendance_service

    first = service.record_check_in(7, "2026-03-15", "09:00")
    assert first.status == AttendanceStatus.IN
    assert first.duration is None

    second = service.record_check_in("7", "2026-03-15", "11:30")
    assert second.attendance_id == first.attendance_id
    assert second.status == AttendanceStatus.OUT
    assert second.check_in_time == time(9, 0)
    assert second.check_out_time == time(11, 30)
    assert second.duration == "2h 30m"

    third = service.record_check_in(7, "2026-03-15", "18:00")
    assert third.attendance_id == first.attendance_id
    assert third.status == AttendanceStatus.IN
    assert third.check_in_time == time(18, 0)
    assert third.check_out_time is None

    payload = service.to_payload(third)
    assert payload["client_id"] == 7
    assert payload["client_name"] == "Meera Iyer"
    assert payload["check_in_time"] == "18:00"
    assert payload["check_out_time"] is None


def test_stale_record_is_closed_before_new_check_in(container, clients, attendance):
    client = clients.add(client_number=3)
    stale = attendance.add(client_ref=client.client_ref, attendance_date=date(2026, 3, 14), check_in_time=time(19, 0))

    record = container.attendance_service.record_check_in(3, "2026-03-15", "08:00")

    assert record.status == AttendanceStatus.IN
    assert attendance.by_id[stale.attendance_id].status == AttendanceStatus.OUT
    assert attendance.by_id[stale.attendance_id].check_out_time == time(23, 59, 59)


def test_check_in_validates_before_touching_storage(container):
    with pytest.raises(ValidationError, match="Client ID, date, and time are required"):
        container.attendance_service.record_check_in(7, "2026-03-15", "")

    with pytest.raises(ValidationError):
        container.attendance_service.record_check_in(7, "15/03/2026", "09:00")


def test_check_in_for_unknown_client(container):
    with pytest.raises(ClientNotFound, match="Client ID 99 not found"):
        container.attendance_service.record_check_in(99, "2026-03-15", "09:00")


def test_check_in_accepts_internal_reference(container, clients):
    client = clients.add(client_number=2)

    record = container.attendance_service.record_check_in(client.client_ref, "2026-03-15", "09:00")

    assert record.client_number == 2


def test_list_attendance_filters(container, clients, attendance):
    a = clients.add(client_number=1)
    b = clients.add(client_number=2, first_name="Kiran")
    attendance.add(client_ref=a.client_ref, attendance_date=date(2026, 3, 15), check_in_time=time(7, 0))
    attendance.add(client_ref=b.client_ref, attendance_date=date(2026, 3, 15), check_in_time=time(9, 0))
    attendance.add(client_ref=a.client_ref, attendance_date=date(2026, 3, 13), check_in_time=time(8, 0))
    service = container.attendance_service

    everything = service.list_attendance()
    assert [(r.client_number, r.attendance_date) for r in everything] == [
        (2, date(2026, 3, 15)),
        (1, date(2026, 3, 15)),
        (1, date(2026, 3, 13)),
    ]
    # Listing sweeps first, so the old open record comes back closed.
    assert everything[2].status == AttendanceStatus.OUT

    assert [r.client_number for r in service.list_attendance(attendance_date="2026-03-15")] == [2, 1]
    assert len(service.list_attendance(client_id="1")) == 2
    assert len(service.list_attendance(attendance_date="2026-03-15", client_id=1)) == 1
    assert service.list_attendance(client_id=42) == []


def test_force_checkout_with_custom_end_time(container, clients, attendance, clock):
    client = clients.add(client_number=1)
    attendance.add(client_ref=client.client_ref, attendance_date=date(2026, 3, 15), check_in_time=time(9, 0))
    attendance.add(client_ref=client.client_ref, attendance_date=date(2026, 3, 12), check_in_time=time(9, 0))

    count, cutoff = container.attendance_service.force_checkout("13:30")

    assert cutoff == time(13, 30, 59)
    assert count == 2

    with pytest.raises(ValidationError, match="Invalid end_time format"):
        container.attendance_service.force_checkout("1:30pm")


def test_delete_attendance(container, clients, attendance):
    client = clients.add(client_number=1)
    record = attendance.add(client_ref=client.client_ref, attendance_date=date(2026, 3, 15), check_in_time=time(9, 0))
    service = container.attendance_service

    service.delete_attendance(str(record.attendance_id))
    assert attendance.by_id == {}

    with pytest.raises(NotFoundError):
        service.delete_attendance(record.attendance_id)
    with pytest.raises(ValidationError):
        service.delete_attendance("abc")
