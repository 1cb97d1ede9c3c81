from __future__ import annotations

from datetime import date, time

import pytest

from gym_backoffice.main import create_app


@pytest.fixture
def client(container, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    app = create_app(container)
    return app.test_client()


def _new_client(client, **overrides):
    body = {
        "first_name": "Asha",
        "last_name": "Rao",
        "phone": "9876543210",
        "date_of_birth": "1995-05-17",
        "address": "12 MG Road",
        "emergency_contact_name": "Ravi Rao",
        "emergency_contact_phone": "9876500000",
    }
    body.update(overrides)
    return client.post("/api/clients", json=body)


def test_client_crud(client):
    res = _new_client(client)
    assert res.status_code == 201
    assert res.get_json()["client_id"] == 1

    assert client.get("/api/clients/1").get_json()["first_name"] == "Asha"
    assert [c["client_id"] for c in client.get("/api/clients").get_json()] == [1]

    res = client.put("/api/clients/1", json={"address": "7 Park Street"})
    assert res.get_json()["address"] == "7 Park Street"

    assert client.delete("/api/clients/1").status_code == 200
    res = client.get("/api/clients/1")
    assert res.status_code == 404
    assert res.get_json()["error"] == "Client ID 1 not found"


def test_invalid_client_payload_is_400(client):
    res = _new_client(client, first_name="")
    assert res.status_code == 400
    assert res.get_json()["error"] == "First name is required"


def test_attendance_flow(client):
    _new_client(client)

    res = client.post("/api/attendance", json={"client_id": 1, "attendance_date": "2026-03-15", "attendance_time": "09:00"})
    assert res.status_code == 201
    assert res.get_json()["status"] == "IN"

    res = client.post("/api/attendance", json={"client_id": "1", "attendance_date": "2026-03-15", "attendance_time": "11:30"})
    body = res.get_json()
    assert body["status"] == "OUT"
    assert body["duration"] == "2h 30m"
    assert body["client_name"] == "Asha Rao"

    listed = client.get("/api/attendance?date=2026-03-15&client_id=1").get_json()
    assert [r["id"] for r in listed] == [body["id"]]

    assert client.delete(f"/api/attendance/{body['id']}").status_code == 200
    assert client.delete(f"/api/attendance/{body['id']}").status_code == 404


def test_attendance_errors(client):
    res = client.post("/api/attendance", json={"client_id": 1})
    assert res.status_code == 400
    assert res.get_json()["error"] == "Client ID, date, and time are required"

    res = client.post("/api/attendance", json={"client_id": 5, "attendance_date": "2026-03-15", "attendance_time": "09:00"})
    assert res.status_code == 404


def test_conflicting_check_in_is_409(client, clients, attendance, monkeypatch):
    clients.add(client_number=1)
    body = {"client_id": 1, "attendance_date": "2026-03-15", "attendance_time": "09:00"}
    assert client.post("/api/attendance", json=body).status_code == 201

    # The second request read the day before the first one was written.
    monkeypatch.setattr(attendance, "get_for_client_and_date", lambda client_ref, attendance_date: None)
    res = client.post("/api/attendance", json={**body, "attendance_time": "09:01"})

    assert res.status_code == 409
    assert "already exists" in res.get_json()["error"]
    assert [r.check_in_time for r in attendance.by_id.values()] == [time(9, 0)]


def test_auto_checkout(client, clients, attendance):
    member = clients.add(client_number=1)
    attendance.add(client_ref=member.client_ref, attendance_date=date(2026, 3, 14), check_in_time=time(17, 0))

    res = client.get("/api/attendance/auto-checkout")
    body = res.get_json()
    assert body["checked_out_count"] == 1
    assert body["end_time"] == "23:59:59"

    res = client.post("/api/attendance/auto-checkout?end_time=22:00")
    assert res.get_json()["end_time"] == "22:00:59"
    assert res.get_json()["checked_out_count"] == 0

    res = client.get("/api/attendance/auto-checkout?end_time=10pm")
    assert res.status_code == 400


def test_memberships(client):
    res = client.post("/api/memberships", json={"name": "Monthly", "duration_days": 30, "price": 1200})
    assert res.status_code == 201
    client.post("/api/memberships", json={"name": "Old", "duration_days": 30, "is_active": False})

    assert [m["name"] for m in client.get("/api/memberships").get_json()] == ["Monthly"]
    assert len(client.get("/api/memberships?include_inactive=true").get_json()) == 2

    res = client.post("/api/memberships", json={"name": "Monthly", "duration_days": 60})
    assert res.status_code == 409

    assert client.get("/api/memberships/7").status_code == 404


def test_fix_ids(client, clients):
    clients.add(client_number=None, first_name="Anil", last_name="Kumar")

    body = client.post("/api/clients/fix-ids").get_json()
    assert body["fixed"] == 1
    assert body["details"] == [{"name": "Anil Kumar", "old_id": None, "new_id": 1}]

    assert client.post("/api/clients/fix-ids").get_json()["fixed"] == 0
    assert client.post("/api/memberships/fix-ids").get_json()["fixed"] == 0


def test_import_endpoint(client):
    csv_text = (
        "User ID,First,Last,Gender,PT,Sub,Amount,Paid,Pending,Recent,Joined,Renewed,Expiry,Mobile,Aadhar,"
        "Height,Weight,Email,DOB,Goal,Address,By\n"
        "U1,Asha,Rao,Female,No,1 Month,1000,1000,0,2026-03-01,2026-03-01,,2026-03-31,9876543210,,,,,1995-05-17,,Pune,admin\n"
    )

    res = client.post("/api/clients/import", json={"csv": csv_text})
    assert res.get_json()["created"] == 1

    res = client.post("/api/clients/import", data=csv_text, content_type="text/csv")
    assert res.get_json()["created"] == 1

    res = client.post("/api/clients/import", json={})
    assert res.status_code == 400


def test_unknown_route_is_json_404(client):
    res = client.get("/api/nope")
    assert res.status_code == 404
    assert "error" in res.get_json()
