from src.timeclock.timeclock.core.enums import Role
from tests.fakes import build_fake_container, employee


def _client(make_client, role=Role.ADMIN, **kwargs):
    c = build_fake_container(employees=[employee(7)], **kwargs)
    return c, make_client(c, role=role)


def test_manual_create_then_edit(make_client):
    c, client = _client(make_client)

    resp = client.post(
        "/api/attendance/manual",
        json={"employee_id": 7, "date": "2025-03-04", "check_in": "2025-03-04 09:00"},
    )
    assert resp.status_code == 201
    created = resp.get_json()["data"]
    assert created["status"] == "pending"
    assert created["is_manual_entry"] is True

    resp = client.put(f"/api/attendance/{created['attendance_id']}", json={"check_out": "2025-03-04T17:00:00"})
    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["status"] == "present"
    assert data["working_hours"] == 8.0


def test_manual_create_disabled_is_forbidden(make_client):
    _, client = _client(make_client, settings={"manualAttendanceEnabled": "false"})

    resp = client.post("/api/attendance/manual", json={"employee_id": 7, "date": "2025-03-04"})

    assert resp.status_code == 403
    assert resp.get_json()["success"] is False


def test_bad_input_is_rejected(make_client):
    _, client = _client(make_client)

    assert client.post("/api/attendance/manual", json={"date": "2025-03-04"}).status_code == 400
    assert client.post("/api/attendance/manual", json={"employee_id": 7, "date": "04/03/2025"}).status_code == 400
    assert client.put("/api/attendance/999", json={"status": "present"}).status_code == 404
    assert client.get("/api/attendance?start=2025-03-05&end=2025-03-01").status_code == 400
    assert client.post(
        "/api/attendance/manual", json={"employee_id": 7, "date": "2025-03-04", "status": "sleeping"}
    ).status_code == 400


def test_list_and_day_views(make_client):
    c, client = _client(make_client)
    client.post("/api/attendance/manual", json={"employee_id": 7, "date": "2025-03-04", "status": "leave"})

    listed = client.get("/api/attendance?start=2025-03-01&end=2025-03-31&employee_id=7").get_json()["data"]
    day = client.get("/api/attendance/day?employee_id=7&date=2025-03-04").get_json()["data"]

    assert [r["status"] for r in listed] == ["leave"]
    assert [r["work_date"] for r in day] == ["2025-03-04"]


def test_mark_absent_endpoint(make_client):
    c, client = _client(make_client)

    resp = client.post("/api/attendance/mark-absent", json={"date": "2025-03-04"})

    assert resp.status_code == 200
    assert resp.get_json()["data"]["created"] == 1
    assert c.attendance_repo.all()[0].status.value == "absent"


def test_mark_absent_requires_admin(make_client):
    _, client = _client(make_client, role=Role.STAFF)

    assert client.post("/api/attendance/mark-absent", json={}).status_code == 403
