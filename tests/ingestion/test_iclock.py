from datetime import date, datetime

from src.timeclock.timeclock.core.enums import Role
from src.timeclock.timeclock.ingestion.iclock import ATTLOG_COMMAND, IClockSessions, parse_attlog
from tests.fakes import FakeDevice, build_fake_container, employee, log_entry


def test_parse_attlog_reads_tab_separated_lines():
    payload = "107\t2025-03-04 09:01:02\t0\t1\t0\t0\n\n108\t2025-03-04 09:05:00\t1\t15\n"

    entries = parse_attlog(payload)

    assert [(e.biometric_id, e.punch_time, e.punch_state, e.verify_type) for e in entries] == [
        ("107", datetime(2025, 3, 4, 9, 1, 2), 0, 1),
        ("108", datetime(2025, 3, 4, 9, 5), 1, 15),
    ]


def test_parse_attlog_skips_malformed_lines():
    entries = parse_attlog("garbage\n107\tnot-a-date\n107\t2025-03-04 17:00:00\n")

    assert len(entries) == 1
    assert entries[0].punch_time == datetime(2025, 3, 4, 17)


def test_log_is_requested_once_per_device():
    sessions = IClockSessions()

    assert sessions.next_command("SN1") == ATTLOG_COMMAND
    assert sessions.next_command("SN1") == "OK"
    assert sessions.next_command("SN2") == ATTLOG_COMMAND


def test_push_endpoint_records_attendance(make_client):
    c = build_fake_container(employees=[employee(7, biometric_id="107")])
    client = make_client(c)

    assert client.get("/iclock/cdata?SN=SN1").data == b"OK"
    assert client.get("/iclock/getrequest?SN=SN1").data == ATTLOG_COMMAND.encode()
    assert client.get("/iclock/getrequest?SN=SN1").data == b"OK"

    payload = "107\t2025-03-04 09:00:00\t0\t1\n107\t2025-03-04 17:00:00\t1\t1\n"
    resp = client.post("/iclock/cdata?SN=SN1&table=ATTLOG", data=payload)

    assert resp.status_code == 200
    assert resp.data == b"OK"
    (rec,) = c.attendance_repo.all()
    assert rec.work_date == date(2025, 3, 4)
    assert rec.device_id == "SN1"
    assert rec.check_out == datetime(2025, 3, 4, 17)


def test_push_failure_answers_error_so_the_device_resends(make_client, monkeypatch):
    c = build_fake_container(employees=[employee(7, biometric_id="107")])
    client = make_client(c)
    payload = "107\t2025-03-04 09:00:00\t0\t1\n"

    def db_down(*args, **kwargs):
        raise RuntimeError("db down")

    original = c.attendance_repo.list_for_employee_and_date
    monkeypatch.setattr(c.attendance_repo, "list_for_employee_and_date", db_down)
    resp = client.post("/iclock/cdata?SN=SN1&table=ATTLOG", data=payload)

    assert resp.status_code == 500
    assert resp.data != b"OK"
    assert c.punch_log_repo.events == []
    assert c.attendance_repo.all() == []

    monkeypatch.setattr(c.attendance_repo, "list_for_employee_and_date", original)
    resp = client.post("/iclock/cdata?SN=SN1&table=ATTLOG", data=payload)

    assert resp.status_code == 200
    assert resp.data == b"OK"
    (rec,) = c.attendance_repo.all()
    assert rec.check_in == datetime(2025, 3, 4, 9)


def test_biometric_admin_endpoints_require_admin(make_client):
    client = make_client(build_fake_container(), role=Role.STAFF)

    assert client.post("/api/biometric/sync").status_code == 403
    assert client.get("/api/biometric/logs").status_code == 403


def test_sync_without_device_is_bad_request(make_client):
    client = make_client(build_fake_container(), role=Role.ADMIN)

    resp = client.post("/api/biometric/sync")

    assert resp.status_code == 400
    assert resp.get_json()["success"] is False


def test_sync_now_runs_one_poll(make_client):
    device = FakeDevice([log_entry(1, "107", datetime(2025, 3, 4, 9))])
    c = build_fake_container(employees=[employee(7, biometric_id="107")], device=device)
    client = make_client(c, role=Role.ADMIN)

    resp = client.post("/api/biometric/sync")

    assert resp.status_code == 200
    assert resp.get_json()["data"]["applied"] == 1
    health = client.get("/api/biometric/health").get_json()["data"]
    assert health["watermark"] == 1
    assert health["polling"] is False


def test_sync_reports_device_failure(make_client):
    device = FakeDevice()
    device.fail_connect = True
    client = make_client(build_fake_container(device=device), role=Role.ADMIN)

    resp = client.post("/api/biometric/sync")

    assert resp.status_code == 502
