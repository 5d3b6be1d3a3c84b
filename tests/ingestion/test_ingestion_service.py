from datetime import date, datetime, time

import pytest

from src.timeclock.timeclock.core.enums import AttendanceStatus, Role
from src.timeclock.timeclock.core.exceptions import DeviceError
from src.timeclock.timeclock.ingestion.service import PunchIngestionService
from tests.fakes import FakeDevice, build_fake_container, employee, log_entry

DAY = date(2025, 3, 4)
STAFF = employee(7, biometric_id="107")
BOSS = employee(1, role=Role.SUPER_ADMIN, biometric_id="101")


def _at(hour, minute=0):
    return datetime.combine(DAY, time(hour, minute))


def _container(entries=()):
    device = FakeDevice(entries)
    return build_fake_container(employees=[STAFF, BOSS], device=device), device


def test_first_poll_backfills_whole_log():
    c, _ = _container([log_entry(1, "107", _at(9)), log_entry(2, "107", _at(10)), log_entry(3, "107", _at(17))])

    stats = c.ingestion_service.poll_once()

    assert stats.backfill
    assert (stats.fetched, stats.new, stats.applied, stats.discarded) == (3, 3, 2, 1)
    assert c.ingestion_service.watermark == 3
    (rec,) = c.attendance_repo.all()
    assert (rec.check_in, rec.check_out) == (_at(9), _at(17))
    assert rec.status == AttendanceStatus.PRESENT
    assert len(c.punch_log_repo.events) == 3


def test_later_polls_only_look_above_watermark():
    c, device = _container([log_entry(1, "107", _at(9))])
    c.ingestion_service.poll_once()

    device.entries.append(log_entry(2, "107", _at(17)))
    stats = c.ingestion_service.poll_once()

    assert not stats.backfill
    assert (stats.new, stats.applied) == (1, 1)
    assert c.ingestion_service.watermark == 2
    assert c.attendance_repo.all()[0].check_out == _at(17)


def test_replaying_the_log_after_restart_is_idempotent():
    entries = [log_entry(1, "107", _at(9)), log_entry(2, "107", _at(17))]
    c, device = _container(entries)
    c.ingestion_service.poll_once()
    before = c.attendance_repo.all()

    restarted = PunchIngestionService(device, c.punch_log_repo, c.employees_repo, c.attendance_service)
    stats = restarted.poll_once()

    assert (stats.new, stats.duplicates) == (0, 2)
    assert restarted.watermark == 2
    assert c.attendance_repo.all() == before


def test_device_failure_keeps_watermark_and_reports_error():
    c, device = _container([log_entry(1, "107", _at(9))])
    c.ingestion_service.poll_once()
    device.fail_connect = True

    with pytest.raises(DeviceError):
        c.ingestion_service.poll_once()

    assert c.ingestion_service.watermark == 1
    assert c.ingestion_service.last_error

    device.fail_connect = False
    device.entries.append(log_entry(2, "107", _at(17)))
    c.ingestion_service.poll_once()

    assert c.ingestion_service.watermark == 2
    assert c.ingestion_service.last_error is None


def test_cleared_device_log_never_moves_watermark_back():
    c, device = _container([log_entry(1, "107", _at(9)), log_entry(2, "107", _at(17))])
    c.ingestion_service.poll_once()

    device.entries = [log_entry(1, "107", _at(18))]
    c.ingestion_service.poll_once()

    assert c.ingestion_service.watermark == 2


def test_unknown_and_exempt_punches_are_logged_not_applied():
    c, _ = _container([log_entry(1, "999", _at(9)), log_entry(2, "101", _at(9, 5))])

    stats = c.ingestion_service.poll_once()

    assert (stats.new, stats.skipped, stats.applied) == (2, 2, 0)
    assert c.attendance_repo.all() == []
    assert len(c.punch_log_repo.events) == 2


def test_pushed_entries_dedup_against_punch_log():
    c, _ = _container()
    entries = [log_entry(None, "107", _at(9)), log_entry(None, "107", _at(17))]

    first = c.ingestion_service.ingest_pushed(entries, device_id="SN123")
    second = c.ingestion_service.ingest_pushed(entries, device_id="SN123")

    assert first.applied == 2
    assert (second.new, second.duplicates) == (0, 2)
    assert len(c.attendance_repo.all()) == 1


def test_sync_device_clock():
    c, device = _container()

    c.ingestion_service.sync_device_clock(_at(8, 30))

    assert device.clock_set == [_at(8, 30)]
    assert device.disconnects == 1


def test_no_device_configured():
    c = build_fake_container(employees=[STAFF])

    with pytest.raises(DeviceError):
        c.ingestion_service.poll_once()
    assert c.device_poller is None
