from datetime import date, datetime, time

import pytest

from src.timeclock.timeclock.core.enums import AttendanceStatus, PunchOutcome, Role
from src.timeclock.timeclock.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from src.timeclock.timeclock.employees.model import Actor
from src.timeclock.timeclock.schedules.model import DepartmentAssignment
from tests.fakes import build_fake_container, employee, record

DAY = date(2025, 3, 4)
STAFF = employee(7)
ADMIN = Actor(user_id=1, role=Role.ADMIN)
SUPER = Actor(user_id=2, role=Role.SUPER_ADMIN)


def _at(hour, minute=0, day=DAY):
    return datetime.combine(day, time(hour, minute))


def _container(**kwargs):
    kwargs.setdefault("employees", [STAFF])
    return build_fake_container(**kwargs)


def test_rapid_second_punch_is_ignored_and_later_punch_checks_out():
    c = _container()
    service = c.attendance_service

    assert service.record_punch(STAFF, _at(9, 0)) == PunchOutcome.CHECK_IN
    assert service.record_punch(STAFF, _at(10, 30)) == PunchOutcome.RAPID_PUNCH

    (open_record,) = c.attendance_repo.all()
    assert open_record.check_in == _at(9, 0)
    assert open_record.check_out is None
    assert open_record.status == AttendanceStatus.PENDING

    assert service.record_punch(STAFF, _at(13, 0)) == PunchOutcome.CHECK_OUT

    (closed,) = c.attendance_repo.all()
    assert closed.check_out == _at(13, 0)
    assert closed.working_hours == pytest.approx(4.0)
    assert closed.status != AttendanceStatus.PENDING


def test_punch_after_day_closed_changes_nothing():
    c = _container()
    service = c.attendance_service
    service.record_punch(STAFF, _at(9, 0))
    service.record_punch(STAFF, _at(17, 0))
    saves = c.attendance_repo.saves

    assert service.record_punch(STAFF, _at(18, 0)) == PunchOutcome.ALREADY_CLOSED
    assert c.attendance_repo.saves == saves
    assert c.attendance_repo.all()[0].check_out == _at(17, 0)


def test_concurrent_create_merges_into_existing_row():
    c = _container()
    repo = c.attendance_repo
    repo.before_next_create = lambda: repo.insert(
        record(STAFF.employee_id, DAY, AttendanceStatus.PENDING, department_id=None, check_in=_at(8, 58))
    )

    outcome = c.attendance_service.record_punch(STAFF, _at(9, 0))

    assert outcome == PunchOutcome.CHECK_IN
    (only,) = repo.all()
    assert only.check_in == _at(8, 58)
    assert repo.creates == 0


def test_punch_reopens_auto_absent_record():
    c = _container()
    c.attendance_repo.insert(record(STAFF.employee_id, DAY, AttendanceStatus.ABSENT, department_id=None))

    c.attendance_service.apply_times(STAFF.employee_id, DAY, check_in=_at(9, 5), check_out=None)

    (only,) = c.attendance_repo.all()
    assert only.status == AttendanceStatus.PENDING
    assert only.check_in == _at(9, 5)


def test_split_shift_employee_gets_one_record_per_department():
    assignments = [
        DepartmentAssignment(1, STAFF.employee_id, 10, is_primary=True, check_in_time=time(8), check_out_time=time(12)),
        DepartmentAssignment(2, STAFF.employee_id, 20, check_in_time=time(13), check_out_time=time(17)),
    ]
    c = _container(assignments=assignments)

    c.attendance_service.record_punch(STAFF, _at(8, 5))
    c.attendance_service.record_punch(STAFF, _at(16, 55))

    by_department = {r.department_id: r for r in c.attendance_repo.all()}
    assert by_department[10].check_out == _at(12, 0)
    assert by_department[20].check_in == _at(13, 0)
    assert by_department[20].check_out == _at(16, 55)


def test_afternoon_only_day_does_not_touch_the_morning_department():
    assignments = [
        DepartmentAssignment(1, STAFF.employee_id, 10, is_primary=True, check_in_time=time(8), check_out_time=time(12)),
        DepartmentAssignment(2, STAFF.employee_id, 20, check_in_time=time(13), check_out_time=time(17)),
    ]
    c = _container(assignments=assignments)

    assert c.attendance_service.record_punch(STAFF, _at(13, 30)) == PunchOutcome.CHECK_IN
    assert c.attendance_service.record_punch(STAFF, _at(17, 0)) == PunchOutcome.CHECK_OUT

    (only,) = c.attendance_repo.all()
    assert only.department_id == 20
    assert (only.check_in, only.check_out) == (_at(13, 30), _at(17, 0))
    assert only.status == AttendanceStatus.LATE


def test_manual_entry_blocked_when_disabled():
    c = _container(settings={"manualAttendanceEnabled": "false"})

    with pytest.raises(AuthorizationError):
        c.attendance_service.create_manual(ADMIN, STAFF.employee_id, DAY, check_in=_at(9, 0))


def test_super_admin_bypasses_manual_flag():
    c = _container(settings={"manualAttendanceEnabled": "false"})

    created = c.attendance_service.create_manual(SUPER, STAFF.employee_id, DAY, check_in=_at(9, 0), check_out=_at(17, 0))

    assert created.is_manual_entry
    assert created.modified_by == SUPER.user_id
    assert created.status == AttendanceStatus.PRESENT


def test_manual_entry_rejects_checkout_before_checkin():
    c = _container()

    with pytest.raises(ValidationError):
        c.attendance_service.create_manual(ADMIN, STAFF.employee_id, DAY, check_in=_at(17, 0), check_out=_at(9, 0))


def test_manual_entry_on_existing_day_is_rejected():
    c = _container()
    c.attendance_service.create_manual(ADMIN, STAFF.employee_id, DAY, check_in=_at(9, 0))

    with pytest.raises(ValidationError):
        c.attendance_service.create_manual(ADMIN, STAFF.employee_id, DAY, check_in=_at(9, 30))


def test_manual_entry_for_unknown_employee():
    c = _container()

    with pytest.raises(NotFoundError):
        c.attendance_service.create_manual(ADMIN, 999, DAY, check_in=_at(9, 0))


def test_update_with_checkout_recomputes_hours():
    c = _container()
    created = c.attendance_service.create_manual(ADMIN, STAFF.employee_id, DAY, check_in=_at(9, 0))

    updated = c.attendance_service.update_record(ADMIN, created.attendance_id, check_out=_at(17, 30))

    assert updated.check_in == _at(9, 0)
    assert updated.working_hours == pytest.approx(8.5)
    assert updated.status == AttendanceStatus.PRESENT


def test_explicit_status_is_kept_on_update():
    c = _container()
    created = c.attendance_service.create_manual(ADMIN, STAFF.employee_id, DAY, check_in=_at(9, 0), check_out=_at(11, 0))

    updated = c.attendance_service.update_record(ADMIN, created.attendance_id, status=AttendanceStatus.LEAVE)

    assert updated.status == AttendanceStatus.LEAVE
    assert updated.working_hours == pytest.approx(2.0)


def test_list_records_sweeps_stale_pending_first():
    c = _container()
    c.attendance_repo.insert(record(STAFF.employee_id, date(2020, 1, 6), AttendanceStatus.PENDING, check_in=_at(9, day=date(2020, 1, 6))))

    rows = c.attendance_service.list_records(date(2020, 1, 1), date(2020, 1, 31))

    assert [r.status for r in rows] == [AttendanceStatus.MISSING]


def test_list_records_rejects_inverted_range():
    c = _container()

    with pytest.raises(ValidationError):
        c.attendance_service.list_records(date(2025, 3, 5), date(2025, 3, 1))
