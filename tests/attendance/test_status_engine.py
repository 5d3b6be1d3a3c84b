from datetime import date, datetime, time

import pytest

from src.timeclock.timeclock.attendance.factory import AttendanceStrategyFactory
from src.timeclock.timeclock.attendance.model import AttendanceRecord
from src.timeclock.timeclock.attendance.status_engine import apply_status, evaluate
from src.timeclock.timeclock.attendance.strategies.fallback_strategy import FallbackStrategy
from src.timeclock.timeclock.attendance.strategies.pending_strategy import PendingStrategy
from src.timeclock.timeclock.attendance.strategies.pinned_strategy import PinnedStrategy
from src.timeclock.timeclock.attendance.strategies.scheduled_strategy import ScheduledStrategy
from src.timeclock.timeclock.core.enums import AttendanceStatus
from src.timeclock.timeclock.schedules.model import ResolvedSchedule

DAY = date(2025, 3, 4)
NINE_TO_FIVE = ResolvedSchedule(
    check_in_time=time(9, 0),
    check_out_time=time(17, 0),
    check_in_leverage_minutes=15,
    check_out_leverage_minutes=10,
    daily_hours=8.0,
)


def _record(check_in=None, check_out=None, *, status=AttendanceStatus.PENDING, manual=False):
    return AttendanceRecord(
        attendance_id=1,
        employee_id=7,
        department_id=10,
        work_date=DAY,
        check_in=check_in,
        check_out=check_out,
        status=status,
        is_manual_entry=manual,
    )


def _at(hour, minute=0):
    return datetime.combine(DAY, time(hour, minute))


@pytest.mark.parametrize(
    "check_in, check_out, expected",
    [
        (_at(9, 10), _at(17, 0), AttendanceStatus.PRESENT),
        (_at(9, 20), _at(17, 0), AttendanceStatus.LATE),
        (_at(9, 0), _at(16, 45), AttendanceStatus.EARLY_ARRIVAL),
        (_at(9, 30), _at(16, 30), AttendanceStatus.LATE_EARLY_ARRIVAL),
    ],
)
def test_scheduled_classification(check_in, check_out, expected):
    decision = evaluate(_record(check_in, check_out), NINE_TO_FIVE)

    assert decision.status == expected


def test_leverage_boundary_is_inclusive():
    decision = evaluate(_record(_at(9, 15), _at(16, 50)), NINE_TO_FIVE)

    assert decision.status == AttendanceStatus.PRESENT


def test_short_day_is_classified_by_punch_times_not_hours():
    decision = evaluate(_record(_at(9, 0), _at(12, 30)), NINE_TO_FIVE)

    assert decision.status == AttendanceStatus.EARLY_ARRIVAL
    assert decision.working_hours == pytest.approx(3.5)


def test_working_hours_are_fractional():
    updated = apply_status(_record(_at(9, 0), _at(17, 30)), NINE_TO_FIVE)

    assert updated.working_hours == pytest.approx(8.5)
    assert isinstance(updated.working_hours, float)


@pytest.mark.parametrize(
    "hours, expected",
    [
        (8, AttendanceStatus.PRESENT),
        (5, AttendanceStatus.HALF_DAY),
        (2, AttendanceStatus.LATE),
    ],
)
def test_fallback_uses_hours_only(hours, expected):
    decision = evaluate(_record(_at(8, 0), _at(8 + hours, 0)), None)

    assert decision.status == expected


def test_missing_checkout_stays_pending():
    updated = apply_status(_record(_at(9, 0)), NINE_TO_FIVE)

    assert updated.status == AttendanceStatus.PENDING
    assert updated.working_hours == 0.0


def test_manual_status_is_pinned_but_hours_recomputed():
    record = _record(_at(9, 40), _at(17, 0), status=AttendanceStatus.PRESENT, manual=True)

    updated = apply_status(record, NINE_TO_FIVE)

    assert updated.status == AttendanceStatus.PRESENT
    assert updated.working_hours == pytest.approx(7 + 20 / 60)


def test_factory_picks_strategy():
    factory = AttendanceStrategyFactory()

    assert isinstance(factory.for_record(_record(_at(9)), NINE_TO_FIVE), PendingStrategy)
    assert isinstance(
        factory.for_record(_record(_at(9), _at(17), status=AttendanceStatus.LEAVE, manual=True), NINE_TO_FIVE),
        PinnedStrategy,
    )
    assert isinstance(factory.for_record(_record(_at(9), _at(17)), None), FallbackStrategy)
    assert isinstance(factory.for_record(_record(_at(9), _at(17)), NINE_TO_FIVE), ScheduledStrategy)
