"""Month tally: attendance records of one assignment folded into day counts."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Callable, Iterable

from ...attendance.model import AttendanceRecord
from ...common.datetime_utils import iter_month_days
from ...core.enums import PRESENT_LIKE_STATUSES, AttendanceStatus
from ...schedules.model import ResolvedSchedule


@dataclass(frozen=True)
class MonthTally:
    total_days_in_month: int
    weekly_off_days: int
    working_days: int
    present_days: int
    late_days: int
    early_departure_days: int
    late_early_departure_days: int
    half_days: int
    leave_days: int
    recorded_absent_days: int
    missing_days: int
    worked_hours: float
    overtime_hours: float
    weekly_off_days_worked: int


def _rank(record: AttendanceRecord):
    return (record.updated_at or datetime.min, record.check_in or datetime.min, record.attendance_id)


def dedupe_by_date(records: Iterable[AttendanceRecord]) -> dict[date, AttendanceRecord]:
    """One record per date: latest update, then latest check-in, then highest id."""

    by_date: dict[date, AttendanceRecord] = {}
    for record in records:
        current = by_date.get(record.work_date)
        if current is None or _rank(record) > _rank(current):
            by_date[record.work_date] = record
    return by_date


def counts_as_present(record: AttendanceRecord) -> bool:
    if record.status in PRESENT_LIKE_STATUSES:
        return True
    return record.status in (AttendanceStatus.PENDING, AttendanceStatus.MISSING) and record.check_in is not None


def build_tally(
    year: int,
    month: int,
    records: Iterable[AttendanceRecord],
    schedule_for: Callable[[date], ResolvedSchedule],
    *,
    as_of: date,
) -> MonthTally:
    by_date = dedupe_by_date(records)

    total_days = weekly_off = working = 0
    present = late = early = late_early = half = leave = absent = missing = 0
    worked_hours = overtime = 0.0
    off_worked = 0

    for day in iter_month_days(year, month):
        total_days += 1
        schedule = schedule_for(day)
        record = by_date.get(day)

        if schedule.is_weekly_off:
            weekly_off += 1
            if record and record.check_in and record.check_out and record.status in PRESENT_LIKE_STATUSES:
                off_worked += 1
            continue

        working += 1
        if record is None:
            if day < as_of:
                missing += 1
            continue

        status = record.status
        if status == AttendanceStatus.LEAVE:
            leave += 1
        elif status == AttendanceStatus.ABSENT:
            absent += 1
        elif status == AttendanceStatus.HALF_DAY:
            half += 1
        elif counts_as_present(record):
            present += 1
            if status == AttendanceStatus.LATE:
                late += 1
            elif status == AttendanceStatus.EARLY_ARRIVAL:
                early += 1
            elif status == AttendanceStatus.LATE_EARLY_ARRIVAL:
                late_early += 1
        elif day < as_of:
            # No check-in: nobody showed up.
            missing += 1

        worked_hours += record.working_hours
        if record.check_in and record.check_out and record.working_hours > schedule.daily_hours:
            overtime += record.working_hours - schedule.daily_hours

    return MonthTally(
        total_days_in_month=total_days,
        weekly_off_days=weekly_off,
        working_days=working,
        present_days=present,
        late_days=late,
        early_departure_days=early,
        late_early_departure_days=late_early,
        half_days=half,
        leave_days=leave,
        recorded_absent_days=absent,
        missing_days=missing,
        worked_hours=round(worked_hours, 2),
        overtime_hours=round(overtime, 2),
        weekly_off_days_worked=off_worked,
    )
