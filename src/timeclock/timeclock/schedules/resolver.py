"""Schedule resolution: assignment + date -> the effective shift for that day.

Each field is taken from the first source that sets it: the assignment's
per-weekday override, the assignment itself, the department (leverage only),
then the global defaults.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time
from typing import Optional

from ..core import constants
from ..core.enums import Weekday
from ..employees.model import Department
from ..employees.repository import DepartmentRepository
from .model import DepartmentAssignment, ResolvedSchedule


@dataclass(frozen=True)
class ScheduleDefaults:
    check_in_time: time = constants.DEFAULT_CHECK_IN_TIME
    check_out_time: time = constants.DEFAULT_CHECK_OUT_TIME
    check_in_leverage_minutes: int = constants.DEFAULT_CHECK_IN_LEVERAGE_MINUTES
    check_out_leverage_minutes: int = constants.DEFAULT_CHECK_OUT_LEVERAGE_MINUTES
    weekly_offs: frozenset[Weekday] = constants.DEFAULT_WEEKLY_OFFS
    working_days_per_week: int = constants.DEFAULT_WORKING_DAYS_PER_WEEK
    working_hours_per_week: float = constants.DEFAULT_WORKING_HOURS_PER_WEEK


def _first(*values):
    for value in values:
        if value is not None:
            return value
    return None


def resolve_schedule(
    assignment: Optional[DepartmentAssignment],
    target_date: date,
    *,
    department: Optional[Department] = None,
    defaults: Optional[ScheduleDefaults] = None,
) -> ResolvedSchedule:
    defaults = defaults or ScheduleDefaults()
    weekday = Weekday.of(target_date)

    if assignment is None:
        return ResolvedSchedule(
            check_in_time=defaults.check_in_time,
            check_out_time=defaults.check_out_time,
            check_in_leverage_minutes=_first(
                department.check_in_leverage_minutes if department else None,
                defaults.check_in_leverage_minutes,
            ),
            check_out_leverage_minutes=_first(
                department.check_out_leverage_minutes if department else None,
                defaults.check_out_leverage_minutes,
            ),
            daily_hours=defaults.working_hours_per_week / defaults.working_days_per_week,
            is_weekly_off=weekday in defaults.weekly_offs,
        )

    day = assignment.day_schedules.get(weekday)
    weekly_offs = assignment.weekly_offs if assignment.weekly_offs is not None else defaults.weekly_offs

    days_per_week = assignment.working_days_per_week or defaults.working_days_per_week
    hours_per_week = assignment.working_hours_per_week or defaults.working_hours_per_week
    daily_hours = float(hours_per_week) / float(days_per_week)
    is_half_day = bool(day and day.is_half_day)
    if is_half_day:
        daily_hours /= 2

    return ResolvedSchedule(
        check_in_time=_first(day.check_in_time if day else None, assignment.check_in_time, defaults.check_in_time),
        check_out_time=_first(day.check_out_time if day else None, assignment.check_out_time, defaults.check_out_time),
        check_in_leverage_minutes=int(
            _first(
                assignment.check_in_leverage_minutes,
                department.check_in_leverage_minutes if department else None,
                defaults.check_in_leverage_minutes,
            )
        ),
        check_out_leverage_minutes=int(
            _first(
                assignment.check_out_leverage_minutes,
                department.check_out_leverage_minutes if department else None,
                defaults.check_out_leverage_minutes,
            )
        ),
        daily_hours=daily_hours,
        is_weekly_off=weekday in weekly_offs or bool(day and day.is_off),
        is_half_day=is_half_day,
    )


class ScheduleResolver:
    """`resolve_schedule` with the department looked up through a repository."""

    def __init__(self, departments: Optional[DepartmentRepository] = None, *, defaults: Optional[ScheduleDefaults] = None):
        self._departments = departments
        self.defaults = defaults or ScheduleDefaults()

    def resolve(self, assignment: Optional[DepartmentAssignment], target_date: date) -> ResolvedSchedule:
        department = None
        if assignment is not None and self._departments is not None:
            department = self._departments.get_by_id(assignment.department_id)
        return resolve_schedule(assignment, target_date, department=department, defaults=self.defaults)
