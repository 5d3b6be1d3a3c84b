from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Mapping, Optional

from ..core.enums import Weekday


@dataclass(frozen=True)
class DaySchedule:
    """Per-weekday override on an assignment; unset times fall back to the assignment."""

    check_in_time: Optional[time] = None
    check_out_time: Optional[time] = None
    is_half_day: bool = False
    is_off: bool = False


@dataclass(frozen=True)
class DepartmentAssignment:
    """One employee's schedule and pay terms for one department."""

    assignment_id: int
    employee_id: int
    department_id: int
    is_primary: bool = False
    is_active: bool = True
    check_in_time: Optional[time] = None
    check_out_time: Optional[time] = None
    weekly_offs: Optional[frozenset[Weekday]] = None
    day_schedules: Mapping[Weekday, DaySchedule] = field(default_factory=dict)
    check_in_leverage_minutes: Optional[int] = None
    check_out_leverage_minutes: Optional[int] = None
    monthly_salary: int = 0
    leave_threshold: int = 0
    working_days_per_week: int = 5
    working_hours_per_week: float = 40.0


@dataclass(frozen=True)
class ResolvedSchedule:
    check_in_time: time
    check_out_time: time
    check_in_leverage_minutes: int
    check_out_leverage_minutes: int
    daily_hours: float
    is_weekly_off: bool = False
    is_half_day: bool = False

    def window(self, day: date) -> tuple[datetime, datetime]:
        """Shift start/end on `day`; an end at or before the start belongs to the next day."""

        start = datetime.combine(day, self.check_in_time)
        end = datetime.combine(day, self.check_out_time)
        if end <= start:
            end += timedelta(days=1)
        return start, end
