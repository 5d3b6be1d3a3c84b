"""Fan one employee's punch pair out across concurrently active assignments.

A multi-department employee punches once at arrival and once at departure;
each department gets the part of that span that falls inside its own shift.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Sequence

from ..schedules.model import DepartmentAssignment, ResolvedSchedule
from ..schedules.resolver import ScheduleResolver


@dataclass(frozen=True)
class ShiftSlice:
    assignment: Optional[DepartmentAssignment]
    check_in: Optional[datetime]
    check_out: Optional[datetime]
    schedule: ResolvedSchedule

    @property
    def department_id(self) -> Optional[int]:
        return self.assignment.department_id if self.assignment else None


class ShiftSplitter:
    def __init__(self, resolver: ScheduleResolver):
        self._resolver = resolver

    def _whole(self, assignment: Optional[DepartmentAssignment], work_date: date, check_in, check_out) -> list[ShiftSlice]:
        schedule = self._resolver.resolve(assignment, work_date)
        return [ShiftSlice(assignment=assignment, check_in=check_in, check_out=check_out, schedule=schedule)]

    def split(
        self,
        assignments: Sequence[DepartmentAssignment],
        work_date: date,
        check_in: Optional[datetime],
        check_out: Optional[datetime],
    ) -> list[ShiftSlice]:
        active = [a for a in assignments if a.is_active]
        if len(active) <= 1:
            return self._whole(active[0] if active else None, work_date, check_in, check_out)

        resolved = [(a, self._resolver.resolve(a, work_date)) for a in active]
        working = [(a, s) for a, s in resolved if not s.is_weekly_off]
        if not working:
            primary = next((a for a in active if a.is_primary), active[0])
            return self._whole(primary, work_date, check_in, check_out)

        working.sort(key=lambda item: item[1].check_in_time)

        slices: list[ShiftSlice] = []
        for assignment, schedule in working:
            shift_start, shift_end = schedule.window(work_date)
            if check_in is None or check_in > shift_end:
                continue
            slice_in = max(check_in, shift_start)
            slice_out = min(check_out, shift_end) if check_out is not None and check_out >= shift_start else None
            slices.append(ShiftSlice(assignment=assignment, check_in=slice_in, check_out=slice_out, schedule=schedule))
        return slices
