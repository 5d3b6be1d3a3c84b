from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...common.datetime_utils import minutes_between
from ...core.enums import AttendanceStatus
from ...schedules.model import ResolvedSchedule
from ..model import AttendanceRecord
from .base import AttendanceStrategy, StatusDecision, worked_hours


class ScheduledStrategy(AttendanceStrategy):
    """Compare both punches against the resolved shift and its leverage.

    Arrival later than check-in + leverage is late, departure earlier than
    check-out - leverage is early.
    """

    def decide(self, record: AttendanceRecord, schedule: Optional[ResolvedSchedule]) -> StatusDecision:
        if schedule is None or record.check_in is None or record.check_out is None:
            return StatusDecision(status=record.status, working_hours=record.working_hours)

        hours = worked_hours(record)

        scheduled_in = datetime.combine(record.check_in.date(), schedule.check_in_time)
        scheduled_out = datetime.combine(record.check_out.date(), schedule.check_out_time)
        arrived_late = minutes_between(scheduled_in, record.check_in) > schedule.check_in_leverage_minutes
        left_early = minutes_between(record.check_out, scheduled_out) > schedule.check_out_leverage_minutes

        if arrived_late and left_early:
            status = AttendanceStatus.LATE_EARLY_ARRIVAL
        elif arrived_late:
            status = AttendanceStatus.LATE
        elif left_early:
            status = AttendanceStatus.EARLY_ARRIVAL
        else:
            status = AttendanceStatus.PRESENT

        return StatusDecision(status=status, working_hours=hours)
