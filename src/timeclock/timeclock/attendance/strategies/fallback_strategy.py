from __future__ import annotations

from typing import Optional

from ...core import constants
from ...core.enums import AttendanceStatus
from ...schedules.model import ResolvedSchedule
from ..model import AttendanceRecord
from .base import AttendanceStrategy, StatusDecision, worked_hours


class FallbackStrategy(AttendanceStrategy):
    """No schedule available: classify on worked hours alone."""

    def decide(self, record: AttendanceRecord, schedule: Optional[ResolvedSchedule]) -> StatusDecision:
        hours = worked_hours(record)
        if hours >= constants.FALLBACK_FULL_DAY_HOURS:
            status = AttendanceStatus.PRESENT
        elif hours >= constants.FALLBACK_HALF_DAY_HOURS:
            status = AttendanceStatus.HALF_DAY
        elif hours > 0:
            status = AttendanceStatus.LATE
        else:
            status = record.status
        return StatusDecision(status=status, working_hours=hours)
