from __future__ import annotations

from typing import Optional

from ...schedules.model import ResolvedSchedule
from ..model import AttendanceRecord
from .base import AttendanceStrategy, StatusDecision


class PendingStrategy(AttendanceStrategy):
    """Check-in or check-out still missing: nothing to decide yet."""

    def decide(self, record: AttendanceRecord, schedule: Optional[ResolvedSchedule]) -> StatusDecision:
        return StatusDecision(status=record.status, working_hours=record.working_hours)
