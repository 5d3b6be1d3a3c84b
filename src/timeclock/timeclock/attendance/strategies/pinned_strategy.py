from __future__ import annotations

from typing import Optional

from ...schedules.model import ResolvedSchedule
from ..model import AttendanceRecord
from .base import AttendanceStrategy, StatusDecision, worked_hours


class PinnedStrategy(AttendanceStrategy):
    """Manual entry with an explicit status: keep the status, refresh the hours."""

    def decide(self, record: AttendanceRecord, schedule: Optional[ResolvedSchedule]) -> StatusDecision:
        return StatusDecision(status=record.status, working_hours=worked_hours(record))
