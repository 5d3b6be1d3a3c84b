from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import AttendanceStatus
from ..schedules.model import ResolvedSchedule
from .model import AttendanceRecord
from .strategies.base import AttendanceStrategy
from .strategies.fallback_strategy import FallbackStrategy
from .strategies.pending_strategy import PendingStrategy
from .strategies.pinned_strategy import PinnedStrategy
from .strategies.scheduled_strategy import ScheduledStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on rules."""

    def for_record(self, record: AttendanceRecord, schedule: Optional[ResolvedSchedule]) -> AttendanceStrategy:
        if record.check_in is None or record.check_out is None:
            return PendingStrategy()
        if record.is_manual_entry and record.status != AttendanceStatus.PENDING:
            return PinnedStrategy()
        if schedule is None:
            return FallbackStrategy()
        return ScheduledStrategy()
