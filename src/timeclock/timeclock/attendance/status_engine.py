"""Status determination for a single attendance record.

Pure functions over (record, schedule); callers persist the result.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Optional

from ..schedules.model import ResolvedSchedule
from .factory import AttendanceStrategyFactory
from .model import AttendanceRecord
from .strategies.base import StatusDecision

_DEFAULT_FACTORY = AttendanceStrategyFactory()


def evaluate(
    record: AttendanceRecord,
    schedule: Optional[ResolvedSchedule],
    *,
    factory: Optional[AttendanceStrategyFactory] = None,
) -> StatusDecision:
    strategy = (factory or _DEFAULT_FACTORY).for_record(record, schedule)
    return strategy.decide(record, schedule)


def apply_status(
    record: AttendanceRecord,
    schedule: Optional[ResolvedSchedule],
    *,
    factory: Optional[AttendanceStrategyFactory] = None,
) -> AttendanceRecord:
    decision = evaluate(record, schedule, factory=factory)
    if decision.status == record.status and decision.working_hours == record.working_hours:
        return record
    return replace(record, status=decision.status, working_hours=max(decision.working_hours, 0.0))
