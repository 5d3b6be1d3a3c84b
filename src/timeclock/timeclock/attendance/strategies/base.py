from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from ...common.datetime_utils import hours_between
from ...core.enums import AttendanceStatus
from ...schedules.model import ResolvedSchedule
from ..model import AttendanceRecord


@dataclass(frozen=True)
class StatusDecision:
    status: AttendanceStatus
    working_hours: float


class AttendanceStrategy(ABC):
    """Strategy Pattern: encapsulate how we decide an attendance status."""

    @abstractmethod
    def decide(self, record: AttendanceRecord, schedule: Optional[ResolvedSchedule]) -> StatusDecision:
        raise NotImplementedError


def worked_hours(record: AttendanceRecord) -> float:
    if record.check_in is None or record.check_out is None:
        return record.working_hours
    return hours_between(record.check_in, record.check_out)
