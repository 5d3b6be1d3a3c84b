from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    """Persistence for attendance records.

    Note: (employee, department, date) is unique; `create` raises
    DuplicateRecordError when another writer got there first.
    """

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_for_key(self, employee_id: int, department_id: Optional[int], work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def list_for_employee_and_date(self, employee_id: int, work_date: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def create(self, record: AttendanceRecord) -> AttendanceRecord:
        raise NotImplementedError

    def save(self, record: AttendanceRecord) -> AttendanceRecord:
        raise NotImplementedError

    def list_range(
        self,
        start: date,
        end: date,
        *,
        employee_id: Optional[int] = None,
        department_id: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def mark_pending_before(self, day: date, *, status: AttendanceStatus = AttendanceStatus.MISSING) -> int:
        """Bulk-move `pending` records dated before `day` to `status`; returns the row count."""

        raise NotImplementedError

    def employee_ids_with_records_on(self, work_date: date) -> set[int]:
        raise NotImplementedError
