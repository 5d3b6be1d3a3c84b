from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one attendance day of one employee in one department.

    `department_id` is None for employees without any department assignment.
    `attendance_id` is 0 until the record has been persisted.
    """

    attendance_id: int
    employee_id: int
    department_id: Optional[int]
    work_date: date
    check_in: Optional[datetime] = None
    check_out: Optional[datetime] = None
    status: AttendanceStatus = AttendanceStatus.PENDING
    working_hours: float = 0.0
    is_manual_entry: bool = False
    device_id: str = ""
    modified_by: Optional[int] = None
    remarks: str = ""
    updated_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "attendance_id": self.attendance_id,
            "employee_id": self.employee_id,
            "department_id": self.department_id,
            "work_date": self.work_date.isoformat(),
            "check_in": self.check_in.isoformat(sep=" ") if self.check_in else None,
            "check_out": self.check_out.isoformat(sep=" ") if self.check_out else None,
            "status": self.status.value,
            "working_hours": round(self.working_hours, 2),
            "is_manual_entry": self.is_manual_entry,
            "device_id": self.device_id,
            "modified_by": self.modified_by,
            "remarks": self.remarks,
        }
