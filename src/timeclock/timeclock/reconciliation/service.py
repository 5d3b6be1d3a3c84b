"""Reconciliation sweeps.

`mark_stale_pending` closes out punches that were never completed;
`mark_absentees` manufactures absent records for employees with no punch.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Optional

from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import today_local
from ..core import constants
from ..core.enums import AttendanceStatus, Role
from ..core.exceptions import DuplicateRecordError
from ..employees.repository import EmployeeRepository
from ..schedules.repository import AssignmentRepository
from ..schedules.resolver import ScheduleResolver

logger = logging.getLogger(__name__)


@dataclass
class AbsenteeSummary:
    work_date: date
    created: int = 0
    already_marked: int = 0
    off_day: int = 0
    employee_ids: list[int] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "date": self.work_date.isoformat(),
            "created": self.created,
            "already_marked": self.already_marked,
            "off_day": self.off_day,
            "employee_ids": list(self.employee_ids),
        }


class ReconciliationService:
    def __init__(
        self,
        records: AttendanceRepository,
        employees: EmployeeRepository,
        assignments: AssignmentRepository,
        resolver: ScheduleResolver,
        *,
        exempt_roles: Iterable[Role] = (Role.SUPER_ADMIN,),
    ):
        self._records = records
        self._employees = employees
        self._assignments = assignments
        self._resolver = resolver
        self._exempt_roles = frozenset(exempt_roles)

    def mark_stale_pending(self, today: Optional[date] = None) -> int:
        today = today or today_local()
        count = self._records.mark_pending_before(today, status=AttendanceStatus.MISSING)
        if count:
            logger.info("[reconcile] %s pending record(s) before %s marked missing", count, today)
        return count

    def mark_absentees(self, work_date: Optional[date] = None) -> AbsenteeSummary:
        work_date = work_date or today_local()
        summary = AbsenteeSummary(work_date=work_date)
        already = self._records.employee_ids_with_records_on(work_date)

        for employee in self._employees.list_active():
            if employee.role in self._exempt_roles:
                continue
            if employee.employee_id in already:
                summary.already_marked += 1
                continue

            assignments = [a for a in self._assignments.list_for_employee(employee.employee_id) if a.is_active]
            working = [a for a in (assignments or [None]) if not self._resolver.resolve(a, work_date).is_weekly_off]
            if not working:
                summary.off_day += 1
                continue

            created = 0
            raced = False
            for assignment in working:
                record = AttendanceRecord(
                    attendance_id=0,
                    employee_id=employee.employee_id,
                    department_id=assignment.department_id if assignment else None,
                    work_date=work_date,
                    status=AttendanceStatus.ABSENT,
                    working_hours=0.0,
                    remarks=constants.ABSENTEE_REMARK,
                )
                try:
                    self._records.create(record)
                except DuplicateRecordError:
                    # A punch landed between the read above and this insert.
                    raced = True
                    continue
                created += 1

            summary.created += created
            if created:
                summary.employee_ids.append(employee.employee_id)
            elif raced:
                summary.already_marked += 1

        logger.info(
            "[reconcile] absentees for %s: created=%s already=%s off=%s",
            work_date,
            summary.created,
            summary.already_marked,
            summary.off_day,
        )
        return summary
