from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Any, Iterable, Mapping, Optional, Sequence

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import month_bounds, now_local, today_local
from ..common.validators import require_month, require_year
from ..core.enums import Role, SalaryMethod, SalaryStatus
from ..core.exceptions import NotFoundError, SalaryConfigurationError, ValidationError
from ..employees.repository import EmployeeRepository
from ..schedules.model import DepartmentAssignment
from ..schedules.repository import AssignmentRepository
from ..schedules.resolver import ScheduleResolver
from .calculator.base import PayrollCalculator
from .calculator.standard_calculator import StandardPayrollCalculator
from .calculator.tally import build_tally
from .calculator.weekly_hours_calculator import WeeklyHoursPayrollCalculator
from .model import BatchPayrollResult, SalaryCriteria, SalaryRecord
from .repository import SalaryRepository

logger = logging.getLogger(__name__)


class PayrollService:
    def __init__(
        self,
        salaries: SalaryRepository,
        records: AttendanceRepository,
        employees: EmployeeRepository,
        assignments: AssignmentRepository,
        resolver: ScheduleResolver,
        *,
        default_criteria: Optional[SalaryCriteria] = None,
        exempt_roles: Iterable[Role] = (Role.SUPER_ADMIN,),
        calculators: Optional[Mapping[SalaryMethod, PayrollCalculator]] = None,
    ):
        self._salaries = salaries
        self._records = records
        self._employees = employees
        self._assignments = assignments
        self._resolver = resolver
        self.default_criteria = default_criteria or SalaryCriteria()
        self._exempt_roles = frozenset(exempt_roles)
        self._calculators = dict(
            calculators
            or {
                SalaryMethod.STANDARD: StandardPayrollCalculator(),
                SalaryMethod.WEEKLY_HOURS: WeeklyHoursPayrollCalculator(),
            }
        )

    def criteria_from(self, overrides: Optional[Mapping[str, Any]]) -> SalaryCriteria:
        return self.default_criteria.merged(overrides)

    # ----- calculation -----

    def calculate_for_employee(
        self,
        employee_id: int,
        *,
        month: int,
        year: int,
        department_id: Optional[int] = None,
        criteria: Optional[SalaryCriteria] = None,
        calculated_by: Optional[int] = None,
        as_of: Optional[date] = None,
    ) -> list[SalaryRecord]:
        month = require_month(month)
        year = require_year(year)
        criteria = criteria or self.default_criteria

        employee = self._employees.get_by_id(employee_id)
        if employee is None:
            raise NotFoundError("Employee not found")

        assignments = [a for a in self._assignments.list_for_employee(employee_id) if a.is_active]
        if department_id is not None:
            assignments = [a for a in assignments if a.department_id == department_id]
        if not assignments:
            raise SalaryConfigurationError("no department assignment")

        return [
            self._calculate_assignment(assignment, month=month, year=year, criteria=criteria, calculated_by=calculated_by, as_of=as_of)
            for assignment in assignments
        ]

    def _calculate_assignment(
        self,
        assignment: DepartmentAssignment,
        *,
        month: int,
        year: int,
        criteria: SalaryCriteria,
        calculated_by: Optional[int],
        as_of: Optional[date],
    ) -> SalaryRecord:
        if not assignment.monthly_salary or assignment.monthly_salary <= 0:
            raise SalaryConfigurationError("no salary configured")

        start, end = month_bounds(year, month)
        records = self._records.list_range(
            start, end, employee_id=assignment.employee_id, department_id=assignment.department_id
        )
        tally = build_tally(
            year,
            month,
            records,
            lambda day: self._resolver.resolve(assignment, day),
            as_of=as_of or today_local(),
        )

        daily_hours = float(assignment.working_hours_per_week) / float(assignment.working_days_per_week or 1)
        leave_threshold = criteria.leave_threshold if criteria.leave_threshold is not None else assignment.leave_threshold

        calculator = self._calculators[criteria.method]
        computed = calculator.calculate(
            tally,
            base_salary=int(assignment.monthly_salary),
            daily_hours=daily_hours,
            leave_threshold=int(leave_threshold or 0),
            criteria=criteria,
        )

        record = SalaryRecord(
            salary_id=0,
            employee_id=assignment.employee_id,
            department_id=assignment.department_id,
            month=month,
            year=year,
            method=criteria.method,
            base_salary=int(assignment.monthly_salary),
            calculations=computed.calculations,
            deductions=computed.deductions,
            additions=computed.additions,
            status=SalaryStatus.CALCULATED,
            calculated_by=calculated_by,
        )
        saved = self._salaries.upsert(record)
        logger.info(
            "[payroll] employee=%s department=%s %02d/%s net=%s",
            assignment.employee_id,
            assignment.department_id,
            month,
            year,
            saved.net_salary,
        )
        return saved

    def calculate_all(
        self,
        *,
        month: int,
        year: int,
        criteria: Optional[SalaryCriteria] = None,
        calculated_by: Optional[int] = None,
        as_of: Optional[date] = None,
    ) -> BatchPayrollResult:
        month = require_month(month)
        year = require_year(year)
        result = BatchPayrollResult()

        for employee in self._employees.list_active():
            if employee.role in self._exempt_roles:
                continue
            try:
                result.results.extend(
                    self.calculate_for_employee(
                        employee.employee_id,
                        month=month,
                        year=year,
                        criteria=criteria,
                        calculated_by=calculated_by,
                        as_of=as_of,
                    )
                )
            except Exception as exc:
                if not isinstance(exc, (SalaryConfigurationError, NotFoundError, ValidationError)):
                    logger.exception("[payroll] unexpected failure for employee=%s", employee.employee_id)
                result.errors.append(
                    {"employee_id": employee.employee_id, "employee_code": employee.employee_code, "error": str(exc)}
                )

        logger.info("[payroll] batch %02d/%s: %s ok, %s failed", month, year, len(result.results), len(result.errors))
        return result

    # ----- workflow -----

    def list_salaries(
        self,
        *,
        month: Optional[int] = None,
        year: Optional[int] = None,
        employee_id: Optional[int] = None,
        status: Optional[SalaryStatus] = None,
    ) -> Sequence[SalaryRecord]:
        return self._salaries.list(month=month, year=year, employee_id=employee_id, status=status)

    def get_salary(self, salary_id: int) -> SalaryRecord:
        record = self._salaries.get_by_id(salary_id)
        if record is None:
            raise NotFoundError("Salary record not found")
        return record

    def approve(self, salary_id: int, *, approved_by: Optional[int]) -> SalaryRecord:
        record = self.get_salary(salary_id)
        if record.status not in (SalaryStatus.PENDING, SalaryStatus.CALCULATED):
            raise ValidationError(f"Cannot approve a salary that is {record.status.value}")
        return self._salaries.save(replace(record, status=SalaryStatus.APPROVED, approved_by=approved_by))

    def mark_paid(self, salary_id: int, *, paid_on: Optional[datetime] = None) -> SalaryRecord:
        record = self.get_salary(salary_id)
        if record.status != SalaryStatus.APPROVED:
            raise ValidationError("Salary must be approved before it is marked paid")
        return self._salaries.save(replace(record, status=SalaryStatus.PAID, paid_on=paid_on or now_local()))

    def adjust(
        self,
        salary_id: int,
        *,
        other_deductions: Optional[int] = None,
        allowances: Optional[int] = None,
        remarks: Optional[str] = None,
    ) -> SalaryRecord:
        """Change manual adjustments and recompute totals without re-reading attendance."""

        record = self.get_salary(salary_id)
        if record.status == SalaryStatus.PAID:
            raise ValidationError("A paid salary cannot be adjusted")
        if other_deductions is not None and other_deductions < 0:
            raise ValidationError("other_deductions cannot be negative")
        if allowances is not None and allowances < 0:
            raise ValidationError("allowances cannot be negative")

        deductions = record.deductions
        if other_deductions is not None:
            deductions = replace(deductions, other_deductions=int(other_deductions))
        additions = record.additions
        if allowances is not None:
            additions = replace(additions, other_allowances=int(allowances))

        updated = replace(
            record,
            deductions=deductions,
            additions=additions,
            remarks=record.remarks if remarks is None else remarks,
        )
        return self._salaries.save(updated)
