from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields, replace
from datetime import datetime
from typing import Any, Mapping, Optional

from ..core import constants
from ..core.enums import SalaryMethod, SalaryStatus
from ..core.exceptions import ValidationError


def _amounts(raw: Any, field_name: str) -> dict[str, int]:
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise ValidationError(f"{field_name} must be an object of name -> amount")
    out: dict[str, int] = {}
    for name, amount in raw.items():
        try:
            out[str(name)] = int(amount)
        except (TypeError, ValueError):
            raise ValidationError(f"{field_name}.{name} must be an integer amount")
    return out


@dataclass(frozen=True)
class SalaryCriteria:
    """Payroll rules for one run. A threshold <= 0 disables that conversion."""

    method: SalaryMethod = SalaryMethod.STANDARD
    late_threshold: int = constants.DEFAULT_LATE_THRESHOLD
    half_day_threshold: int = constants.DEFAULT_HALF_DAY_THRESHOLD
    early_departure_threshold: int = constants.DEFAULT_EARLY_DEPARTURE_THRESHOLD
    late_early_departure_threshold: int = constants.DEFAULT_LATE_EARLY_DEPARTURE_THRESHOLD
    leave_threshold: Optional[int] = None
    perfect_attendance_threshold: float = constants.DEFAULT_PERFECT_ATTENDANCE_THRESHOLD
    perfect_attendance_bonus: int = 0
    include_overtime: bool = False
    include_weekly_off_work: bool = False
    custom_deductions: Mapping[str, int] = field(default_factory=dict)
    allowances: Mapping[str, int] = field(default_factory=dict)

    def merged(self, overrides: Optional[Mapping[str, Any]]) -> "SalaryCriteria":
        """Return a copy with the known keys of `overrides` applied."""

        if not overrides:
            return self
        known = {f.name for f in fields(self)}
        changes: dict[str, Any] = {}
        for key, value in overrides.items():
            if key not in known or (value is None and key != "leave_threshold"):
                continue
            try:
                if key == "method":
                    changes[key] = SalaryMethod(value)
                elif key in ("custom_deductions", "allowances"):
                    changes[key] = _amounts(value, key)
                elif key in ("include_overtime", "include_weekly_off_work"):
                    changes[key] = bool(value)
                elif key == "perfect_attendance_threshold":
                    changes[key] = float(value)
                elif key == "leave_threshold":
                    changes[key] = None if value is None else int(value)
                else:
                    changes[key] = int(value)
            except (TypeError, ValueError):
                raise ValidationError(f"Invalid value for {key}: {value!r}")
        return replace(self, **changes)


@dataclass(frozen=True)
class SalaryCalculations:
    total_days_in_month: int = 0
    weekly_off_days: int = 0
    total_working_days: int = 0
    present_days: int = 0
    late_days: int = 0
    early_departure_days: int = 0
    late_early_departure_days: int = 0
    half_days: int = 0
    leave_days: int = 0
    recorded_absent_days: int = 0
    missing_days: int = 0
    absent_days: int = 0
    late_as_absent: int = 0
    half_day_as_absent: int = 0
    early_departure_as_absent: int = 0
    late_early_departure_as_absent: int = 0
    excess_leaves: int = 0
    total_absent_equivalent: int = 0
    attendance_percentage: float = 0.0
    per_day_salary: int = 0
    per_hour_salary: int = 0
    daily_hours: float = 0.0
    overtime_hours: float = 0.0
    weekly_off_days_worked: int = 0
    expected_hours: float = 0.0
    worked_hours: float = 0.0
    missing_hours: float = 0.0


@dataclass(frozen=True)
class SalaryDeductions:
    absent_deduction: int = 0
    late_deduction: int = 0
    half_day_deduction: int = 0
    early_departure_deduction: int = 0
    late_early_departure_deduction: int = 0
    excess_leave_deduction: int = 0
    missing_hours_deduction: int = 0
    custom: Mapping[str, int] = field(default_factory=dict)
    other_deductions: int = 0

    @property
    def total(self) -> int:
        return (
            self.absent_deduction
            + self.late_deduction
            + self.half_day_deduction
            + self.early_departure_deduction
            + self.late_early_departure_deduction
            + self.excess_leave_deduction
            + self.missing_hours_deduction
            + sum(self.custom.values())
            + self.other_deductions
        )


@dataclass(frozen=True)
class SalaryAdditions:
    perfect_attendance_bonus: int = 0
    overtime: int = 0
    weekly_off_work: int = 0
    allowances: Mapping[str, int] = field(default_factory=dict)
    other_allowances: int = 0

    @property
    def total(self) -> int:
        return (
            self.perfect_attendance_bonus
            + self.overtime
            + self.weekly_off_work
            + sum(self.allowances.values())
            + self.other_allowances
        )


@dataclass(frozen=True)
class SalaryRecord:
    salary_id: int
    employee_id: int
    department_id: Optional[int]
    month: int
    year: int
    method: SalaryMethod
    base_salary: int
    calculations: SalaryCalculations
    deductions: SalaryDeductions
    additions: SalaryAdditions
    status: SalaryStatus = SalaryStatus.CALCULATED
    remarks: str = ""
    calculated_by: Optional[int] = None
    approved_by: Optional[int] = None
    paid_on: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def net_salary(self) -> int:
        return self.base_salary - self.deductions.total + self.additions.total

    def breakdown(self) -> dict:
        return {
            "calculations": asdict(self.calculations),
            "deductions": {**asdict(self.deductions), "total": self.deductions.total},
            "additions": {**asdict(self.additions), "total": self.additions.total},
        }

    def to_dict(self) -> dict:
        return {
            "salary_id": self.salary_id,
            "employee_id": self.employee_id,
            "department_id": self.department_id,
            "month": self.month,
            "year": self.year,
            "method": self.method.value,
            "base_salary": self.base_salary,
            **self.breakdown(),
            "total_deductions": self.deductions.total,
            "total_additions": self.additions.total,
            "net_salary": self.net_salary,
            "status": self.status.value,
            "remarks": self.remarks,
            "calculated_by": self.calculated_by,
            "approved_by": self.approved_by,
            "paid_on": self.paid_on.isoformat(sep=" ") if self.paid_on else None,
        }


def breakdown_from_dict(raw: Mapping[str, Any]) -> tuple[SalaryCalculations, SalaryDeductions, SalaryAdditions]:
    """Rebuild the trace objects from the stored JSON breakdown (extra keys ignored)."""

    def build(cls, data):
        names = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in (data or {}).items() if k in names})

    return (
        build(SalaryCalculations, raw.get("calculations")),
        build(SalaryDeductions, raw.get("deductions")),
        build(SalaryAdditions, raw.get("additions")),
    )


@dataclass
class BatchPayrollResult:
    results: list[SalaryRecord] = field(default_factory=list)
    errors: list[dict] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "results": [r.to_dict() for r in self.results],
            "errors": list(self.errors),
            "calculated": len(self.results),
            "failed": len(self.errors),
        }
