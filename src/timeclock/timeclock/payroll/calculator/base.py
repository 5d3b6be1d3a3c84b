from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass

from ..model import SalaryAdditions, SalaryCalculations, SalaryCriteria, SalaryDeductions
from .tally import MonthTally


@dataclass(frozen=True)
class PayrollComputation:
    calculations: SalaryCalculations
    deductions: SalaryDeductions
    additions: SalaryAdditions


def as_absent(count: int, threshold: int) -> int:
    """Every `threshold` occurrences count as one absent day; <= 0 disables."""

    if threshold <= 0:
        return 0
    return count // threshold


class PayrollCalculator(ABC):
    """Calculator interface (Strategy Pattern for payroll)."""

    @abstractmethod
    def calculate(
        self,
        tally: MonthTally,
        *,
        base_salary: int,
        daily_hours: float,
        leave_threshold: int,
        criteria: SalaryCriteria,
    ) -> PayrollComputation:
        raise NotImplementedError

    @staticmethod
    def payable_days(tally: MonthTally) -> int:
        return max(tally.working_days - tally.leave_days, 0)

    @staticmethod
    def rates(base_salary: int, payable_days: int, daily_hours: float) -> tuple[int, int]:
        per_day = base_salary // payable_days if payable_days > 0 else 0
        per_hour = math.floor(per_day / daily_hours) if daily_hours > 0 else 0
        return per_day, per_hour

    @staticmethod
    def attendance_percentage(tally: MonthTally, payable_days: int) -> float:
        if payable_days <= 0:
            return 0.0
        return round(tally.present_days / payable_days * 100, 2)

    def additions(
        self,
        tally: MonthTally,
        *,
        criteria: SalaryCriteria,
        per_day: int,
        per_hour: int,
        attendance_percentage: float,
        payable_days: int,
    ) -> SalaryAdditions:
        bonus = 0
        if (
            criteria.perfect_attendance_bonus > 0
            and payable_days > 0
            and attendance_percentage >= criteria.perfect_attendance_threshold
        ):
            bonus = criteria.perfect_attendance_bonus

        overtime = math.floor(tally.overtime_hours * per_hour) if criteria.include_overtime else 0
        off_work = tally.weekly_off_days_worked * per_day if criteria.include_weekly_off_work else 0

        return SalaryAdditions(
            perfect_attendance_bonus=bonus,
            overtime=overtime,
            weekly_off_work=off_work,
            allowances=dict(criteria.allowances),
        )
