from __future__ import annotations

import math

from ..model import SalaryCalculations, SalaryCriteria, SalaryDeductions
from .base import PayrollCalculator, PayrollComputation
from .tally import MonthTally


class WeeklyHoursPayrollCalculator(PayrollCalculator):
    """Hours-based rule: pay is docked for every hour short of the expected total."""

    def calculate(
        self,
        tally: MonthTally,
        *,
        base_salary: int,
        daily_hours: float,
        leave_threshold: int,
        criteria: SalaryCriteria,
    ) -> PayrollComputation:
        payable = self.payable_days(tally)
        per_day, per_hour = self.rates(base_salary, payable, daily_hours)

        expected = round(payable * daily_hours, 2)
        missing_hours = round(max(0.0, expected - tally.worked_hours), 2)
        percentage = self.attendance_percentage(tally, payable)

        calculations = SalaryCalculations(
            total_days_in_month=tally.total_days_in_month,
            weekly_off_days=tally.weekly_off_days,
            total_working_days=payable,
            present_days=tally.present_days,
            late_days=tally.late_days,
            early_departure_days=tally.early_departure_days,
            late_early_departure_days=tally.late_early_departure_days,
            half_days=tally.half_days,
            leave_days=tally.leave_days,
            recorded_absent_days=tally.recorded_absent_days,
            missing_days=tally.missing_days,
            absent_days=tally.recorded_absent_days + tally.missing_days,
            attendance_percentage=percentage,
            per_day_salary=per_day,
            per_hour_salary=per_hour,
            daily_hours=daily_hours,
            overtime_hours=tally.overtime_hours,
            weekly_off_days_worked=tally.weekly_off_days_worked,
            expected_hours=expected,
            worked_hours=tally.worked_hours,
            missing_hours=missing_hours,
        )

        deductions = SalaryDeductions(
            missing_hours_deduction=math.floor(missing_hours * per_hour),
            custom=dict(criteria.custom_deductions),
        )

        additions = self.additions(
            tally,
            criteria=criteria,
            per_day=per_day,
            per_hour=per_hour,
            attendance_percentage=percentage,
            payable_days=payable,
        )
        return PayrollComputation(calculations=calculations, deductions=deductions, additions=additions)
