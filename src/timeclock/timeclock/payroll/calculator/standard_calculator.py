from __future__ import annotations

from ..model import SalaryCalculations, SalaryCriteria, SalaryDeductions
from .base import PayrollCalculator, PayrollComputation, as_absent
from .tally import MonthTally


class StandardPayrollCalculator(PayrollCalculator):
    """Absence-equivalent rule.

    Absences plus threshold conversions (late, half day, early departure,
    late + early departure) and excess leaves are each charged one per-day salary.
    """

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

        absent_days = tally.recorded_absent_days + tally.missing_days
        late_as_absent = as_absent(tally.late_days, criteria.late_threshold)
        half_as_absent = as_absent(tally.half_days, criteria.half_day_threshold)
        early_as_absent = as_absent(tally.early_departure_days, criteria.early_departure_threshold)
        late_early_as_absent = as_absent(tally.late_early_departure_days, criteria.late_early_departure_threshold)
        excess_leaves = max(0, tally.leave_days - leave_threshold)
        total_equivalent = absent_days + late_as_absent + half_as_absent + early_as_absent + late_early_as_absent + excess_leaves
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
            absent_days=absent_days,
            late_as_absent=late_as_absent,
            half_day_as_absent=half_as_absent,
            early_departure_as_absent=early_as_absent,
            late_early_departure_as_absent=late_early_as_absent,
            excess_leaves=excess_leaves,
            total_absent_equivalent=total_equivalent,
            attendance_percentage=percentage,
            per_day_salary=per_day,
            per_hour_salary=per_hour,
            daily_hours=daily_hours,
            overtime_hours=tally.overtime_hours,
            weekly_off_days_worked=tally.weekly_off_days_worked,
            worked_hours=tally.worked_hours,
        )

        deductions = SalaryDeductions(
            absent_deduction=absent_days * per_day,
            late_deduction=late_as_absent * per_day,
            half_day_deduction=half_as_absent * per_day,
            early_departure_deduction=early_as_absent * per_day,
            late_early_departure_deduction=late_early_as_absent * per_day,
            excess_leave_deduction=excess_leaves * per_day,
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
