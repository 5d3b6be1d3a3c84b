from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import today_local
from ..common.http import admin_required, body, current_actor, date_param, datetime_param, fail, int_param, json_api, ok
from ..core.enums import SalaryStatus
from ..core.exceptions import SalaryConfigurationError, ValidationError
from ..container import Container


def _status_param(value):
    if value in (None, ""):
        return None
    try:
        return SalaryStatus(value)
    except ValueError:
        raise ValidationError(f"Unknown salary status: {value}")


def register(app: Flask, container: Container) -> None:
    payroll = container.payroll_service

    def _period(data: dict) -> tuple[int, int]:
        today = today_local()
        month = int_param(data.get("month"), "month") or today.month
        year = int_param(data.get("year"), "year") or today.year
        return month, year

    @app.route("/api/salaries/calculate", methods=["POST"], endpoint="api_salaries_calculate")
    @admin_required
    @json_api
    def calculate():
        data = body()
        employee_id = int_param(data.get("employee_id"), "employee_id")
        if employee_id is None:
            return fail("employee_id is required", 400)
        month, year = _period(data)
        try:
            records = payroll.calculate_for_employee(
                employee_id,
                month=month,
                year=year,
                department_id=int_param(data.get("department_id"), "department_id"),
                criteria=payroll.criteria_from(data.get("criteria")),
                calculated_by=current_actor().user_id,
                as_of=date_param(data.get("as_of"), "as_of", default=today_local()),
            )
        except SalaryConfigurationError as e:
            return fail(str(e), 400)
        return ok([r.to_dict() for r in records])

    @app.route("/api/salaries/calculate-all", methods=["POST"], endpoint="api_salaries_calculate_all")
    @admin_required
    @json_api
    def calculate_all():
        data = body()
        month, year = _period(data)
        result = payroll.calculate_all(
            month=month,
            year=year,
            criteria=payroll.criteria_from(data.get("criteria")),
            calculated_by=current_actor().user_id,
            as_of=date_param(data.get("as_of"), "as_of", default=today_local()),
        )
        return ok(result.to_dict())

    @app.route("/api/salaries", methods=["GET"], endpoint="api_salaries_list")
    @admin_required
    @json_api
    def list_salaries():
        rows = payroll.list_salaries(
            month=int_param(request.args.get("month"), "month"),
            year=int_param(request.args.get("year"), "year"),
            employee_id=int_param(request.args.get("employee_id"), "employee_id"),
            status=_status_param(request.args.get("status")),
        )
        return ok([r.to_dict() for r in rows])

    @app.route("/api/salaries/<int:salary_id>", methods=["GET"], endpoint="api_salaries_get")
    @admin_required
    @json_api
    def get_salary(salary_id: int):
        return ok(payroll.get_salary(salary_id).to_dict())

    @app.route("/api/salaries/<int:salary_id>/approve", methods=["POST"], endpoint="api_salaries_approve")
    @admin_required
    @json_api
    def approve(salary_id: int):
        return ok(payroll.approve(salary_id, approved_by=current_actor().user_id).to_dict())

    @app.route("/api/salaries/<int:salary_id>/paid", methods=["POST"], endpoint="api_salaries_paid")
    @admin_required
    @json_api
    def mark_paid(salary_id: int):
        paid_on = datetime_param(body().get("paid_on"), "paid_on")
        return ok(payroll.mark_paid(salary_id, paid_on=paid_on).to_dict())

    @app.route("/api/salaries/<int:salary_id>", methods=["PUT"], endpoint="api_salaries_adjust")
    @admin_required
    @json_api
    def adjust(salary_id: int):
        data = body()
        record = payroll.adjust(
            salary_id,
            other_deductions=int_param(data.get("other_deductions"), "other_deductions"),
            allowances=int_param(data.get("allowances"), "allowances"),
            remarks=data.get("remarks"),
        )
        return ok(record.to_dict())
