from __future__ import annotations

from datetime import timedelta

from flask import Flask, request

from ..common.datetime_utils import today_local
from ..common.http import (
    admin_required,
    body,
    current_actor,
    date_param,
    datetime_param,
    fail,
    int_param,
    json_api,
    ok,
)
from ..core.enums import AttendanceStatus
from ..core.exceptions import ValidationError
from ..container import Container


def _status_param(value):
    if value in (None, ""):
        return None
    try:
        return AttendanceStatus(value)
    except ValueError:
        raise ValidationError(f"Unknown status: {value}")


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    @app.route("/api/attendance", methods=["GET"], endpoint="api_attendance_list")
    @json_api
    def list_attendance():
        today = today_local()
        start = date_param(request.args.get("start"), "start", default=today - timedelta(days=7))
        end = date_param(request.args.get("end"), "end", default=today)
        rows = service.list_records(
            start,
            end,
            employee_id=int_param(request.args.get("employee_id"), "employee_id"),
            department_id=int_param(request.args.get("department_id"), "department_id"),
        )
        return ok([r.to_dict() for r in rows])

    @app.route("/api/attendance/day", methods=["GET"], endpoint="api_attendance_day")
    @json_api
    def day_records():
        employee_id = int_param(request.args.get("employee_id"), "employee_id")
        if employee_id is None:
            return fail("employee_id is required", 400)
        work_date = date_param(request.args.get("date"), "date", default=today_local())
        return ok([r.to_dict() for r in service.get_day_records(employee_id, work_date)])

    @app.route("/api/attendance/manual", methods=["POST"], endpoint="api_attendance_manual")
    @json_api
    def create_manual():
        data = body()
        employee_id = int_param(data.get("employee_id"), "employee_id")
        if employee_id is None:
            return fail("employee_id is required", 400)
        record = service.create_manual(
            current_actor(),
            employee_id,
            date_param(data.get("date"), "date"),
            check_in=datetime_param(data.get("check_in"), "check_in"),
            check_out=datetime_param(data.get("check_out"), "check_out"),
            status=_status_param(data.get("status")),
            remarks=str(data.get("remarks") or ""),
            department_id=int_param(data.get("department_id"), "department_id"),
        )
        return ok(record.to_dict(), 201)

    @app.route("/api/attendance/<int:attendance_id>", methods=["PUT"], endpoint="api_attendance_update")
    @json_api
    def update_record(attendance_id: int):
        data = body()
        record = service.update_record(
            current_actor(),
            attendance_id,
            check_in=datetime_param(data.get("check_in"), "check_in"),
            check_out=datetime_param(data.get("check_out"), "check_out"),
            status=_status_param(data.get("status")),
            remarks=data.get("remarks"),
        )
        return ok(record.to_dict())

    @app.route("/api/attendance/<int:attendance_id>/recompute", methods=["POST"], endpoint="api_attendance_recompute")
    @json_api
    def recompute(attendance_id: int):
        return ok(service.recompute(attendance_id).to_dict())

    @app.route("/api/attendance/mark-absent", methods=["POST"], endpoint="api_attendance_mark_absent")
    @admin_required
    @json_api
    def mark_absent():
        data = body()
        work_date = date_param(data.get("date"), "date", default=today_local())
        summary = container.reconciliation_service.mark_absentees(work_date)
        return ok(summary.to_dict())
