from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Sequence

from ..core.enums import Weekday
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, load_json, normalize_mysql_time
from ..common.datetime_utils import parse_clock
from .model import DaySchedule, DepartmentAssignment
from .repository import AssignmentRepository

logger = logging.getLogger(__name__)

_COLUMNS = """
    assignment_id, employee_id, department_id, is_primary, is_active,
    check_in_time, check_out_time, weekly_offs, day_schedules,
    check_in_leverage_minutes, check_out_leverage_minutes,
    monthly_salary, leave_threshold, working_days_per_week, working_hours_per_week
"""


def _parse_weekly_offs(value: Any) -> Optional[frozenset[Weekday]]:
    if value is None or str(value).strip() == "":
        return None
    days = set()
    for part in str(value).split(","):
        if part.strip():
            days.add(Weekday.parse(part))
    return frozenset(days)


def _parse_day_schedules(value: Any) -> dict[Weekday, DaySchedule]:
    raw = load_json(value, default={}) or {}
    out: dict[Weekday, DaySchedule] = {}
    for day_name, item in raw.items():
        try:
            day = Weekday.parse(day_name)
        except ValueError:
            logger.warning("[schedules] ignoring unknown weekday %r in day_schedules", day_name)
            continue
        item = item or {}
        check_in = item.get("check_in_time")
        check_out = item.get("check_out_time")
        out[day] = DaySchedule(
            check_in_time=parse_clock(check_in) if check_in else None,
            check_out_time=parse_clock(check_out) if check_out else None,
            is_half_day=bool(item.get("is_half_day", False)),
            is_off=bool(item.get("is_off", False)),
        )
    return out


def _to_assignment(row: Dict[str, Any]) -> DepartmentAssignment:
    return DepartmentAssignment(
        assignment_id=int(row["assignment_id"]),
        employee_id=int(row["employee_id"]),
        department_id=int(row["department_id"]),
        is_primary=bool(row.get("is_primary")),
        is_active=bool(row.get("is_active", True)),
        check_in_time=normalize_mysql_time(row.get("check_in_time")),
        check_out_time=normalize_mysql_time(row.get("check_out_time")),
        weekly_offs=_parse_weekly_offs(row.get("weekly_offs")),
        day_schedules=_parse_day_schedules(row.get("day_schedules")),
        check_in_leverage_minutes=row.get("check_in_leverage_minutes"),
        check_out_leverage_minutes=row.get("check_out_leverage_minutes"),
        monthly_salary=int(row.get("monthly_salary") or 0),
        leave_threshold=int(row.get("leave_threshold") or 0),
        working_days_per_week=int(row.get("working_days_per_week") or 5),
        working_hours_per_week=float(row.get("working_hours_per_week") or 40),
    )


class MySQLAssignmentRepository(AssignmentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_for_employee(self, employee_id: int, *, active_only: bool = True) -> Sequence[DepartmentAssignment]:
        sql = f"SELECT {_COLUMNS} FROM department_assignments WHERE employee_id=%s"
        if active_only:
            sql += " AND is_active=1"
        sql += " ORDER BY is_primary DESC, assignment_id ASC"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, (int(employee_id),))
            return [_to_assignment(r) for r in fetchall(cur)]

    def get(self, employee_id: int, department_id: int) -> Optional[DepartmentAssignment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM department_assignments WHERE employee_id=%s AND department_id=%s",
                (int(employee_id), int(department_id)),
            )
            row = fetchone(cur)
            return _to_assignment(row) if row else None
