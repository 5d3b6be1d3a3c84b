from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional, Sequence

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = """
    attendance_id, employee_id, department_id, work_date, check_in, check_out,
    status, working_hours, is_manual_entry, device_id, modified_by, remarks, updated_at
"""

# Unassigned records are stored under department 0 so the unique key still applies.
_NO_DEPARTMENT = 0


def _db_department(department_id: Optional[int]) -> int:
    return _NO_DEPARTMENT if department_id is None else int(department_id)


def _to_record(row: Dict[str, Any]) -> AttendanceRecord:
    department_id = int(row.get("department_id") or 0)
    return AttendanceRecord(
        attendance_id=int(row["attendance_id"]),
        employee_id=int(row["employee_id"]),
        department_id=department_id or None,
        work_date=row["work_date"],
        check_in=row.get("check_in"),
        check_out=row.get("check_out"),
        status=AttendanceStatus(row["status"]),
        working_hours=float(row.get("working_hours") or 0.0),
        is_manual_entry=bool(row.get("is_manual_entry")),
        device_id=row.get("device_id") or "",
        modified_by=row.get("modified_by"),
        remarks=row.get("remarks") or "",
        updated_at=row.get("updated_at"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records WHERE attendance_id=%s", (int(attendance_id),))
            row = fetchone(cur)
            return _to_record(row) if row else None

    def get_for_key(self, employee_id: int, department_id: Optional[int], work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE employee_id=%s AND department_id=%s AND work_date=%s
                """,
                (int(employee_id), _db_department(department_id), work_date),
            )
            row = fetchone(cur)
            return _to_record(row) if row else None

    def list_for_employee_and_date(self, employee_id: int, work_date: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE employee_id=%s AND work_date=%s
                ORDER BY check_in IS NULL, check_in, attendance_id
                """,
                (int(employee_id), work_date),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def create(self, record: AttendanceRecord) -> AttendanceRecord:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(
                    employee_id, department_id, work_date, check_in, check_out, status,
                    working_hours, is_manual_entry, device_id, modified_by, remarks
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    record.employee_id,
                    _db_department(record.department_id),
                    record.work_date,
                    record.check_in,
                    record.check_out,
                    record.status.value,
                    record.working_hours,
                    int(record.is_manual_entry),
                    record.device_id,
                    record.modified_by,
                    record.remarks,
                ),
            )
            new_id = int(cur.lastrowid)
        return self.get_by_id(new_id)

    def save(self, record: AttendanceRecord) -> AttendanceRecord:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET check_in=%s, check_out=%s, status=%s, working_hours=%s, is_manual_entry=%s,
                    device_id=%s, modified_by=%s, remarks=%s
                WHERE attendance_id=%s
                """,
                (
                    record.check_in,
                    record.check_out,
                    record.status.value,
                    record.working_hours,
                    int(record.is_manual_entry),
                    record.device_id,
                    record.modified_by,
                    record.remarks,
                    record.attendance_id,
                ),
            )
        return self.get_by_id(record.attendance_id)

    def list_range(
        self,
        start: date,
        end: date,
        *,
        employee_id: Optional[int] = None,
        department_id: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> Sequence[AttendanceRecord]:
        clauses = ["work_date BETWEEN %s AND %s"]
        params: list[object] = [start, end]

        if employee_id is not None:
            clauses.append("employee_id=%s")
            params.append(int(employee_id))
        if department_id is not None:
            clauses.append("department_id=%s")
            params.append(int(department_id))

        sql = f"SELECT {_COLUMNS} FROM attendance_records WHERE {' AND '.join(clauses)} ORDER BY work_date, employee_id, department_id"
        if limit is not None:
            sql += " LIMIT %s"
            params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_to_record(r) for r in fetchall(cur)]

    def mark_pending_before(self, day: date, *, status: AttendanceStatus = AttendanceStatus.MISSING) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE attendance_records SET status=%s WHERE status=%s AND work_date < %s",
                (status.value, AttendanceStatus.PENDING.value, day),
            )
            return int(cur.rowcount)

    def employee_ids_with_records_on(self, work_date: date) -> set[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT DISTINCT employee_id FROM attendance_records WHERE work_date=%s", (work_date,))
            return {int(r["employee_id"]) for r in fetchall(cur)}
