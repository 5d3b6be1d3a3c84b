from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Department, Employee
from .repository import DepartmentRepository, EmployeeRepository

_EMPLOYEE_COLUMNS = "employee_id, employee_code, full_name, biometric_id, role, is_active"


def _to_employee(row: Dict[str, Any]) -> Employee:
    biometric_id = row.get("biometric_id")
    return Employee(
        employee_id=int(row["employee_id"]),
        employee_code=row["employee_code"],
        full_name=row["full_name"],
        biometric_id=str(biometric_id) if biometric_id is not None else None,
        role=Role(row["role"]),
        is_active=bool(row.get("is_active", True)),
    )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_EMPLOYEE_COLUMNS} FROM employees WHERE employee_id=%s", (int(employee_id),))
            row = fetchone(cur)
            return _to_employee(row) if row else None

    def get_by_biometric_id(self, biometric_id: str) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_EMPLOYEE_COLUMNS} FROM employees WHERE biometric_id=%s", (str(biometric_id),))
            row = fetchone(cur)
            return _to_employee(row) if row else None

    def list_active(self) -> Sequence[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_EMPLOYEE_COLUMNS} FROM employees WHERE is_active=1 ORDER BY employee_id")
            return [_to_employee(r) for r in fetchall(cur)]


class MySQLDepartmentRepository(DepartmentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, department_id: int) -> Optional[Department]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT department_id, name, check_in_leverage_minutes, check_out_leverage_minutes
                FROM departments
                WHERE department_id=%s
                """,
                (int(department_id),),
            )
            row = fetchone(cur)
            if not row:
                return None
            return Department(
                department_id=int(row["department_id"]),
                name=row["name"],
                check_in_leverage_minutes=row.get("check_in_leverage_minutes"),
                check_out_leverage_minutes=row.get("check_out_leverage_minutes"),
            )
