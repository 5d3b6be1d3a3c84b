from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..core.enums import SalaryMethod, SalaryStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, load_json
from .model import SalaryRecord, breakdown_from_dict
from .repository import SalaryRepository

_COLUMNS = """
    salary_id, employee_id, department_id, month, year, method, base_salary, breakdown,
    status, remarks, calculated_by, approved_by, paid_on, updated_at
"""


def _to_salary(row: Dict[str, Any]) -> SalaryRecord:
    calculations, deductions, additions = breakdown_from_dict(load_json(row.get("breakdown"), default={}))
    return SalaryRecord(
        salary_id=int(row["salary_id"]),
        employee_id=int(row["employee_id"]),
        department_id=int(row.get("department_id") or 0) or None,
        month=int(row["month"]),
        year=int(row["year"]),
        method=SalaryMethod(row["method"]),
        base_salary=int(row["base_salary"]),
        calculations=calculations,
        deductions=deductions,
        additions=additions,
        status=SalaryStatus(row["status"]),
        remarks=row.get("remarks") or "",
        calculated_by=row.get("calculated_by"),
        approved_by=row.get("approved_by"),
        paid_on=row.get("paid_on"),
        updated_at=row.get("updated_at"),
    )


class MySQLSalaryRepository(SalaryRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def upsert(self, record: SalaryRecord) -> SalaryRecord:
        department_id = record.department_id or 0
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO salary_records(
                    employee_id, department_id, month, year, method, base_salary,
                    total_deductions, total_additions, net_salary, breakdown, status, remarks, calculated_by
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    method=VALUES(method), base_salary=VALUES(base_salary),
                    total_deductions=VALUES(total_deductions), total_additions=VALUES(total_additions),
                    net_salary=VALUES(net_salary), breakdown=VALUES(breakdown), status=VALUES(status),
                    remarks=VALUES(remarks), calculated_by=VALUES(calculated_by),
                    approved_by=NULL, paid_on=NULL
                """,
                (
                    record.employee_id,
                    department_id,
                    record.month,
                    record.year,
                    record.method.value,
                    record.base_salary,
                    record.deductions.total,
                    record.additions.total,
                    record.net_salary,
                    dump_json(record.breakdown()),
                    record.status.value,
                    record.remarks,
                    record.calculated_by,
                ),
            )
            cur.execute(
                f"SELECT {_COLUMNS} FROM salary_records WHERE employee_id=%s AND department_id=%s AND month=%s AND year=%s",
                (record.employee_id, department_id, record.month, record.year),
            )
            return _to_salary(fetchone(cur))

    def save(self, record: SalaryRecord) -> SalaryRecord:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE salary_records
                SET total_deductions=%s, total_additions=%s, net_salary=%s, breakdown=%s,
                    status=%s, remarks=%s, approved_by=%s, paid_on=%s
                WHERE salary_id=%s
                """,
                (
                    record.deductions.total,
                    record.additions.total,
                    record.net_salary,
                    dump_json(record.breakdown()),
                    record.status.value,
                    record.remarks,
                    record.approved_by,
                    record.paid_on,
                    record.salary_id,
                ),
            )
        return self.get_by_id(record.salary_id)

    def get_by_id(self, salary_id: int) -> Optional[SalaryRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM salary_records WHERE salary_id=%s", (int(salary_id),))
            row = fetchone(cur)
            return _to_salary(row) if row else None

    def list(
        self,
        *,
        month: Optional[int] = None,
        year: Optional[int] = None,
        employee_id: Optional[int] = None,
        status: Optional[SalaryStatus] = None,
    ) -> Sequence[SalaryRecord]:
        clauses: list[str] = []
        params: list[object] = []
        for column, value in (("month", month), ("year", year), ("employee_id", employee_id)):
            if value is not None:
                clauses.append(f"{column}=%s")
                params.append(int(value))
        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM salary_records {where} ORDER BY year DESC, month DESC, employee_id",
                tuple(params),
            )
            return [_to_salary(r) for r in fetchall(cur)]
