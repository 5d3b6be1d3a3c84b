from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import SalaryStatus
from .model import SalaryRecord


class SalaryRepository(Protocol):
    def upsert(self, record: SalaryRecord) -> SalaryRecord:
        """Insert or overwrite the record keyed by (employee, department, month, year)."""

        raise NotImplementedError

    def save(self, record: SalaryRecord) -> SalaryRecord:
        raise NotImplementedError

    def get_by_id(self, salary_id: int) -> Optional[SalaryRecord]:
        raise NotImplementedError

    def list(
        self,
        *,
        month: Optional[int] = None,
        year: Optional[int] = None,
        employee_id: Optional[int] = None,
        status: Optional[SalaryStatus] = None,
    ) -> Sequence[SalaryRecord]:
        raise NotImplementedError
