from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Department, Employee


class EmployeeRepository(Protocol):
    """Read-only access to employees; employee CRUD lives outside this engine."""

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        raise NotImplementedError

    def get_by_biometric_id(self, biometric_id: str) -> Optional[Employee]:
        raise NotImplementedError

    def list_active(self) -> Sequence[Employee]:
        raise NotImplementedError


class DepartmentRepository(Protocol):
    def get_by_id(self, department_id: int) -> Optional[Department]:
        raise NotImplementedError
