from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import DepartmentAssignment


class AssignmentRepository(Protocol):
    def list_for_employee(self, employee_id: int, *, active_only: bool = True) -> Sequence[DepartmentAssignment]:
        raise NotImplementedError

    def get(self, employee_id: int, department_id: int) -> Optional[DepartmentAssignment]:
        raise NotImplementedError
