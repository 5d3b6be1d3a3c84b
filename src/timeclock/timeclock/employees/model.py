from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class Employee:
    """Domain entity: an employee as seen by the attendance engine.

    Note: `biometric_id` is the user id enrolled on the terminal (string on the wire).
    """

    employee_id: int
    employee_code: str
    full_name: str
    biometric_id: Optional[str]
    role: Role = Role.STAFF
    is_active: bool = True


@dataclass(frozen=True)
class Department:
    department_id: int
    name: str
    check_in_leverage_minutes: Optional[int] = None
    check_out_leverage_minutes: Optional[int] = None


@dataclass(frozen=True)
class Actor:
    """Who is performing an action (read from the HTTP session or a script)."""

    user_id: Optional[int]
    role: Role = Role.STAFF

    @property
    def is_super_admin(self) -> bool:
        return self.role == Role.SUPER_ADMIN
