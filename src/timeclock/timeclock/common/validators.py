from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional

from ..core.exceptions import ValidationError


def require_positive_int(value: Any, field_name: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer")
    if number <= 0:
        raise ValidationError(f"{field_name} must be positive")
    return number


def require_month(value: Any) -> int:
    month = require_positive_int(value, "month")
    if month > 12:
        raise ValidationError("month must be between 1 and 12")
    return month


def require_year(value: Any) -> int:
    year = require_positive_int(value, "year")
    if year < 2000 or year > 2100:
        raise ValidationError("year is out of range")
    return year


def require_punch_order(check_in: Optional[datetime], check_out: Optional[datetime]) -> None:
    if check_out is not None and check_in is None:
        raise ValidationError("check-out requires a check-in")
    if check_in is not None and check_out is not None and check_out < check_in:
        raise ValidationError("check-out cannot be earlier than check-in")


def require_same_work_day(work_date: date, value: Optional[datetime], field_name: str) -> None:
    # A check-out may roll past midnight for overnight shifts, never further.
    if value is None:
        return
    delta = (value.date() - work_date).days
    if delta < 0 or delta > 1:
        raise ValidationError(f"{field_name} does not belong to {work_date.isoformat()}")
