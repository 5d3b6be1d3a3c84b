from __future__ import annotations

import calendar
from datetime import date, datetime, time, timedelta
from typing import Iterator


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_iso_datetime(value: str) -> datetime:
    """Parse 'YYYY-MM-DD HH:MM[:SS]' or ISO 'T'-separated strings."""
    return datetime.fromisoformat(value.strip().replace(" ", "T", 1))


def parse_clock(value: str) -> time:
    """Parse 'HH:MM' or 'HH:MM:SS' into a time."""
    parts = value.strip().split(":")
    if len(parts) < 2:
        raise ValueError(f"Invalid time string: {value!r}")
    seconds = int(parts[2]) if len(parts) >= 3 and parts[2] else 0
    return time(hour=int(parts[0]), minute=int(parts[1]), second=seconds)


def now_local() -> datetime:
    """Current local time."""
    return datetime.now()


def today_local() -> date:
    return now_local().date()


def hours_between(start: datetime, end: datetime) -> float:
    """Elapsed hours between two instants, never negative."""
    return max((end - start).total_seconds() / 3600.0, 0.0)


def minutes_between(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() / 60.0


def month_bounds(year: int, month: int) -> tuple[date, date]:
    last = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last)


def iter_month_days(year: int, month: int) -> Iterator[date]:
    start, end = month_bounds(year, month)
    day = start
    while day <= end:
        yield day
        day += timedelta(days=1)

