from __future__ import annotations

from datetime import date
from enum import Enum, IntEnum
from typing import Union


class Role(str, Enum):
    """Employee role used for attendance exemption and manual-entry policy."""

    SUPER_ADMIN = "superAdmin"
    ADMIN = "admin"
    STAFF = "staff"


class AttendanceStatus(str, Enum):
    """Attendance status values as stored in the database."""

    PENDING = "pending"
    PRESENT = "present"
    LATE = "late"
    # Left before the scheduled check-out.
    EARLY_ARRIVAL = "early-arrival"
    LATE_EARLY_ARRIVAL = "late-early-arrival"
    HALF_DAY = "half-day"
    ABSENT = "absent"
    LEAVE = "leave"
    MISSING = "missing"


PRESENT_LIKE_STATUSES = frozenset(
    {
        AttendanceStatus.PRESENT,
        AttendanceStatus.LATE,
        AttendanceStatus.EARLY_ARRIVAL,
        AttendanceStatus.LATE_EARLY_ARRIVAL,
    }
)


class Weekday(IntEnum):
    MONDAY = 0
    TUESDAY = 1
    WEDNESDAY = 2
    THURSDAY = 3
    FRIDAY = 4
    SATURDAY = 5
    SUNDAY = 6

    @classmethod
    def of(cls, day: date) -> "Weekday":
        return cls(day.weekday())

    @classmethod
    def parse(cls, value: Union["Weekday", int, str]) -> "Weekday":
        """Parse a weekday from an enum, an int (Monday=0) or a name.

        Names are matched case-insensitively on the full English name or its
        three-letter prefix ("Saturday", "sat").
        """

        if isinstance(value, Weekday):
            return value
        if isinstance(value, int):
            return cls(value)

        text = str(value).strip().upper()
        for member in cls:
            if text == member.name or (len(text) >= 3 and member.name.startswith(text)):
                return member
        raise ValueError(f"Unknown weekday: {value!r}")


class PunchOutcome(str, Enum):
    """What happened to a single punch handed to the attendance write path."""

    CHECK_IN = "check-in"
    CHECK_OUT = "check-out"
    RAPID_PUNCH = "rapid-punch"
    ALREADY_CLOSED = "already-closed"
    OUTSIDE_SHIFT = "outside-shift"
    UNKNOWN_EMPLOYEE = "unknown-employee"
    EXEMPT = "exempt"


class SalaryMethod(str, Enum):
    STANDARD = "standard"
    WEEKLY_HOURS = "weekly-hours"


class SalaryStatus(str, Enum):
    PENDING = "pending"
    CALCULATED = "calculated"
    APPROVED = "approved"
    PAID = "paid"


class SettingKey(str, Enum):
    MANUAL_ATTENDANCE_ENABLED = "manualAttendanceEnabled"
    AUTO_MARK_ABSENT_ENABLED = "autoMarkAbsentEnabled"
