"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from datetime import time

from .enums import Weekday

DEFAULT_CHECK_IN_TIME = time(9, 0)
DEFAULT_CHECK_OUT_TIME = time(17, 0)
DEFAULT_CHECK_IN_LEVERAGE_MINUTES = 15
DEFAULT_CHECK_OUT_LEVERAGE_MINUTES = 10
DEFAULT_WEEKLY_OFFS = frozenset({Weekday.SATURDAY, Weekday.SUNDAY})
DEFAULT_WORKING_DAYS_PER_WEEK = 5
DEFAULT_WORKING_HOURS_PER_WEEK = 40.0

# Coarse classification when no schedule can be resolved.
FALLBACK_FULL_DAY_HOURS = 8.0
FALLBACK_HALF_DAY_HOURS = 4.0

RAPID_PUNCH_THRESHOLD_MINUTES = 3 * 60

DEFAULT_DEVICE_PORT = 4370
DEFAULT_DEVICE_TIMEOUT_SECONDS = 5
DEFAULT_POLL_INTERVAL_SECONDS = 30

ABSENTEE_SWEEP_TIME = "23:59"
ABSENTEE_REMARK = "Auto-marked absent - No check-in/check-out recorded"

DEFAULT_LATE_THRESHOLD = 3
DEFAULT_HALF_DAY_THRESHOLD = 2
DEFAULT_EARLY_DEPARTURE_THRESHOLD = 3
DEFAULT_LATE_EARLY_DEPARTURE_THRESHOLD = 2
DEFAULT_PERFECT_ATTENDANCE_THRESHOLD = 100.0

DEFAULT_HISTORY_LIMIT = 500
