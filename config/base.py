"""Settings shared by every environment; each module overrides what differs."""

import os


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "timeclock_db"),
    "connection_timeout": int(os.getenv("DB_CONNECT_TIMEOUT", "10")),
}

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Biometric terminal (pyzk). Leave DEVICE_IP empty to disable polling.
DEVICE_CONFIG = {
    "ip": os.getenv("DEVICE_IP", ""),
    "port": int(os.getenv("DEVICE_PORT", "4370")),
    "timeout": int(os.getenv("DEVICE_TIMEOUT", "5")),
    "password": int(os.getenv("DEVICE_PASSWORD", "0")),
    "device_id": os.getenv("DEVICE_ID", ""),
    "force_udp": _flag("DEVICE_FORCE_UDP", "0"),
}
POLL_INTERVAL_SECONDS = int(os.getenv("POLL_INTERVAL_SECONDS", "30"))
RAPID_PUNCH_THRESHOLD_MINUTES = int(os.getenv("RAPID_PUNCH_THRESHOLD_MINUTES", "180"))

LEVERAGE_DEFAULTS = {
    "check_in": int(os.getenv("CHECK_IN_LEVERAGE_MINUTES", "15")),
    "check_out": int(os.getenv("CHECK_OUT_LEVERAGE_MINUTES", "10")),
}
ABSENTEE_SWEEP_TIME = os.getenv("ABSENTEE_SWEEP_TIME", "23:59")
EXEMPT_ROLES = tuple(r.strip() for r in os.getenv("EXEMPT_ROLES", "superAdmin").split(",") if r.strip())

SALARY_CRITERIA = {
    "late_threshold": int(os.getenv("SALARY_LATE_THRESHOLD", "3")),
    "half_day_threshold": int(os.getenv("SALARY_HALF_DAY_THRESHOLD", "2")),
    "early_departure_threshold": int(os.getenv("SALARY_EARLY_DEPARTURE_THRESHOLD", "3")),
    "late_early_departure_threshold": int(os.getenv("SALARY_LATE_EARLY_DEPARTURE_THRESHOLD", "2")),
    "perfect_attendance_threshold": float(os.getenv("SALARY_PERFECT_ATTENDANCE_THRESHOLD", "100")),
    "perfect_attendance_bonus": int(os.getenv("SALARY_PERFECT_ATTENDANCE_BONUS", "0")),
}
