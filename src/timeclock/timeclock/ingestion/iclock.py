"""ZKTeco iClock (ADMS) push protocol helpers."""

from __future__ import annotations

import logging
import threading

from ..common.datetime_utils import parse_iso_datetime
from .model import DeviceLogEntry

logger = logging.getLogger(__name__)

ATTLOG_COMMAND = "C:1:ATTLOG"


def parse_attlog(payload: str) -> list[DeviceLogEntry]:
    """Parse ATTLOG lines: user id, timestamp, status, verify type, ... (tab separated).

    Malformed lines are logged and skipped.
    """

    entries: list[DeviceLogEntry] = []
    for line_no, line in enumerate(payload.splitlines(), start=1):
        line = line.strip()
        if not line:
            continue
        parts = line.split("\t")
        try:
            if len(parts) < 2 or not parts[0].strip():
                raise ValueError("expected at least user id and timestamp")
            entries.append(
                DeviceLogEntry(
                    serial=None,
                    biometric_id=parts[0].strip(),
                    punch_time=parse_iso_datetime(parts[1]),
                    punch_state=int(parts[2]) if len(parts) > 2 and parts[2].strip() else 0,
                    verify_type=int(parts[3]) if len(parts) > 3 and parts[3].strip() else 0,
                )
            )
        except ValueError as exc:
            logger.warning("[iclock] skipping malformed ATTLOG line %s (%r): %s", line_no, line, exc)
    return entries


class IClockSessions:
    """Remembers which device serials were already asked for their attendance log."""

    def __init__(self):
        self._requested: set[str] = set()
        self._lock = threading.Lock()

    def next_command(self, serial_number: str) -> str:
        with self._lock:
            if serial_number in self._requested:
                return "OK"
            self._requested.add(serial_number)
        logger.info("[iclock] requesting attendance log from %s", serial_number)
        return ATTLOG_COMMAND
