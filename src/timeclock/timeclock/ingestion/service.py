"""Punch ingestion: device log -> punch log -> attendance records.

The service keeps a watermark (highest device serial processed). The first
successful poll after start-up is a backfill: the whole device log is walked
and every entry not already in the punch log is applied. Later polls only
look at entries above the watermark.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Iterable, Optional, Sequence

from ..attendance.service import AttendanceService
from ..common.datetime_utils import now_local
from ..core.enums import PunchOutcome, Role
from ..core.exceptions import DeviceError
from ..employees.repository import EmployeeRepository
from .device import AttendanceDevice
from .model import DeviceLogEntry, IngestionStats, PunchEvent
from .repository import PunchLogRepository

logger = logging.getLogger(__name__)

_APPLIED = {PunchOutcome.CHECK_IN, PunchOutcome.CHECK_OUT}
_SKIPPED = {PunchOutcome.UNKNOWN_EMPLOYEE, PunchOutcome.EXEMPT}


class PunchIngestionService:
    def __init__(
        self,
        device: Optional[AttendanceDevice],
        punch_log: PunchLogRepository,
        employees: EmployeeRepository,
        attendance: AttendanceService,
        *,
        exempt_roles: Iterable[Role] = (Role.SUPER_ADMIN,),
    ):
        self._device = device
        self._punch_log = punch_log
        self._employees = employees
        self._attendance = attendance
        self._exempt_roles = frozenset(exempt_roles)
        self._lock = threading.RLock()

        self._watermark = 0
        self._first_poll_done = False
        self.last_stats: Optional[IngestionStats] = None
        self.last_success_at: Optional[datetime] = None
        self.last_error: Optional[str] = None

    @property
    def watermark(self) -> int:
        return self._watermark

    @property
    def first_poll_done(self) -> bool:
        return self._first_poll_done

    @property
    def device_id(self) -> Optional[str]:
        return self._device.device_id if self._device else None

    def _require_device(self) -> AttendanceDevice:
        if self._device is None:
            raise DeviceError("No biometric device configured")
        return self._device

    def _fetch(self) -> list[DeviceLogEntry]:
        device = self._require_device()
        device.connect()
        try:
            return list(device.get_attendance())
        finally:
            device.disconnect()

    def poll_once(self) -> IngestionStats:
        with self._lock:
            try:
                entries = self._fetch()
            except Exception as exc:
                self.last_error = str(exc)
                raise

            entries.sort(key=lambda e: e.serial or 0)
            stats = IngestionStats(fetched=len(entries), backfill=not self._first_poll_done)
            device_id = self._device.device_id
            max_serial = max((e.serial or 0 for e in entries), default=0)

            try:
                if not self._first_poll_done:
                    for entry in entries:
                        self._ingest(entry, device_id, stats)
                    self._watermark = max(self._watermark, max_serial)
                    self._first_poll_done = True
                    logger.info("[ingestion] backfill done: %s entries, watermark=%s", len(entries), self._watermark)
                else:
                    if entries and max_serial < self._watermark:
                        logger.warning(
                            "[ingestion] device log max serial %s is below watermark %s (log cleared?); keeping watermark",
                            max_serial,
                            self._watermark,
                        )
                    for entry in entries:
                        serial = entry.serial or 0
                        if serial <= self._watermark:
                            continue
                        self._ingest(entry, device_id, stats)
                        self._watermark = serial
            except Exception as exc:
                self.last_error = str(exc)
                raise

            stats.watermark = self._watermark
            self.last_stats = stats
            self.last_success_at = now_local()
            self.last_error = None
            if stats.new:
                logger.info("[ingestion] poll: %s", stats.to_dict())
            return stats

    def ingest_pushed(self, entries: Sequence[DeviceLogEntry], *, device_id: str) -> IngestionStats:
        """Push path (iClock): no watermark, dedup only via the punch log."""

        with self._lock:
            stats = IngestionStats(fetched=len(entries), watermark=self._watermark)
            for entry in sorted(entries, key=lambda e: e.punch_time):
                self._ingest(entry, device_id, stats)
            if stats.new:
                logger.info("[ingestion] push from %s: %s", device_id, stats.to_dict())
            return stats

    def sync_device_clock(self, now: Optional[datetime] = None) -> datetime:
        device = self._require_device()
        value = now or now_local()
        device.connect()
        try:
            device.set_time(value)
        finally:
            device.disconnect()
        logger.info("[ingestion] device %s clock set to %s", device.device_id, value)
        return value

    def _ingest(self, entry: DeviceLogEntry, device_id: str, stats: IngestionStats) -> None:
        if self._punch_log.exists(entry.biometric_id, entry.punch_time, device_id):
            stats.duplicates += 1
            return

        stats.new += 1
        outcome = self._apply(entry, device_id)
        if outcome in _APPLIED:
            stats.applied += 1
        elif outcome in _SKIPPED:
            stats.skipped += 1
        else:
            stats.discarded += 1

        self._punch_log.record(PunchEvent.from_entry(entry, device_id=device_id, received_at=now_local()))

    def _apply(self, entry: DeviceLogEntry, device_id: str) -> PunchOutcome:
        employee = self._employees.get_by_biometric_id(entry.biometric_id)
        if employee is None or not employee.is_active:
            logger.debug("[ingestion] no active employee for biometric id %s, skipping", entry.biometric_id)
            return PunchOutcome.UNKNOWN_EMPLOYEE
        if employee.role in self._exempt_roles:
            logger.debug("[ingestion] employee %s is exempt from attendance, skipping", employee.employee_id)
            return PunchOutcome.EXEMPT
        return self._attendance.record_punch(employee, entry.punch_time, device_id=device_id)

    def health(self) -> dict:
        return {
            "configured": self._device is not None,
            "device_id": self.device_id,
            "watermark": self._watermark,
            "first_poll_done": self._first_poll_done,
            "last_success_at": self.last_success_at.isoformat(sep=" ") if self.last_success_at else None,
            "last_error": self.last_error,
            "last_stats": self.last_stats.to_dict() if self.last_stats else None,
        }
