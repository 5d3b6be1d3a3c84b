from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class DeviceLogEntry:
    """One raw record as read from a terminal (pulled or pushed)."""

    serial: Optional[int]
    biometric_id: str
    punch_time: datetime
    verify_type: int = 0
    punch_state: int = 0


@dataclass(frozen=True)
class PunchEvent:
    """Immutable log row; (biometric_id, punch_time, device_id) is unique."""

    biometric_id: str
    punch_time: datetime
    device_id: str
    serial: Optional[int] = None
    verify_type: int = 0
    punch_state: int = 0
    received_at: Optional[datetime] = None

    @classmethod
    def from_entry(cls, entry: DeviceLogEntry, *, device_id: str, received_at: datetime) -> "PunchEvent":
        return cls(
            biometric_id=entry.biometric_id,
            punch_time=entry.punch_time,
            device_id=device_id,
            serial=entry.serial,
            verify_type=entry.verify_type,
            punch_state=entry.punch_state,
            received_at=received_at,
        )

    def to_dict(self) -> dict:
        return {
            "biometric_id": self.biometric_id,
            "punch_time": self.punch_time.isoformat(sep=" "),
            "device_id": self.device_id,
            "serial": self.serial,
            "verify_type": self.verify_type,
            "punch_state": self.punch_state,
            "received_at": self.received_at.isoformat(sep=" ") if self.received_at else None,
        }


@dataclass
class IngestionStats:
    fetched: int = 0
    new: int = 0
    applied: int = 0
    duplicates: int = 0
    discarded: int = 0
    skipped: int = 0
    backfill: bool = False
    watermark: int = 0

    def to_dict(self) -> dict:
        return asdict(self)
