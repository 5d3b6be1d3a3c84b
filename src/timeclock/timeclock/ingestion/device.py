"""Terminal adapters.

`ZKTecoDevice` talks to a ZKTeco terminal through pyzk. pyzk does not expose
the device's record serial, so the serial is the 1-based position of the
record in the log (the terminal only ever appends).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Protocol, Sequence

from zk import ZK
from zk.exception import ZKErrorResponse, ZKNetworkError

from ..core import constants
from ..core.exceptions import DeviceError
from .model import DeviceLogEntry

logger = logging.getLogger(__name__)


class AttendanceDevice(Protocol):
    device_id: str

    def connect(self) -> None:
        raise NotImplementedError

    def get_attendance(self) -> Sequence[DeviceLogEntry]:
        raise NotImplementedError

    def set_time(self, value: datetime) -> None:
        raise NotImplementedError

    def disconnect(self) -> None:
        raise NotImplementedError


@dataclass(frozen=True)
class DeviceConfig:
    ip: str
    port: int = constants.DEFAULT_DEVICE_PORT
    timeout: int = constants.DEFAULT_DEVICE_TIMEOUT_SECONDS
    password: int = 0
    device_id: str = ""
    force_udp: bool = False

    @classmethod
    def from_mapping(cls, raw: dict) -> "DeviceConfig":
        return cls(
            ip=str(raw.get("ip", "")),
            port=int(raw.get("port", constants.DEFAULT_DEVICE_PORT)),
            timeout=int(raw.get("timeout", constants.DEFAULT_DEVICE_TIMEOUT_SECONDS)),
            password=int(raw.get("password", 0) or 0),
            device_id=str(raw.get("device_id") or raw.get("ip", "")),
            force_udp=bool(raw.get("force_udp", False)),
        )


class ZKTecoDevice(AttendanceDevice):
    def __init__(self, config: DeviceConfig):
        self._config = config
        self.device_id = config.device_id or config.ip
        self._zk = ZK(
            config.ip,
            port=config.port,
            timeout=config.timeout,
            password=config.password,
            force_udp=config.force_udp,
            ommit_ping=True,
        )
        self._conn = None

    def connect(self) -> None:
        try:
            self._conn = self._zk.connect()
        except (ZKNetworkError, ZKErrorResponse, OSError) as exc:
            self._conn = None
            raise DeviceError(f"cannot connect to {self._config.ip}:{self._config.port}: {exc}") from exc
        logger.debug("[device] connected to %s", self.device_id)

    def _require_conn(self):
        if self._conn is None:
            raise DeviceError("device is not connected")
        return self._conn

    def get_attendance(self) -> Sequence[DeviceLogEntry]:
        conn = self._require_conn()
        try:
            records = conn.get_attendance() or []
        except (ZKNetworkError, ZKErrorResponse, OSError) as exc:
            raise DeviceError(f"cannot read attendance log: {exc}") from exc

        return [
            DeviceLogEntry(
                serial=position,
                biometric_id=str(r.user_id),
                punch_time=r.timestamp,
                verify_type=int(getattr(r, "status", 0) or 0),
                punch_state=int(getattr(r, "punch", 0) or 0),
            )
            for position, r in enumerate(records, start=1)
        ]

    def set_time(self, value: datetime) -> None:
        conn = self._require_conn()
        try:
            conn.set_time(value)
        except (ZKNetworkError, ZKErrorResponse, OSError) as exc:
            raise DeviceError(f"cannot set device time: {exc}") from exc

    def disconnect(self) -> None:
        conn, self._conn = self._conn, None
        if conn is None:
            return
        try:
            conn.disconnect()
        except (ZKNetworkError, ZKErrorResponse, OSError):
            logger.warning("[device] disconnect from %s failed", self.device_id, exc_info=True)


def build_device(raw: Optional[dict]) -> Optional[ZKTecoDevice]:
    if not raw or not raw.get("ip"):
        return None
    return ZKTecoDevice(DeviceConfig.from_mapping(raw))
