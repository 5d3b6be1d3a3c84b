from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import PunchEvent


class PunchLogRepository(Protocol):
    def exists(self, biometric_id: str, punch_time: datetime, device_id: str) -> bool:
        raise NotImplementedError

    def record(self, event: PunchEvent) -> bool:
        """Insert unless already logged; True when a row was written."""

        raise NotImplementedError

    def list_recent(self, *, limit: int, biometric_id: Optional[str] = None) -> Sequence[PunchEvent]:
        raise NotImplementedError
