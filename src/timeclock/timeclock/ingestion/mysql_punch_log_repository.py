from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import PunchEvent
from .repository import PunchLogRepository


def _to_event(row: Dict[str, Any]) -> PunchEvent:
    return PunchEvent(
        biometric_id=str(row["biometric_id"]),
        punch_time=row["punch_time"],
        device_id=row.get("device_id") or "",
        serial=row.get("serial_no"),
        verify_type=int(row.get("verify_type") or 0),
        punch_state=int(row.get("punch_state") or 0),
        received_at=row.get("received_at"),
    )


class MySQLPunchLogRepository(PunchLogRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def exists(self, biometric_id: str, punch_time: datetime, device_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT 1 AS hit FROM punch_logs WHERE biometric_id=%s AND punch_time=%s AND device_id=%s",
                (biometric_id, punch_time, device_id),
            )
            return fetchone(cur) is not None

    def record(self, event: PunchEvent) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT IGNORE INTO punch_logs(biometric_id, punch_time, device_id, serial_no, verify_type, punch_state, received_at)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    event.biometric_id,
                    event.punch_time,
                    event.device_id,
                    event.serial,
                    event.verify_type,
                    event.punch_state,
                    event.received_at or datetime.now(),
                ),
            )
            return cur.rowcount > 0

    def list_recent(self, *, limit: int, biometric_id: Optional[str] = None) -> Sequence[PunchEvent]:
        sql = "SELECT biometric_id, punch_time, device_id, serial_no, verify_type, punch_state, received_at FROM punch_logs"
        params: list[object] = []
        if biometric_id:
            sql += " WHERE biometric_id=%s"
            params.append(str(biometric_id))
        sql += " ORDER BY punch_time DESC LIMIT %s"
        params.append(int(limit))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_to_event(r) for r in fetchall(cur)]
