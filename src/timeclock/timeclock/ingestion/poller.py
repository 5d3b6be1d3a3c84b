from __future__ import annotations

import logging
import threading
from typing import Optional

from ..common.jobs import JobScheduler
from ..core import constants
from ..core.exceptions import DeviceError
from .model import IngestionStats
from .service import PunchIngestionService

logger = logging.getLogger(__name__)

JOB_NAME = "device-poller"


class DevicePoller:
    """Polls the terminal on a scheduler interval; a poll never overlaps a running one."""

    def __init__(
        self,
        service: PunchIngestionService,
        interval_seconds: float = constants.DEFAULT_POLL_INTERVAL_SECONDS,
        *,
        scheduler: JobScheduler,
    ):
        self._service = service
        self._interval = interval_seconds
        self._scheduler = scheduler
        self._busy = threading.Lock()

    @property
    def is_polling(self) -> bool:
        return self._busy.locked()

    def poll(self) -> bool:
        """Run one poll unless another one is in flight.

        Returns False when skipped. Device failures are logged and retried on
        the next interval.
        """

        if not self._busy.acquire(blocking=False):
            logger.info("[poller] previous poll still in progress, skipping")
            return False
        try:
            self._service.poll_once()
        except DeviceError as e:
            logger.warning("[poller] device poll failed: %s", e)
        except Exception:
            logger.exception("[poller] poll failed")
        finally:
            self._busy.release()
        return True

    def start(self) -> None:
        self._scheduler.add_interval(JOB_NAME, self._interval, self.poll)

    def shutdown(self) -> None:
        self._scheduler.remove(JOB_NAME)

    def trigger(self) -> Optional[IngestionStats]:
        """Run one poll now ("sync now").

        Returns None when a poll is already in progress.
        """

        if not self.poll():
            return None
        if self._service.last_error:
            raise DeviceError(self._service.last_error)
        return self._service.last_stats
