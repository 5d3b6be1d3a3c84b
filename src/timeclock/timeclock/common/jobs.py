"""Background jobs on an APScheduler `BackgroundScheduler`.

Interval jobs (device polling) and daily cron jobs (sweeps) share one
scheduler. Every job is registered with `max_instances=1` and
`coalesce=True`: a run that is due while the previous one is still going is
skipped, and missed runs collapse into one.
"""

from __future__ import annotations

import logging
from datetime import datetime, time
from typing import Callable, Optional

from apscheduler.job import Job
from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.background import BackgroundScheduler

logger = logging.getLogger(__name__)


class JobScheduler:
    def __init__(self, scheduler: Optional[BackgroundScheduler] = None):
        self._scheduler = scheduler or BackgroundScheduler(daemon=True)

    @property
    def running(self) -> bool:
        return self._scheduler.running

    def add_interval(
        self,
        name: str,
        seconds: float,
        func: Callable[[], object],
        *,
        run_immediately: bool = True,
    ) -> Job:
        extra = {"next_run_time": datetime.now()} if run_immediately else {}
        job = self._scheduler.add_job(
            func,
            "interval",
            seconds=seconds,
            id=name,
            name=name,
            max_instances=1,
            coalesce=True,
            replace_existing=True,
            **extra,
        )
        logger.info("[jobs] %s: every %ss", name, seconds)
        return job

    def add_daily(self, name: str, at: time, func: Callable[[], object]) -> Job:
        job = self._scheduler.add_job(
            func,
            "cron",
            hour=at.hour,
            minute=at.minute,
            id=name,
            name=name,
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
        logger.info("[jobs] %s: daily at %s", name, at.strftime("%H:%M"))
        return job

    def get(self, name: str) -> Optional[Job]:
        return self._scheduler.get_job(name)

    def job_ids(self) -> list[str]:
        return sorted(job.id for job in self._scheduler.get_jobs())

    def remove(self, name: str) -> None:
        try:
            self._scheduler.remove_job(name)
        except JobLookupError:
            logger.debug("[jobs] %s: not scheduled", name)

    def start(self) -> None:
        if self._scheduler.running:
            return
        self._scheduler.start()
        logger.info("[jobs] scheduler started with %s", ", ".join(self.job_ids()) or "no jobs")

    def shutdown(self, wait: bool = False) -> None:
        if not self._scheduler.running:
            return
        self._scheduler.shutdown(wait=wait)
        logger.info("[jobs] scheduler stopped")
