import threading
from datetime import time, timedelta

from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

from src.timeclock.timeclock.common.jobs import JobScheduler
from src.timeclock.timeclock.ingestion.poller import DevicePoller
from src.timeclock.timeclock.options import EngineOptions
from tests.fakes import FakeDevice, build_fake_container


class SlowIngestion:
    def __init__(self):
        self.started = threading.Event()
        self.release = threading.Event()
        self.calls = 0
        self.last_error = None
        self.last_stats = None

    def poll_once(self):
        self.calls += 1
        self.started.set()
        self.release.wait(5)


class BrokenIngestion:
    last_error = "device unreachable"
    last_stats = None

    def poll_once(self):
        raise RuntimeError("device unreachable")


def test_poll_is_skipped_while_previous_poll_in_flight():
    service = SlowIngestion()
    poller = DevicePoller(service, 60, scheduler=JobScheduler())
    worker = threading.Thread(target=poller.poll)
    worker.start()
    assert service.started.wait(5)

    assert poller.is_polling
    assert poller.poll() is False
    assert poller.trigger() is None

    service.release.set()
    worker.join(5)
    assert service.calls == 1
    assert not poller.is_polling
    assert poller.poll() is True
    assert service.calls == 2


def test_failing_poll_does_not_propagate():
    poller = DevicePoller(BrokenIngestion(), 60, scheduler=JobScheduler())

    assert poller.poll() is True
    assert not poller.is_polling


def test_schedule_jobs_registers_sweeps_and_poller():
    options = EngineOptions(poll_interval_seconds=30, absentee_sweep_time=time(23, 59))
    c = build_fake_container(device=FakeDevice(), options=options)

    c.schedule_jobs()

    assert c.scheduler.job_ids() == ["absentee-sweep", "device-poller", "stale-pending-sweep"]

    poll_job = c.scheduler.get("device-poller")
    assert isinstance(poll_job.trigger, IntervalTrigger)
    assert poll_job.trigger.interval == timedelta(seconds=30)
    assert poll_job.max_instances == 1
    assert poll_job.coalesce is True

    absentee = c.scheduler.get("absentee-sweep")
    assert isinstance(absentee.trigger, CronTrigger)
    assert "hour='23'" in str(absentee.trigger)
    assert "minute='59'" in str(absentee.trigger)
    assert absentee.max_instances == 1

    stale = c.scheduler.get("stale-pending-sweep")
    assert "hour='0'" in str(stale.trigger)
    assert "minute='0'" in str(stale.trigger)


def test_without_device_only_sweeps_are_scheduled():
    c = build_fake_container()

    c.schedule_jobs()

    assert c.scheduler.job_ids() == ["absentee-sweep", "stale-pending-sweep"]


def test_poller_shutdown_unschedules_its_job():
    c = build_fake_container(device=FakeDevice())
    c.schedule_jobs()

    c.device_poller.shutdown()
    c.device_poller.shutdown()

    assert "device-poller" not in c.scheduler.job_ids()


def test_workers_start_and_stop():
    c = build_fake_container()

    c.start_workers()
    try:
        assert c.scheduler.running
    finally:
        c.stop_workers()

    assert not c.scheduler.running
