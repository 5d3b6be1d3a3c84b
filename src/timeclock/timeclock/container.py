from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import time
from typing import Optional

from .attendance.factory import AttendanceStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .common.jobs import JobScheduler
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLDepartmentRepository, MySQLEmployeeRepository
from .employees.repository import DepartmentRepository, EmployeeRepository
from .ingestion.device import AttendanceDevice, build_device
from .ingestion.mysql_punch_log_repository import MySQLPunchLogRepository
from .ingestion.poller import DevicePoller
from .ingestion.repository import PunchLogRepository
from .ingestion.service import PunchIngestionService
from .options import EngineOptions
from .payroll.mysql_salary_repository import MySQLSalaryRepository
from .payroll.repository import SalaryRepository
from .payroll.service import PayrollService
from .reconciliation.service import ReconciliationService
from .schedules.mysql_assignment_repository import MySQLAssignmentRepository
from .schedules.repository import AssignmentRepository
from .schedules.resolver import ScheduleResolver
from .settings.mysql_settings_repository import MySQLSettingsRepository
from .settings.repository import SettingsRepository
from .settings.service import FeatureFlags

logger = logging.getLogger(__name__)

STALE_SWEEP_JOB = "stale-pending-sweep"
ABSENTEE_SWEEP_JOB = "absentee-sweep"


@dataclass(frozen=True)
class Container:
    options: EngineOptions

    employees_repo: EmployeeRepository
    departments_repo: DepartmentRepository
    assignments_repo: AssignmentRepository
    attendance_repo: AttendanceRepository
    punch_log_repo: PunchLogRepository
    salary_repo: SalaryRepository
    settings_repo: SettingsRepository

    feature_flags: FeatureFlags
    resolver: ScheduleResolver
    attendance_service: AttendanceService
    reconciliation_service: ReconciliationService
    ingestion_service: PunchIngestionService
    payroll_service: PayrollService

    device_poller: Optional[DevicePoller]
    scheduler: JobScheduler

    def run_absentee_sweep(self) -> None:
        if not self.feature_flags.auto_mark_absent_enabled():
            logger.info("[reconcile] auto-mark absent is disabled, skipping")
            return
        self.reconciliation_service.mark_absentees()

    def schedule_jobs(self) -> None:
        self.scheduler.add_daily(STALE_SWEEP_JOB, time(0, 0), self.reconciliation_service.mark_stale_pending)
        self.scheduler.add_daily(ABSENTEE_SWEEP_JOB, self.options.absentee_sweep_time, self.run_absentee_sweep)
        if self.device_poller is not None:
            self.device_poller.start()
        else:
            logger.info("[container] no biometric device configured; polling disabled")

    def start_workers(self) -> None:
        self.schedule_jobs()
        self.scheduler.start()

    def stop_workers(self) -> None:
        if self.device_poller is not None:
            self.device_poller.shutdown()
        self.scheduler.shutdown()


def assemble(
    *,
    options: EngineOptions,
    employees_repo: EmployeeRepository,
    departments_repo: DepartmentRepository,
    assignments_repo: AssignmentRepository,
    attendance_repo: AttendanceRepository,
    punch_log_repo: PunchLogRepository,
    salary_repo: SalaryRepository,
    settings_repo: SettingsRepository,
    device: Optional[AttendanceDevice] = None,
) -> Container:
    """Wire services over the given repositories (MySQL in the app, fakes in tests)."""

    feature_flags = FeatureFlags(settings_repo)
    resolver = ScheduleResolver(departments_repo, defaults=options.schedule_defaults)

    reconciliation_service = ReconciliationService(
        attendance_repo,
        employees_repo,
        assignments_repo,
        resolver,
        exempt_roles=options.exempt_roles,
    )
    attendance_service = AttendanceService(
        attendance_repo,
        employees_repo,
        assignments_repo,
        resolver,
        feature_flags,
        strategy_factory=AttendanceStrategyFactory(),
        rapid_punch_threshold_minutes=options.rapid_punch_threshold_minutes,
        stale_sweep=reconciliation_service.mark_stale_pending,
    )
    ingestion_service = PunchIngestionService(
        device,
        punch_log_repo,
        employees_repo,
        attendance_service,
        exempt_roles=options.exempt_roles,
    )
    payroll_service = PayrollService(
        salary_repo,
        attendance_repo,
        employees_repo,
        assignments_repo,
        resolver,
        default_criteria=options.salary_criteria,
        exempt_roles=options.exempt_roles,
    )

    scheduler = JobScheduler()
    device_poller = (
        DevicePoller(ingestion_service, options.poll_interval_seconds, scheduler=scheduler) if device is not None else None
    )

    return Container(
        options=options,
        employees_repo=employees_repo,
        departments_repo=departments_repo,
        assignments_repo=assignments_repo,
        attendance_repo=attendance_repo,
        punch_log_repo=punch_log_repo,
        salary_repo=salary_repo,
        settings_repo=settings_repo,
        feature_flags=feature_flags,
        resolver=resolver,
        attendance_service=attendance_service,
        reconciliation_service=reconciliation_service,
        ingestion_service=ingestion_service,
        payroll_service=payroll_service,
        device_poller=device_poller,
        scheduler=scheduler,
    )


def build_container(*, db_config: dict, options: Optional[EngineOptions] = None) -> Container:
    config = DBConfig(
        host=str(db_config["host"]),
        port=int(db_config.get("port", 3306)),
        user=str(db_config["user"]),
        password=str(db_config["password"]),
        database=str(db_config["database"]),
        connection_timeout=int(db_config.get("connection_timeout", 10)),
    )
    conn = DatabaseConnection.get_instance(config)
    options = options or EngineOptions()

    return assemble(
        options=options,
        employees_repo=MySQLEmployeeRepository(conn),
        departments_repo=MySQLDepartmentRepository(conn),
        assignments_repo=MySQLAssignmentRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        punch_log_repo=MySQLPunchLogRepository(conn),
        salary_repo=MySQLSalaryRepository(conn),
        settings_repo=MySQLSettingsRepository(conn),
        device=build_device(options.device),
    )
