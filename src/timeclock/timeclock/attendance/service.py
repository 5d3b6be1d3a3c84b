from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Callable, Optional, Sequence

from ..common.validators import require_punch_order, require_same_work_day
from ..core import constants
from ..core.enums import AttendanceStatus, PunchOutcome
from ..core.exceptions import AuthorizationError, DuplicateRecordError, NotFoundError, ValidationError
from ..employees.model import Actor, Employee
from ..employees.repository import EmployeeRepository
from ..schedules.model import DepartmentAssignment, ResolvedSchedule
from ..schedules.repository import AssignmentRepository
from ..schedules.resolver import ScheduleResolver
from ..settings.service import FeatureFlags
from .factory import AttendanceStrategyFactory
from .model import AttendanceRecord
from .repository import AttendanceRepository
from .splitter import ShiftSlice, ShiftSplitter
from .status_engine import apply_status

logger = logging.getLogger(__name__)


class AttendanceService:
    """Single write path for attendance records.

    Device punches, manual entries and recomputation all go through here so
    the find-or-create, merge and status rules live in one place.
    """

    def __init__(
        self,
        records: AttendanceRepository,
        employees: EmployeeRepository,
        assignments: AssignmentRepository,
        resolver: ScheduleResolver,
        flags: FeatureFlags,
        *,
        strategy_factory: AttendanceStrategyFactory | None = None,
        rapid_punch_threshold_minutes: int = constants.RAPID_PUNCH_THRESHOLD_MINUTES,
        stale_sweep: Optional[Callable[[], int]] = None,
    ):
        self._records = records
        self._employees = employees
        self._assignments = assignments
        self._resolver = resolver
        self._flags = flags
        self._splitter = ShiftSplitter(resolver)
        self._factory = strategy_factory or AttendanceStrategyFactory()
        self._rapid_punch = timedelta(minutes=int(rapid_punch_threshold_minutes))
        self._stale_sweep = stale_sweep

    # ----- device punches -----

    def record_punch(self, employee: Employee, punch_time: datetime, *, device_id: str = "") -> PunchOutcome:
        """Apply one raw punch as check-in or check-out.

        For employees in several departments the day is the union of their
        records: the earliest check-in is the reference and the day is closed
        only when every checked-in record has a check-out.
        """

        work_date = punch_time.date()
        day = self._records.list_for_employee_and_date(employee.employee_id, work_date)
        checked_in = [r for r in day if r.check_in is not None]

        if not checked_in:
            written = self.apply_times(employee.employee_id, work_date, check_in=punch_time, check_out=None, device_id=device_id)
            if not written:
                logger.debug("[attendance] punch %s of employee=%s is outside every shift", punch_time, employee.employee_id)
                return PunchOutcome.OUTSIDE_SHIFT
            return PunchOutcome.CHECK_IN

        if all(r.check_out is not None for r in checked_in):
            logger.debug("[attendance] day already closed for employee=%s on %s", employee.employee_id, work_date)
            return PunchOutcome.ALREADY_CLOSED

        reference = min(r.check_in for r in checked_in)
        if punch_time - reference < self._rapid_punch:
            logger.debug(
                "[attendance] rapid punch for employee=%s at %s (check-in %s)", employee.employee_id, punch_time, reference
            )
            return PunchOutcome.RAPID_PUNCH

        written = self.apply_times(employee.employee_id, work_date, check_in=reference, check_out=punch_time, device_id=device_id)
        if not written:
            return PunchOutcome.OUTSIDE_SHIFT
        return PunchOutcome.CHECK_OUT

    def apply_times(
        self,
        employee_id: int,
        work_date: date,
        *,
        check_in: Optional[datetime],
        check_out: Optional[datetime],
        device_id: str = "",
    ) -> list[AttendanceRecord]:
        """Split the punch pair across assignments and upsert one record per slice."""

        assignments = self._assignments.list_for_employee(employee_id)
        slices = self._splitter.split(assignments, work_date, check_in, check_out)
        return [self._upsert_slice(employee_id, work_date, s, device_id=device_id) for s in slices]

    def _upsert_slice(self, employee_id: int, work_date: date, piece: ShiftSlice, *, device_id: str) -> AttendanceRecord:
        existing = self._records.get_for_key(employee_id, piece.department_id, work_date)
        if existing is None:
            fresh = AttendanceRecord(
                attendance_id=0,
                employee_id=employee_id,
                department_id=piece.department_id,
                work_date=work_date,
                check_in=piece.check_in,
                check_out=piece.check_out,
                device_id=device_id,
            )
            fresh = apply_status(fresh, piece.schedule, factory=self._factory)
            try:
                return self._records.create(fresh)
            except DuplicateRecordError:
                logger.info(
                    "[attendance] concurrent create for employee=%s department=%s on %s, merging",
                    employee_id,
                    piece.department_id,
                    work_date,
                )
                existing = self._records.get_for_key(employee_id, piece.department_id, work_date)
                if existing is None:
                    raise

        return self._merge(existing, piece, device_id=device_id)

    def _merge(self, existing: AttendanceRecord, piece: ShiftSlice, *, device_id: str) -> AttendanceRecord:
        check_in = existing.check_in or piece.check_in
        check_out = existing.check_out
        if piece.check_out is not None and (check_out is None or piece.check_out > check_out):
            check_out = piece.check_out

        status = existing.status
        if existing.check_in is None and check_in is not None and status in (AttendanceStatus.ABSENT, AttendanceStatus.MISSING):
            status = AttendanceStatus.PENDING

        if check_in == existing.check_in and check_out == existing.check_out and status == existing.status:
            return existing

        updated = replace(existing, check_in=check_in, check_out=check_out, status=status, device_id=device_id or existing.device_id)
        updated = apply_status(updated, piece.schedule, factory=self._factory)
        return self._records.save(updated)

    # ----- manual entries -----

    def _ensure_manual_allowed(self, actor: Actor) -> None:
        if actor.is_super_admin:
            return
        if not self._flags.manual_attendance_enabled():
            raise AuthorizationError("Manual attendance is disabled")

    def _target_assignment(self, employee_id: int, department_id: Optional[int]) -> Optional[DepartmentAssignment]:
        if department_id is not None:
            assignment = self._assignments.get(employee_id, department_id)
            if assignment is None:
                raise ValidationError("Employee is not assigned to this department")
            return assignment
        active = list(self._assignments.list_for_employee(employee_id))
        return next((a for a in active if a.is_primary), active[0] if active else None)

    def create_manual(
        self,
        actor: Actor,
        employee_id: int,
        work_date: date,
        *,
        check_in: Optional[datetime] = None,
        check_out: Optional[datetime] = None,
        status: Optional[AttendanceStatus] = None,
        remarks: str = "",
        department_id: Optional[int] = None,
    ) -> AttendanceRecord:
        self._ensure_manual_allowed(actor)
        require_punch_order(check_in, check_out)
        require_same_work_day(work_date, check_in, "check_in")
        require_same_work_day(work_date, check_out, "check_out")

        if self._employees.get_by_id(employee_id) is None:
            raise NotFoundError("Employee not found")

        assignment = self._target_assignment(employee_id, department_id)
        record = AttendanceRecord(
            attendance_id=0,
            employee_id=employee_id,
            department_id=assignment.department_id if assignment else None,
            work_date=work_date,
            check_in=check_in,
            check_out=check_out,
            status=status or AttendanceStatus.PENDING,
            is_manual_entry=True,
            modified_by=actor.user_id,
            remarks=remarks or "",
        )
        record = apply_status(record, self._schedule_for(record), factory=self._factory)
        try:
            created = self._records.create(record)
        except DuplicateRecordError:
            raise ValidationError("Attendance already recorded for this day; edit the existing record")

        logger.info("[attendance] manual record %s created by %s", created.attendance_id, actor.user_id)
        return created

    def update_record(
        self,
        actor: Actor,
        attendance_id: int,
        *,
        check_in: Optional[datetime] = None,
        check_out: Optional[datetime] = None,
        status: Optional[AttendanceStatus] = None,
        remarks: Optional[str] = None,
    ) -> AttendanceRecord:
        """Edit a record; omitted fields keep their value.

        An explicit non-pending status is pinned, an explicit `pending` asks
        for the status to be derived again from the punches.
        """

        self._ensure_manual_allowed(actor)
        existing = self._records.get_by_id(attendance_id)
        if existing is None:
            raise NotFoundError("Attendance record not found")

        new_in = check_in if check_in is not None else existing.check_in
        new_out = check_out if check_out is not None else existing.check_out
        require_punch_order(new_in, new_out)
        require_same_work_day(existing.work_date, new_in, "check_in")
        require_same_work_day(existing.work_date, new_out, "check_out")

        if status is not None:
            new_status = status
        elif existing.is_manual_entry or (check_in is None and check_out is None):
            new_status = existing.status
        else:
            new_status = AttendanceStatus.PENDING

        updated = replace(
            existing,
            check_in=new_in,
            check_out=new_out,
            status=new_status,
            is_manual_entry=True,
            modified_by=actor.user_id,
            remarks=existing.remarks if remarks is None else remarks,
        )
        updated = apply_status(updated, self._schedule_for(updated), factory=self._factory)
        saved = self._records.save(updated)
        logger.info("[attendance] record %s updated by %s", attendance_id, actor.user_id)
        return saved

    # ----- recompute / reads -----

    def _schedule_for(self, record: AttendanceRecord) -> Optional[ResolvedSchedule]:
        if record.department_id is None:
            return self._resolver.resolve(None, record.work_date)
        assignment = self._assignments.get(record.employee_id, record.department_id)
        if assignment is None:
            return None
        return self._resolver.resolve(assignment, record.work_date)

    def recompute(self, attendance_id: int) -> AttendanceRecord:
        record = self._records.get_by_id(attendance_id)
        if record is None:
            raise NotFoundError("Attendance record not found")
        updated = apply_status(record, self._schedule_for(record), factory=self._factory)
        if updated == record:
            return record
        return self._records.save(updated)

    def list_records(
        self,
        start: date,
        end: date,
        *,
        employee_id: Optional[int] = None,
        department_id: Optional[int] = None,
        limit: int = constants.DEFAULT_HISTORY_LIMIT,
    ) -> Sequence[AttendanceRecord]:
        if end < start:
            raise ValidationError("end date is before start date")
        if self._stale_sweep is not None:
            self._stale_sweep()
        return self._records.list_range(start, end, employee_id=employee_id, department_id=department_id, limit=limit)

    def get_day_records(self, employee_id: int, work_date: date) -> Sequence[AttendanceRecord]:
        return self._records.list_for_employee_and_date(employee_id, work_date)
