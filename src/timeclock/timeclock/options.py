"""Engine options: the settings module converted once into typed values."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import time
from typing import Any, Optional

from .common.datetime_utils import parse_clock
from .core import constants
from .core.enums import Role
from .payroll.model import SalaryCriteria
from .schedules.resolver import ScheduleDefaults


@dataclass(frozen=True)
class EngineOptions:
    device: Optional[dict] = None
    poll_interval_seconds: float = constants.DEFAULT_POLL_INTERVAL_SECONDS
    rapid_punch_threshold_minutes: int = constants.RAPID_PUNCH_THRESHOLD_MINUTES
    schedule_defaults: ScheduleDefaults = field(default_factory=ScheduleDefaults)
    absentee_sweep_time: time = field(default_factory=lambda: parse_clock(constants.ABSENTEE_SWEEP_TIME))
    exempt_roles: frozenset[Role] = frozenset({Role.SUPER_ADMIN})
    salary_criteria: SalaryCriteria = field(default_factory=SalaryCriteria)
    start_workers: bool = False

    @classmethod
    def from_settings(cls, settings: Any) -> "EngineOptions":
        leverage = getattr(settings, "LEVERAGE_DEFAULTS", None) or {}
        schedule_defaults = ScheduleDefaults(
            check_in_leverage_minutes=int(leverage.get("check_in", constants.DEFAULT_CHECK_IN_LEVERAGE_MINUTES)),
            check_out_leverage_minutes=int(leverage.get("check_out", constants.DEFAULT_CHECK_OUT_LEVERAGE_MINUTES)),
        )
        exempt = getattr(settings, "EXEMPT_ROLES", None) or (Role.SUPER_ADMIN.value,)
        return cls(
            device=getattr(settings, "DEVICE_CONFIG", None) or None,
            poll_interval_seconds=float(getattr(settings, "POLL_INTERVAL_SECONDS", constants.DEFAULT_POLL_INTERVAL_SECONDS)),
            rapid_punch_threshold_minutes=int(
                getattr(settings, "RAPID_PUNCH_THRESHOLD_MINUTES", constants.RAPID_PUNCH_THRESHOLD_MINUTES)
            ),
            schedule_defaults=schedule_defaults,
            absentee_sweep_time=parse_clock(str(getattr(settings, "ABSENTEE_SWEEP_TIME", constants.ABSENTEE_SWEEP_TIME))),
            exempt_roles=frozenset(Role(r) for r in exempt),
            salary_criteria=SalaryCriteria().merged(getattr(settings, "SALARY_CRITERIA", None)),
            start_workers=bool(getattr(settings, "START_WORKERS", False)),
        )
