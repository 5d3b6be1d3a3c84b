from __future__ import annotations

import logging
from typing import Optional

from ..core.enums import SettingKey
from .repository import SettingsRepository

logger = logging.getLogger(__name__)

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


class FeatureFlags:
    """Boolean toggles stored in the settings table.

    A missing or unreadable value falls back to the flag's default (enabled).
    """

    def __init__(self, settings: SettingsRepository):
        self._settings = settings

    def is_enabled(self, key: SettingKey, *, default: bool = True) -> bool:
        raw = self._settings.get(key.value)
        if raw is None:
            return default
        value = raw.strip().lower()
        if value in _TRUE:
            return True
        if value in _FALSE:
            return False
        logger.warning("[settings] unrecognised value %r for %s, using default", raw, key.value)
        return default

    def set_enabled(self, key: SettingKey, enabled: bool, *, updated_by: Optional[int] = None) -> None:
        self._settings.set(key.value, "true" if enabled else "false", updated_by=updated_by)
        logger.info("[settings] %s set to %s by %s", key.value, enabled, updated_by)

    def manual_attendance_enabled(self) -> bool:
        return self.is_enabled(SettingKey.MANUAL_ATTENDANCE_ENABLED)

    def auto_mark_absent_enabled(self) -> bool:
        return self.is_enabled(SettingKey.AUTO_MARK_ABSENT_ENABLED)
