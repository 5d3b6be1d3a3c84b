from __future__ import annotations

from flask import Flask

from ..common.http import admin_required, body, current_actor, fail, json_api, ok
from ..core.enums import SettingKey
from ..container import Container

_FLAGS = (
    SettingKey.MANUAL_ATTENDANCE_ENABLED,
    SettingKey.AUTO_MARK_ABSENT_ENABLED,
)


def register(app: Flask, container: Container) -> None:
    flags = container.feature_flags

    @app.route("/api/settings/flags", methods=["GET"], endpoint="api_settings_flags")
    @admin_required
    def list_flags():
        return ok({key.value: flags.is_enabled(key) for key in _FLAGS})

    @app.route("/api/settings/flags/<key>", methods=["PUT"], endpoint="api_settings_flag_update")
    @admin_required
    @json_api
    def update_flag(key: str):
        try:
            setting = SettingKey(key)
        except ValueError:
            return fail(f"Unknown setting: {key}", 404)
        if setting not in _FLAGS:
            return fail(f"Unknown setting: {key}", 404)
        data = body()
        if not isinstance(data.get("enabled"), bool):
            return fail("enabled must be true or false", 400)
        flags.set_enabled(setting, data["enabled"], updated_by=current_actor().user_id)
        return ok({setting.value: data["enabled"]})
