from __future__ import annotations

import logging

from flask import Flask, request

from ..common.http import admin_required, body, datetime_param, fail, int_param, json_api, ok
from ..core import constants
from ..core.exceptions import DeviceError
from ..container import Container
from .iclock import IClockSessions, parse_attlog

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    ingestion = container.ingestion_service
    sessions = IClockSessions()

    # ----- device push (iClock) -----

    @app.route("/iclock/cdata", methods=["GET"], endpoint="iclock_cdata_get")
    def iclock_handshake():
        logger.info("[iclock] handshake from SN=%s", request.args.get("SN"))
        return "OK", 200, {"Content-Type": "text/plain"}

    @app.route("/iclock/cdata", methods=["POST"], endpoint="iclock_cdata_post")
    def iclock_push():
        serial_number = request.args.get("SN", "")
        table = request.args.get("table", "")
        if table.upper() == "ATTLOG":
            entries = parse_attlog(request.get_data(as_text=True) or "")
            try:
                ingestion.ingest_pushed(entries, device_id=serial_number)
            except Exception:
                logger.exception("[iclock] failed to ingest push from SN=%s", serial_number)
                return "ERROR", 500, {"Content-Type": "text/plain"}
        else:
            logger.debug("[iclock] ignoring table %r from SN=%s", table, serial_number)
        return "OK", 200, {"Content-Type": "text/plain"}

    @app.route("/iclock/getrequest", methods=["GET"], endpoint="iclock_getrequest")
    def iclock_getrequest():
        command = sessions.next_command(request.args.get("SN", ""))
        return command, 200, {"Content-Type": "text/plain"}

    # ----- admin API -----

    @app.route("/api/biometric/health", methods=["GET"], endpoint="api_biometric_health")
    def biometric_health():
        data = ingestion.health()
        poller = container.device_poller
        data["polling"] = bool(poller and poller.is_polling)
        return ok(data)

    @app.route("/api/biometric/logs", methods=["GET"], endpoint="api_biometric_logs")
    @admin_required
    @json_api
    def biometric_logs():
        limit = int_param(request.args.get("limit"), "limit") or constants.DEFAULT_HISTORY_LIMIT
        events = container.punch_log_repo.list_recent(
            limit=min(limit, constants.DEFAULT_HISTORY_LIMIT),
            biometric_id=request.args.get("biometric_id") or None,
        )
        return ok([e.to_dict() for e in events])

    @app.route("/api/biometric/sync", methods=["POST"], endpoint="api_biometric_sync")
    @admin_required
    @json_api
    def biometric_sync():
        poller = container.device_poller
        if poller is None:
            return fail("No biometric device configured", 400)
        try:
            stats = poller.trigger()
        except DeviceError as e:
            return fail(str(e), 502)
        if stats is None:
            return fail("A sync is already in progress", 409)
        return ok(stats.to_dict())

    @app.route("/api/biometric/clock", methods=["POST"], endpoint="api_biometric_clock")
    @admin_required
    @json_api
    def biometric_clock():
        value = datetime_param(body().get("time"), "time")
        try:
            applied = ingestion.sync_device_clock(value)
        except DeviceError as e:
            return fail(str(e), 502)
        return ok({"time": applied.isoformat(sep=" ")})
