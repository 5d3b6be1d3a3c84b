from __future__ import annotations

import logging
from datetime import date, datetime
from functools import wraps
from typing import Any, Optional

from flask import jsonify, request, session

from ..core.enums import Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..employees.model import Actor
from .datetime_utils import parse_iso_date, parse_iso_datetime

logger = logging.getLogger(__name__)

ADMIN_ROLES = {Role.SUPER_ADMIN.value, Role.ADMIN.value}


def ok(data: Any = None, status: int = 200):
    return jsonify({"success": True, "data": data}), status


def fail(message: str, status: int = 400):
    return jsonify({"success": False, "message": message}), status


def json_api(view):
    """Translate domain exceptions raised by a view into JSON error responses."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except ValidationError as e:
            return fail(str(e), 400)
        except AuthorizationError as e:
            return fail(str(e), 403)
        except NotFoundError as e:
            return fail(str(e), 404)

    return wrapper


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if session.get("role") not in ADMIN_ROLES:
            return fail("Admin access required", 403)
        return view(*args, **kwargs)

    return wrapper


def current_actor() -> Actor:
    user_id = session.get("user_id")
    try:
        role = Role(session.get("role", Role.STAFF.value))
    except ValueError:
        role = Role.STAFF
    return Actor(user_id=int(user_id) if user_id is not None else None, role=role)


def body() -> dict:
    return request.get_json(silent=True) or {}


def date_param(value: Any, field_name: str, *, default: Optional[date] = None) -> date:
    if value in (None, ""):
        if default is None:
            raise ValidationError(f"{field_name} is required")
        return default
    try:
        return parse_iso_date(str(value))
    except ValueError:
        raise ValidationError(f"{field_name} must be YYYY-MM-DD")


def datetime_param(value: Any, field_name: str) -> Optional[datetime]:
    if value in (None, ""):
        return None
    try:
        return parse_iso_datetime(str(value))
    except ValueError:
        raise ValidationError(f"{field_name} must be an ISO date-time")


def int_param(value: Any, field_name: str) -> Optional[int]:
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer")
