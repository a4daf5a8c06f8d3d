"""Session role guards and JSON error mapping shared by the controllers."""
from __future__ import annotations

import logging
from functools import wraps

from flask import Flask, jsonify, request, session
from werkzeug.exceptions import HTTPException

from ..core.enums import HrmRole
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DeliveryError,
    DomainError,
    NotFoundError,
    StateError,
    ValidationError,
)

logger = logging.getLogger(__name__)

ERROR_STATUS = (
    (ValidationError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (StateError, 409),
    (DeliveryError, 502),
)


def status_for(exc: DomainError) -> int:
    for exc_type, status in ERROR_STATUS:
        if isinstance(exc, exc_type):
            return status
    return 400


def current_user_id() -> int:
    return int(session["user_id"])


def current_role() -> HrmRole:
    try:
        return HrmRole(session.get("hrm_role"))
    except ValueError:
        raise AuthorizationError("Forbidden")


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"error": "Unauthorized"}), 401
        return view(*args, **kwargs)

    return wrapper


def roles_required(*roles: HrmRole):
    allowed = {r.value for r in roles}

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session:
                return jsonify({"error": "Unauthorized"}), 401
            if session.get("hrm_role") not in allowed:
                return jsonify({"error": "Forbidden"}), 403
            return view(*args, **kwargs)

        return wrapper

    return decorator


super_admin_required = roles_required(HrmRole.SUPER_ADMIN)


def arg(name: str) -> str:
    """Required query-string parameter."""
    value = (request.args.get(name) or "").strip()
    if not value:
        raise ValidationError(f"{name} is required")
    return value


def json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(exc: DomainError):
        status = status_for(exc)
        logger.info("%s %s -> %s: %s", request.method, request.path, status, exc)
        return jsonify({"error": str(exc)}), status

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        if isinstance(exc, HTTPException):
            return jsonify({"error": exc.description}), exc.code
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return jsonify({"error": "Internal server error"}), 500
