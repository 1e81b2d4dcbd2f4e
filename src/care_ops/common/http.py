"""Shared JSON-API plumbing for the controllers: session guards and error mapping."""

from __future__ import annotations

import logging
from functools import wraps
from typing import Any

from flask import Flask, jsonify, request, session
from werkzeug.exceptions import HTTPException

from ..core.enums import Role
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DomainError,
    InvalidRecordError,
    NotFoundError,
    ValidationError,
)
from ..users.model import Actor

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: list[tuple[type[DomainError], int]] = [
    (ValidationError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (InvalidRecordError, 500),
]


def json_error(message: str, status: int):
    return jsonify({"error": message}), status


def current_actor() -> Actor:
    return Actor(user_id=int(session["user_id"]), name=session.get("name", ""), role=Role(session["role"]))


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return json_error("Unauthorized", 401)
        return view(*args, **kwargs)

    return wrapper


def roles_required(*roles: Role):
    allowed = {r.value for r in roles}

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session:
                return json_error("Unauthorized", 401)
            if session.get("role") not in allowed:
                return json_error("Forbidden", 403)
            return view(*args, **kwargs)

        return wrapper

    return decorator


def request_json() -> dict[str, Any]:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def client_meta() -> tuple[str | None, str | None]:
    """(ip address, user agent) of the current request."""
    forwarded = request.headers.get("X-Forwarded-For", "")
    ip = forwarded.split(",")[0].strip() if forwarded else request.remote_addr
    return ip or None, request.headers.get("User-Agent")


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def _domain_error(ex: DomainError):
        for error_type, status in _STATUS_BY_ERROR:
            if isinstance(ex, error_type):
                if status >= 500:
                    logger.error("Unreadable record on %s %s: %s", request.method, request.path, ex)
                    return json_error("Stored record could not be processed", status)
                return json_error(str(ex), status)
        return json_error(str(ex), 400)

    @app.errorhandler(HTTPException)
    def _http_error(ex: HTTPException):
        return json_error(ex.description or ex.name, ex.code or 500)

    @app.errorhandler(Exception)
    def _unexpected(ex: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return json_error("Internal server error", 500)
