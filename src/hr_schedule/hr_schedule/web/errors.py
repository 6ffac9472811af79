from __future__ import annotations

import logging

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from ..core.exceptions import (
    AuthorizationError,
    ConflictError,
    DomainError,
    LockTimeoutError,
    NotFoundError,
    PersistenceError,
    TerminalStateError,
    ValidationError,
)

logger = logging.getLogger("hr_schedule.web")

_STATUS_BY_ERROR: tuple[tuple[type[DomainError], int], ...] = (
    (ValidationError, 400),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (ConflictError, 409),
    (TerminalStateError, 409),
    (LockTimeoutError, 503),
    (PersistenceError, 503),
)

RETRY_AFTER_SECONDS = 1


def error_response(*, status_code: int, code: str, message: str, reason: str | None = None):
    payload: dict = {"error": {"code": code, "message": message}}
    if reason:
        payload["error"]["reason"] = reason
    return jsonify(payload), status_code


def status_for(exc: DomainError) -> int:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return 400


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(exc: DomainError):
        status_code = status_for(exc)
        reason = getattr(exc, "reason", None)
        response, status_code = error_response(
            status_code=status_code,
            code=exc.code,
            message=str(exc),
            reason=reason.value if reason is not None else None,
        )
        if getattr(exc, "retryable", False):
            response.headers["Retry-After"] = str(RETRY_AFTER_SECONDS)
        return response, status_code

    @app.errorhandler(HTTPException)
    def handle_http_exception(exc: HTTPException):
        return error_response(
            status_code=exc.code or 500,
            code="HTTP_ERROR",
            message=exc.description or "Request failed.",
        )

    @app.errorhandler(Exception)
    def handle_unexpected_error(exc: Exception):
        logger.exception("unhandled_error", extra={"path": request.path, "method": request.method})
        return error_response(status_code=500, code="INTERNAL_ERROR", message="Unexpected server error.")
