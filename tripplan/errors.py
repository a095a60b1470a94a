"""Domain error system + JSON envelope handler registration.

Every failure leaves the API as ``{'ok': False, 'error': <code>, 'message'?}``
with the status carried by the raised error. Unhandled exceptions are logged
with an incident id and never echo the raw exception text to the client.
"""
from __future__ import annotations

import logging
import traceback
import uuid
from typing import Any, Literal, NotRequired, TypedDict

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException
from werkzeug.wrappers.response import Response

log = logging.getLogger(__name__)

ErrorCode = Literal[
    "invalid",
    "unauthorized",
    "forbidden",
    "not_found",
    "conflict",
    "precondition_failed",
    "rate_limited",
    "unsupported",
    "config_error",
    "storage_error",
    "internal",
]


class ErrorResponse(TypedDict):
    ok: Literal[False]
    error: ErrorCode
    message: NotRequired[str]


class DomainError(Exception):
    status: int = 400
    code: ErrorCode = "invalid"

    def __init__(self, message: str | None = None, **extra: Any):
        self.message = message or self.code
        self.extra = extra
        super().__init__(self.message)


class ValidationError(DomainError):
    status = 400
    code = "invalid"


class AuthError(DomainError):
    """Signals a 401: wrong password or missing/expired session cookie."""

    status = 401
    code = "unauthorized"


class NotFoundError(DomainError):
    status = 404
    code = "not_found"


class NotInitializedError(NotFoundError):
    """The trip document has never been created (file absent)."""

    def __init__(self, message: str = "Not initialized", **extra: Any):
        super().__init__(message, **extra)


class ConflictError(DomainError):
    status = 409
    code = "conflict"


class LastDayError(ConflictError):
    def __init__(self, message: str = "cannot remove the last remaining day", **extra: Any):
        super().__init__(message, **extra)


class PreconditionFailed(DomainError):
    status = 412
    code = "precondition_failed"


class RateLimitError(DomainError):
    status = 429
    code = "rate_limited"

    def __init__(self, message: str = "Too many requests", retry_after: int = 1, **extra: Any):
        super().__init__(message, retry_after=retry_after, **extra)
        self.retry_after = retry_after


class ConfigError(DomainError):
    status = 500
    code = "config_error"


class StorageError(DomainError):
    status = 500
    code = "storage_error"


def make_error(error: ErrorCode, message: str | None = None, status: int = 400, **extra: Any) -> Response:
    payload: dict[str, Any] = {"ok": False, "error": error}
    if message:
        payload["message"] = message
    for k, v in extra.items():
        if v is not None:
            payload[k] = v
    resp = jsonify(payload)
    resp.status_code = status
    return resp


_STATUS_MAPPING: dict[int, ErrorCode] = {
    400: "invalid",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    405: "unsupported",
    409: "conflict",
    412: "precondition_failed",
    415: "unsupported",
    422: "invalid",
    429: "rate_limited",
}


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def _domain(err: DomainError) -> Response:
        if err.status >= 500:
            log.error("%s path=%s: %s", err.code, request.path, err.message)
        resp = make_error(err.code, err.message, err.status, **err.extra)
        if isinstance(err, RateLimitError):
            resp.headers["Retry-After"] = str(int(err.retry_after))
        return resp

    @app.errorhandler(HTTPException)
    def _http(ex: HTTPException) -> Response:
        status = ex.code or 500
        code = _STATUS_MAPPING.get(status)
        if code is None:
            return make_error("internal", status=500)
        return make_error(code, ex.description, status)

    @app.errorhandler(Exception)
    def _unhandled(ex: Exception) -> Response:
        incident_id = str(uuid.uuid4())
        log.error(
            "Unhandled exception incident_id=%s path=%s\n%s",
            incident_id,
            request.path,
            traceback.format_exc(),
        )
        return make_error("internal", "internal error", 500, incident_id=incident_id)


__all__ = [
    "AuthError",
    "ConfigError",
    "ConflictError",
    "DomainError",
    "ErrorCode",
    "ErrorResponse",
    "LastDayError",
    "NotFoundError",
    "NotInitializedError",
    "PreconditionFailed",
    "RateLimitError",
    "StorageError",
    "ValidationError",
    "make_error",
    "register_error_handlers",
]
