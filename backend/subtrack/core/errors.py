"""Problem+JSON (RFC 7807) rendering for every error the API returns.

Service and auth-core errors are translated to :class:`APIError` subclasses
before they reach these handlers; anything else surfaces as a generic 500.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any

from flask import Flask, Response, jsonify, request
from marshmallow import ValidationError
from sqlalchemy.exc import IntegrityError
from werkzeug.exceptions import HTTPException

from subtrack.core.logger import ensure_request_id

log = logging.getLogger(__name__)

PROBLEM_MIMETYPE = "application/problem+json"

_STATUS_CODES = {
    400: "bad_request",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
    409: "conflict",
    415: "unsupported_media_type",
    422: "unprocessable_entity",
    500: "internal_server_error",
    503: "service_unavailable",
}


def _http_status_to_code(status_code: int) -> str:
    """Return the snake_case code for ``status_code`` (``"error"`` if unmapped)."""
    return _STATUS_CODES.get(status_code, "error")


def _as_problem(
    *,
    status: int,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Build an RFC 7807 Problem Details dict.

    :param status: HTTP status code.
    :param code: Stable machine-consumable error code.
    :param message: Human-readable error summary (safe for clients).
    :param details: Optional safe, structured details.
    :returns: Problem+JSON dictionary.
    :rtype: dict
    """
    problem: dict[str, Any] = {
        "type": "about:blank",
        "title": HTTPStatus(status).phrase,
        "status": status,
        "detail": message,
        "instance": request.path if request else None,
        "code": code,
    }
    if details:
        problem["details"] = details
    problem["request_id"] = ensure_request_id()
    return problem


def _problem_response(problem: dict[str, Any], status: int) -> tuple[Response, int]:
    resp = jsonify(problem)
    resp.mimetype = PROBLEM_MIMETYPE
    return resp, status


class APIError(Exception):
    """
    Error raised by views and service translation, rendered as a problem.

    :param message: Client-safe ``detail``; never carries token or password data.
    :param status_code: HTTP status (``400`` by default).
    :param code: Stable snake_case identifier for clients.
    :param details: Extra structured fields, omitted when empty.
    """

    def __init__(
        self,
        message: str,
        status_code: int = 400,
        code: str = "bad_request",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = int(status_code)
        self.code = code
        self.details = details or {}

    def to_problem(self) -> dict[str, Any]:
        """Return the problem body for this error."""
        return _as_problem(
            status=self.status_code,
            code=self.code,
            message=self.message,
            details=self.details or None,
        )


class BadRequest(APIError):
    """400 for malformed input that passed schema validation."""

    def __init__(self, message: str = "Bad request") -> None:
        super().__init__(message, status_code=HTTPStatus.BAD_REQUEST, code="bad_request")


class Unauthorized(APIError):
    """401 when authentication fails."""

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(message, status_code=HTTPStatus.UNAUTHORIZED, code="unauthorized")


class Forbidden(APIError):
    """403 when access is denied."""

    def __init__(self, message: str = "Forbidden") -> None:
        super().__init__(message, status_code=HTTPStatus.FORBIDDEN, code="forbidden")


class NotFound(APIError):
    """404 when resources are missing."""

    def __init__(self, message: str = "Resource not found") -> None:
        super().__init__(message, status_code=HTTPStatus.NOT_FOUND, code="not_found")


class Conflict(APIError):
    """409 for uniqueness collisions."""

    def __init__(self, message: str = "Conflict") -> None:
        super().__init__(message, status_code=HTTPStatus.CONFLICT, code="conflict")


class InternalError(APIError):
    """500 with a generic message; the cause is logged, never returned."""

    def __init__(self, message: str = "Unexpected error") -> None:
        super().__init__(
            message,
            status_code=HTTPStatus.INTERNAL_SERVER_ERROR,
            code="internal_server_error",
        )


def render_api_error(err: APIError) -> tuple[Response, int]:
    """Log ``err`` at a level matching its status and render it as a problem."""
    problem = err.to_problem()
    if err.status_code >= 500:
        log.error(
            "APIError: code=%s status=%s request_id=%s",
            err.code,
            err.status_code,
            problem.get("request_id"),
            exc_info=err.__cause__ is not None,
        )
    else:
        log.warning(
            "APIError: code=%s status=%s request_id=%s",
            err.code,
            err.status_code,
            problem.get("request_id"),
        )
    return _problem_response(problem, err.status_code)


def init_app(app: Flask) -> None:
    """
    Register problem+json handlers on ``app``.

    Every response carries the correlation ``request_id``. Server errors are
    logged with the traceback, client errors as one warning line.
    """

    @app.errorhandler(APIError)
    def handle_api_error(err: APIError):
        return render_api_error(err)

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        status = int(err.code or HTTPStatus.INTERNAL_SERVER_ERROR)
        error_code = _http_status_to_code(status)
        message = (err.description or error_code.replace("_", " ").capitalize()).strip()
        if status == HTTPStatus.NOT_FOUND and request:
            message = f"Route '{request.path}' not found"
        problem = _as_problem(status=status, code=error_code, message=message)
        level = log.error if status >= 500 else log.warning
        level(
            "HTTPException: code=%s status=%s request_id=%s",
            error_code,
            status,
            problem.get("request_id"),
        )
        return _problem_response(problem, status)

    @app.errorhandler(ValidationError)
    def handle_validation_error(err: ValidationError):
        # Field names only; submitted values (passwords) are never echoed.
        problem = _as_problem(
            status=HTTPStatus.UNPROCESSABLE_ENTITY,
            code="validation_error",
            message="Validation failed",
            details={"errors": err.messages},
        )
        log.warning("ValidationError: request_id=%s", problem.get("request_id"))
        return _problem_response(problem, HTTPStatus.UNPROCESSABLE_ENTITY)

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(err: IntegrityError):
        problem = _as_problem(
            status=HTTPStatus.CONFLICT,
            code="conflict",
            message="Resource conflict",
        )
        log.error("IntegrityError: request_id=%s", problem.get("request_id"), exc_info=True)
        return _problem_response(problem, HTTPStatus.CONFLICT)

    @app.errorhandler(Exception)
    def handle_unexpected_error(err: Exception):
        problem = _as_problem(
            status=HTTPStatus.INTERNAL_SERVER_ERROR,
            code="internal_server_error",
            message="Unexpected error",
        )
        log.error("Unhandled exception: request_id=%s", problem.get("request_id"), exc_info=True)
        return _problem_response(problem, HTTPStatus.INTERNAL_SERVER_ERROR)


__all__ = [
    "APIError",
    "BadRequest",
    "Conflict",
    "Forbidden",
    "InternalError",
    "NotFound",
    "Unauthorized",
    "init_app",
    "render_api_error",
]
