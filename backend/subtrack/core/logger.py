"""Structured JSON logging with request correlation."""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from flask import Flask, Response, current_app, g, has_app_context, has_request_context, request

REQUEST_ID_HEADER = "X-Request-ID"
CORRELATION_HEADERS = ("X-Request-ID", "X-Correlation-ID")

# Optional record attributes copied into the JSON payload when present.
_EXTRA_FIELDS = ("endpoint", "elapsed_ms", "auth_mode", "status")


class JSONFormatter(logging.Formatter):
    """Render log records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "time": datetime.now(UTC).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", None),
        }
        for key in _EXTRA_FIELDS:
            value = getattr(record, key, None)
            if value is not None:
                payload[key] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class RequestContextFilter(logging.Filter):
    """Attach ``request_id`` and ``auth_mode`` to every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = ensure_request_id() if has_request_context() else None
        if not hasattr(record, "auth_mode") and has_app_context():
            record.auth_mode = current_app.config.get("AUTH_MODE")
        return True


def ensure_request_id() -> str:
    """Return the current request identifier, generating one when necessary."""

    if not has_request_context():
        return str(uuid4())
    if "request_id" in g:
        return str(g.request_id)
    for header in CORRELATION_HEADERS:
        value = request.headers.get(header)
        if value:
            g.request_id = value
            return value
    g.request_id = str(uuid4())
    return str(g.request_id)


def configure_logging(level: str | int = "INFO") -> None:
    """Configure the root logger with JSON-formatted stdout output."""

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    handler.addFilter(RequestContextFilter())
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        root.setLevel(resolved if isinstance(resolved, int) else logging.INFO)
    else:
        root.setLevel(level)


def init_app(app: Flask) -> None:
    """Seed the request id early and echo it back on every response."""

    app.logger.addFilter(RequestContextFilter())

    @app.before_request
    def _seed_request_id() -> None:
        ensure_request_id()

    @app.after_request
    def _inject_response_header(response: Response) -> Response:
        response.headers.setdefault(REQUEST_ID_HEADER, ensure_request_id())
        return response


__all__ = ["JSONFormatter", "configure_logging", "ensure_request_id", "init_app"]
