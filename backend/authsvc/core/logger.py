"""Structured logging configuration with request correlation.

Every record leaves the process as one JSON line carrying the ``request_id``
of the HTTP request that produced it. Services attach context through
``extra=`` (see :data:`EXTRA_KEYS`); anything else passed that way is
dropped, so credentials handed to a logger by mistake never reach stdout.
"""

from __future__ import annotations

import json
import logging
import re
import sys
import time
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from flask import Flask, Response, g, has_request_context, request

REQUEST_ID_HEADER = "X-Request-ID"
CORRELATION_HEADERS = ("X-Request-ID", "X-Correlation-ID")

# Client-supplied ids are echoed into logs and headers
_REQUEST_ID_PATTERN = re.compile(r"^[A-Za-z0-9._:-]{1,128}$")

EXTRA_KEYS = (
    "endpoint",
    "elapsed_ms",
    "method",
    "path",
    "status",
    "operation",
    "user_id",
    "count",
)

access_log = logging.getLogger("authsvc.access")


class JSONFormatter(logging.Formatter):
    """Render log records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "time": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(
                timespec="milliseconds"
            ),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", None),
        }
        for key in EXTRA_KEYS:
            if hasattr(record, key):
                payload[key] = getattr(record, key)
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class RequestIdFilter(logging.Filter):
    """Ensure a ``request_id`` attribute is always present on log records.

    An id passed explicitly through ``extra={"request_id": ...}`` wins over
    the one derived from the active request.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "request_id", None) is None:
            record.request_id = ensure_request_id() if has_request_context() else None
        return True


def _incoming_request_id() -> str | None:
    for header in CORRELATION_HEADERS:
        value = (request.headers.get(header) or "").strip()
        if value and _REQUEST_ID_PATTERN.match(value):
            return value
    return None


def ensure_request_id() -> str:
    """Return the current request identifier, generating one when necessary.

    Inside a request the id is taken from the first well-formed correlation
    header, or generated, and then cached on :data:`flask.g`. Outside a
    request every call returns a fresh id.
    """
    if not has_request_context():
        return str(uuid4())
    request_id = getattr(g, "request_id", None)
    if request_id is None:
        request_id = _incoming_request_id() or str(uuid4())
        g.request_id = request_id
    return request_id


def configure_logging(level: str | int = "INFO") -> None:
    """Route the root logger to stdout as JSON at ``level``."""
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    handler.addFilter(RequestIdFilter())
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        level = resolved if isinstance(resolved, int) else logging.INFO
    root.setLevel(level)
    # The access log below replaces werkzeug's own request lines
    logging.getLogger("werkzeug").setLevel(max(level, logging.WARNING))


def init_app(app: Flask) -> None:
    """Seed request ids, echo them on responses and emit one access line per request."""
    app.logger.addFilter(RequestIdFilter())

    @app.before_request
    def _start_request() -> None:
        ensure_request_id()
        g.request_started = time.perf_counter()

    @app.after_request
    def _finish_request(response: Response) -> Response:
        response.headers.setdefault(REQUEST_ID_HEADER, ensure_request_id())
        started = getattr(g, "request_started", None)
        elapsed_ms = round((time.perf_counter() - started) * 1000, 2) if started else None
        access_log.info(
            "request.completed",
            extra={
                "method": request.method,
                "path": request.path,
                "status": response.status_code,
                "elapsed_ms": elapsed_ms,
            },
        )
        return response


__all__ = ["JSONFormatter", "RequestIdFilter", "configure_logging", "ensure_request_id", "init_app"]
