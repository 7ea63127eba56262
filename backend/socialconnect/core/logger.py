"""JSON logging and request correlation.

Every record carries the ``request_id`` of the request it was emitted in;
the same identifier is echoed back in ``X-Request-ID``. One access line is
written per request on the ``socialconnect.access`` logger.
"""

from __future__ import annotations

import json
import logging
import sys
import time
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from flask import Flask, Response, g, has_request_context, request

REQUEST_ID_HEADER = "X-Request-ID"
CORRELATION_HEADERS = ("X-Request-ID", "X-Correlation-ID")
ACCESS_LOGGER = "socialconnect.access"

# ``extra=`` keys copied into the JSON payload when present on a record.
EXTRA_KEYS = (
    "method",
    "path",
    "status",
    "endpoint",
    "elapsed_ms",
    "user_id",
    "target_id",
    "post_id",
    "count",
    "revoked",
    "fields",
)


class JSONFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "time": datetime.fromtimestamp(record.created, timezone.utc).isoformat(
                timespec="milliseconds"
            ),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", None),
        }
        payload.update(
            {key: getattr(record, key) for key in EXTRA_KEYS if hasattr(record, key)}
        )
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class RequestIdFilter(logging.Filter):
    """Stamp ``request_id`` on records (``None`` outside a request)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = ensure_request_id() if has_request_context() else None
        return True


def _incoming_request_id() -> str | None:
    for header in CORRELATION_HEADERS:
        value = request.headers.get(header)
        if value:
            return value
    return None


def ensure_request_id() -> str:
    """
    Return the identifier of the current request.

    The first call per request adopts ``X-Request-ID`` or ``X-Correlation-ID``
    when the client sent one and otherwise mints a UUID4. Outside a request a
    fresh UUID4 is returned every time.
    """

    if not has_request_context():
        return str(uuid4())
    request_id = g.get("request_id")
    if request_id is None:
        request_id = _incoming_request_id() or str(uuid4())
        g.request_id = request_id
    return request_id


def configure_logging(level: str | int = "INFO") -> None:
    """Send the root logger to stdout through :class:`JSONFormatter`."""

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


def init_app(app: Flask) -> None:
    """Install request-id seeding, the response header and the access line."""

    app.logger.addFilter(RequestIdFilter())
    access = logging.getLogger(ACCESS_LOGGER)

    @app.before_request
    def _start_request() -> None:
        # The app context may outlive a single request (CLI runners, tests).
        g.pop("request_id", None)
        g.request_started = time.perf_counter()
        ensure_request_id()

    @app.after_request
    def _finish_request(response: Response) -> Response:
        response.headers.setdefault(REQUEST_ID_HEADER, ensure_request_id())
        started = g.pop("request_started", None)
        if started is not None:
            access.info(
                "http.request",
                extra={
                    "method": request.method,
                    "path": request.path,
                    "status": response.status_code,
                    "endpoint": request.endpoint,
                    "elapsed_ms": round((time.perf_counter() - started) * 1000, 2),
                },
            )
        return response


__all__ = ["configure_logging", "init_app", "ensure_request_id", "ACCESS_LOGGER"]
