"""RFC 7807 error responses for the API.

Every failure leaves the API as ``application/problem+json``::

    {"type": "about:blank", "title": "Not Found", "status": 404,
     "detail": "User not found", "error": "User not found",
     "code": "not_found", "instance": "/api/v1/users/x", "request_id": "..."}

``error`` duplicates ``detail`` and is what clients display. 5xx bodies
never carry internal messages; the traceback goes to the log instead.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any

from flask import Flask, Response, has_request_context, jsonify, request
from marshmallow import ValidationError as MarshmallowValidationError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from werkzeug.exceptions import HTTPException

from socialconnect.core.logger import ensure_request_id
from socialconnect.services._shared.errors import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ServiceError,
    StoreError,
    ValidationError,
)

log = logging.getLogger(__name__)

INTERNAL_MESSAGE = "Internal server error"

# Most specific first; ``isinstance`` picks the first match.
SERVICE_ERROR_STATUS: tuple[tuple[type[ServiceError], int, str], ...] = (
    (ValidationError, HTTPStatus.BAD_REQUEST, "validation_error"),
    (AuthenticationError, HTTPStatus.UNAUTHORIZED, "unauthorized"),
    (AuthorizationError, HTTPStatus.FORBIDDEN, "forbidden"),
    (NotFoundError, HTTPStatus.NOT_FOUND, "not_found"),
    (ConflictError, HTTPStatus.CONFLICT, "conflict"),
    (StoreError, HTTPStatus.INTERNAL_SERVER_ERROR, "internal_server_error"),
)

HTTP_STATUS_CODES: dict[int, str] = {
    400: "bad_request",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
    409: "conflict",
    413: "payload_too_large",
    415: "unsupported_media_type",
    429: "too_many_requests",
    500: "internal_server_error",
}


def problem(
    status: int, code: str, message: str, details: dict[str, Any] | None = None
) -> dict[str, Any]:
    """Problem Details body for the current request."""
    body: dict[str, Any] = {
        "type": "about:blank",
        "title": HTTPStatus(status).phrase,
        "status": int(status),
        "detail": message,
        "error": message,
        "code": code,
        "instance": request.path if has_request_context() else None,
        "request_id": ensure_request_id(),
    }
    if details:
        body["details"] = details
    return body


def problem_response(
    status: int,
    code: str,
    message: str,
    *,
    details: dict[str, Any] | None = None,
    source: str = "APIError",
    exc: BaseException | None = None,
) -> tuple[Response, int]:
    """
    Log the failure and return the ``(response, status)`` pair.

    4xx are logged as warnings without traceback; 5xx as errors with
    ``exc`` attached when given.
    """
    body = problem(status, code, message, details)
    if status >= 500:
        log.error(
            "%s: code=%s status=%s request_id=%s",
            source,
            code,
            status,
            body["request_id"],
            exc_info=exc,
        )
    else:
        log.warning(
            "%s: code=%s status=%s msg=%s request_id=%s",
            source,
            code,
            status,
            message,
            body["request_id"],
        )
    resp = jsonify(body)
    resp.mimetype = "application/problem+json"
    return resp, int(status)


class APIError(Exception):
    """
    HTTP-layer error raised by request plumbing (auth gate, body parsing).

    :param message: Client-facing message.
    :param status_code: HTTP status, ``400`` by default.
    :param code: Stable machine-readable identifier.
    :param details: Optional structured payload.
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


class Unauthorized(APIError):
    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message, status_code=HTTPStatus.UNAUTHORIZED, code="unauthorized")


class Forbidden(APIError):
    def __init__(self, message: str = "Forbidden") -> None:
        super().__init__(message, status_code=HTTPStatus.FORBIDDEN, code="forbidden")


def service_status(err: ServiceError) -> tuple[int, str]:
    for exc_type, status, code in SERVICE_ERROR_STATUS:
        if isinstance(err, exc_type):
            return int(status), code
    return int(HTTPStatus.INTERNAL_SERVER_ERROR), "internal_server_error"


def first_message(messages: Any) -> str:
    """Summarise marshmallow's nested messages as ``"field: message"``."""
    if isinstance(messages, dict):
        for key, value in messages.items():
            inner = first_message(value)
            return inner if key == "_schema" else f"{key}: {inner}"
    if isinstance(messages, list) and messages:
        return first_message(messages[0])
    if isinstance(messages, str):
        return messages
    return "Validation failed"


def init_app(app: Flask) -> None:
    """Register the problem+json handlers, most specific exception first."""

    @app.errorhandler(APIError)
    def handle_api_error(err: APIError):
        return problem_response(
            err.status_code, err.code, err.message, details=err.details or None, exc=err
        )

    @app.errorhandler(ServiceError)
    def handle_service_error(err: ServiceError):
        status, code = service_status(err)
        if status >= 500:
            return problem_response(
                status, code, INTERNAL_MESSAGE, source="ServiceError", exc=err
            )
        field_name = getattr(err, "field_name", None)
        return problem_response(
            status,
            code,
            err.message,
            details={"field": field_name} if field_name else None,
            source="ServiceError",
        )

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        status = int(err.code or HTTPStatus.INTERNAL_SERVER_ERROR)
        code = HTTP_STATUS_CODES.get(status, "error")
        if status == HTTPStatus.NOT_FOUND:
            message = f"Route '{request.path}' not found"
        else:
            message = (err.description or code.replace("_", " ").capitalize()).strip()
        return problem_response(status, code, message, source="HTTPException")

    @app.errorhandler(MarshmallowValidationError)
    def handle_validation_error(err: MarshmallowValidationError):
        return problem_response(
            HTTPStatus.BAD_REQUEST,
            "validation_error",
            first_message(err.messages),
            details={"errors": err.messages},
            source="ValidationError",
        )

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(err: IntegrityError):
        # A race past the service-level uniqueness checks; raw DB text stays in the log.
        log.info("IntegrityError detail: %s", err.orig)
        return problem_response(
            HTTPStatus.CONFLICT, "conflict", "Resource conflict", source="IntegrityError"
        )

    @app.errorhandler(SQLAlchemyError)
    def handle_database_error(err: SQLAlchemyError):
        return problem_response(
            HTTPStatus.INTERNAL_SERVER_ERROR,
            "internal_server_error",
            INTERNAL_MESSAGE,
            source="SQLAlchemyError",
            exc=err,
        )

    @app.errorhandler(Exception)
    def handle_unexpected_error(err: Exception):
        return problem_response(
            HTTPStatus.INTERNAL_SERVER_ERROR,
            "internal_server_error",
            INTERNAL_MESSAGE,
            source="Unhandled exception",
            exc=err,
        )
