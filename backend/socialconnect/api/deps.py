"""Shared API helpers: the auth gate, request parsing and response helpers."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar, cast

from flask import Response, current_app, jsonify, request

from socialconnect.core.errors import Forbidden, Unauthorized
from socialconnect.core.logger import ensure_request_id
from socialconnect.schemas.common import PaginationQuerySchema
from socialconnect.services._shared.base import ServiceContext
from socialconnect.services._shared.dto import PaginationIn
from socialconnect.services.auth.dto import TokenClaims
from socialconnect.services.auth.tokens import TokenService

F = TypeVar("F", bound=Callable[..., Any])

BEARER_PREFIX = "Bearer "
UNAUTHORIZED_MESSAGE = "Unauthorized. Please log in."
FORBIDDEN_MESSAGE = "Forbidden. Admin access required."


# ------------------------------ Parsing ------------------------------------


def parse_pagination(default_limit: int = 20, max_limit: int = 100) -> PaginationIn:
    """Parse ``page``/``limit`` from ``request.args`` using Marshmallow."""

    schema = PaginationQuerySchema(default_limit=default_limit, max_limit=max_limit)
    data = schema.load(request.args)
    return PaginationIn(page=data["page"], limit=data["limit"])


def json_body() -> dict[str, Any]:
    """Return the JSON request body, or an empty mapping when absent or malformed."""

    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


# ------------------------------ Auth gate -----------------------------------


def token_service() -> TokenService:
    """Return the app-wide :class:`TokenService`, built once from config."""

    service = current_app.extensions.get("token_service")
    if service is None:
        service = TokenService.from_config(current_app.config)
        current_app.extensions["token_service"] = service
    return cast(TokenService, service)


def bearer_token() -> str | None:
    """Extract the token from ``Authorization: Bearer <token>``."""

    header = request.headers.get("Authorization", "")
    if not header.startswith(BEARER_PREFIX):
        return None
    token = header[len(BEARER_PREFIX) :].strip()
    return token or None


def authenticate() -> TokenClaims | None:
    """
    Non-throwing gate: verified access-token claims, or ``None``.

    Endpoints that serve anonymous and authenticated callers differently use
    this directly.
    """

    return token_service().verify_access(bearer_token())


def service_context(claims: TokenClaims | None) -> ServiceContext:
    """Request-scoped context handed to services."""

    return ServiceContext(
        actor_id=claims.user_id if claims else None,
        is_admin=bool(claims and claims.is_admin),
        request_id=ensure_request_id(),
    )


def require_auth(func: F) -> F:
    """Reject requests without a valid access token; pass ``claims=`` to the view."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        claims = authenticate()
        if claims is None:
            raise Unauthorized(UNAUTHORIZED_MESSAGE)
        return func(*args, claims=claims, **kwargs)

    return wrapper  # type: ignore[return-value]


def require_admin(func: F) -> F:
    """As :func:`require_auth`, plus 403 unless the token carries ``is_admin``."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        claims = authenticate()
        if claims is None:
            raise Unauthorized(UNAUTHORIZED_MESSAGE)
        if not claims.is_admin:
            raise Forbidden(FORBIDDEN_MESSAGE)
        return func(*args, claims=claims, **kwargs)

    return wrapper  # type: ignore[return-value]


# ------------------------------ Observability -------------------------------


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            request_endpoint = getattr(request, "endpoint", None)
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request_endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]
