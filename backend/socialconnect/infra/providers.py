"""Resolve infrastructure adapters from the active application config."""

from __future__ import annotations

from flask import current_app, has_app_context
from sqlalchemy.orm import Session

from socialconnect.infra.jwt.flask_jwt_token_provider import JWTTokenProvider
from socialconnect.infra.security.werkzeug_password_hasher import WerkzeugPasswordHasher
from socialconnect.services._shared.ports import (
    PasswordHasher,
    RefreshTokenStore,
    TokenProvider,
)

DEFAULT_HASH_METHOD = "scrypt"


def get_password_hasher() -> PasswordHasher:
    """Return a hasher honoring ``PASSWORD_HASH_METHOD`` when an app is active."""
    method = DEFAULT_HASH_METHOD
    if has_app_context():
        method = current_app.config.get("PASSWORD_HASH_METHOD", DEFAULT_HASH_METHOD)
    return WerkzeugPasswordHasher(method=method)


def get_token_provider() -> TokenProvider:
    return JWTTokenProvider()


def get_refresh_token_store(session: Session) -> RefreshTokenStore:
    """
    Build the refresh token store selected by ``REFRESH_TOKEN_BACKEND``.

    :param session: Session of the calling Unit of Work (relational backend only).
    :raises RuntimeError: On an unknown backend name.
    """
    backend = str(current_app.config.get("REFRESH_TOKEN_BACKEND", "sqlalchemy")).lower()
    if backend == "sqlalchemy":
        from socialconnect.infra.sqlalchemy.refresh_token_store import (
            SQLAlchemyRefreshTokenStore,
        )

        return SQLAlchemyRefreshTokenStore(session=session)
    if backend == "redis":
        from socialconnect.core.extensions import get_redis
        from socialconnect.infra.redis.redis_refresh_token_store import (
            RedisRefreshTokenStore,
        )

        return RedisRefreshTokenStore(r=get_redis())
    raise RuntimeError(f"Unknown REFRESH_TOKEN_BACKEND: {backend!r}")
