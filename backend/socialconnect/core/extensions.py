"""Extension singletons shared by the app factory, models and adapters."""

from __future__ import annotations

import redis  # type: ignore[import-untyped]
from flask import Flask, current_app
from flask_jwt_extended import JWTManager
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from redis.exceptions import RedisError  # type: ignore[import-untyped]
from sqlalchemy import MetaData

REDIS_EXTENSION_KEY = "redis_client"

# Deterministic constraint names keep Alembic autogenerate diffs stable.
metadata = MetaData(
    naming_convention={
        "ix": "ix_%(table_name)s_%(column_0_name)s",
        "uq": "uq_%(table_name)s_%(column_0_name)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
        "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
        "pk": "pk_%(table_name)s",
    }
)

db: SQLAlchemy = SQLAlchemy(metadata=metadata, session_options={"autoflush": False})
migrate = Migrate(render_as_batch=True)
jwt = JWTManager()


def _connect_redis(url: str) -> redis.Redis:
    client = redis.Redis.from_url(url)
    try:
        client.ping()
    except RedisError as exc:
        raise RuntimeError(f"Failed to connect to Redis at {url!r}") from exc
    return client


def init_app(app: Flask) -> None:
    """Bind the database, migrations and JWT; connect Redis when it is needed.

    Parameters
    ----------
    app: flask.Flask
        Application being built. Importing :mod:`socialconnect.models` here
        registers every table on :data:`metadata` before Flask-Migrate runs.

    Raises
    ------
    RuntimeError
        ``REFRESH_TOKEN_BACKEND`` is ``"redis"`` but ``REDIS_URL`` is unset or
        the server does not answer ``PING``.
    """
    db.init_app(app)

    from socialconnect import models as _models  # noqa: F401

    migrate.init_app(app, db)
    jwt.init_app(app)

    app.extensions.pop(REDIS_EXTENSION_KEY, None)
    if str(app.config.get("REFRESH_TOKEN_BACKEND", "")).lower() != "redis":
        return
    redis_url = app.config.get("REDIS_URL")
    if not redis_url:
        raise RuntimeError("REFRESH_TOKEN_BACKEND=redis requires REDIS_URL to be set.")
    app.extensions[REDIS_EXTENSION_KEY] = _connect_redis(redis_url)


def get_redis() -> redis.Redis:
    """Return the Redis client bound to the current app."""
    client = current_app.extensions.get(REDIS_EXTENSION_KEY)
    if client is None:
        raise RuntimeError("Redis is not configured for this application.")
    return client
