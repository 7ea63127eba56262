"""Liveness endpoint: database reachability and the refresh token backend."""

from __future__ import annotations

from flask import Blueprint, current_app
from redis.exceptions import RedisError  # type: ignore[import-untyped]
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from socialconnect.api.deps import json_response, timing
from socialconnect.core.extensions import db, get_redis

bp = Blueprint("health", __name__)

OK = "ok"
FAIL = "fail"


def _database_status() -> str:
    try:
        db.session.execute(text("SELECT 1"))
    except SQLAlchemyError:
        current_app.logger.exception("healthcheck.db_error")
        db.session.rollback()
        return FAIL
    return OK


def _redis_status() -> str:
    try:
        get_redis().ping()
    except (RedisError, RuntimeError):
        current_app.logger.exception("healthcheck.redis_error")
        return FAIL
    return OK


@bp.get("/health")
@timing
def healthcheck():
    """
    ``{"status", "db", "refresh_tokens", "version"}``.

    ``status`` is ``"degraded"`` when any dependency fails; the HTTP status
    is 200 either way.
    """
    backend = str(current_app.config.get("REFRESH_TOKEN_BACKEND", "sqlalchemy")).lower()
    db_status = _database_status()
    # Relational refresh tokens live in the same database.
    tokens_status = _redis_status() if backend == "redis" else db_status
    return json_response(
        {
            "status": OK if db_status == tokens_status == OK else "degraded",
            "db": db_status,
            "refresh_tokens": {"backend": backend, "status": tokens_status},
            "version": current_app.config.get("APP_VERSION", "dev"),
        }
    )
