"""Environment-driven settings for SocialConnect.

One class per deployment flavour; :func:`get_config` picks it from
``APP_ENV``. A ``.env`` file next to the process is loaded first when present.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from datetime import timedelta
from typing import Final

from dotenv import load_dotenv

ENV_VAR: Final[str] = "APP_ENV"  # 'development' | 'testing' | 'production'
TRUTHY: Final[frozenset[str]] = frozenset({"1", "true", "yes", "y", "on"})
PLACEHOLDER_SECRETS: Final[frozenset[str]] = frozenset({"CHANGE_ME", "CHANGE_ME_JWT"})

load_dotenv()


def env_bool(name: str, default: bool = False) -> bool:
    """``True`` when the variable is one of ``1/true/yes/y/on`` (any case)."""
    val = os.getenv(name)
    if val is None:
        return default
    return val.strip().lower() in TRUTHY


def env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return int(raw)


def env_seconds(name: str, default: int) -> timedelta:
    """Read a positive number of seconds as a :class:`~datetime.timedelta`.

    Raises
    ------
    ValueError
        The variable is set to zero or a negative number.
    """
    seconds = env_int(name, default)
    if seconds <= 0:
        raise ValueError(f"{name} must be a positive number of seconds")
    return timedelta(seconds=seconds)


class BaseConfig:
    """Settings shared by every environment.

    Attributes
    ----------
    JWT_ACCESS_TOKEN_EXPIRES, JWT_REFRESH_TOKEN_EXPIRES: datetime.timedelta
        Token lifetimes; 15 minutes and 7 days unless overridden in seconds.
    REFRESH_TOKEN_BACKEND: str
        ``"sqlalchemy"`` keeps refresh token records in the database,
        ``"redis"`` keeps them under ``REDIS_URL``.
    ADMIN_SECRET_KEY: str | None
        Shared secret for promoting an account to administrator over HTTP.
        Provisioning is refused while it is unset.
    PASSWORD_RESET_EXPOSE_TOKEN: bool
        Echo reset tokens in the HTTP response. There is no mail delivery, so
        only development and tests turn this on.
    USE_PROXYFIX, PROXYFIX_HOPS:
        Trust ``X-Forwarded-*`` from this many reverse proxies.
    CORS_ORIGINS: str
        Comma-separated allow-list for browser clients.
    """

    API_BASE_PREFIX = os.getenv("API_BASE_PREFIX", "/api")
    APP_VERSION = os.getenv("APP_VERSION", "dev")

    # Secrets / security
    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "CHANGE_ME_JWT")
    JWT_ACCESS_TOKEN_EXPIRES = env_seconds("JWT_ACCESS_TOKEN_EXPIRES", 15 * 60)
    JWT_REFRESH_TOKEN_EXPIRES = env_seconds("JWT_REFRESH_TOKEN_EXPIRES", 7 * 24 * 3600)
    ADMIN_SECRET_KEY = os.getenv("ADMIN_SECRET_KEY")
    PASSWORD_HASH_METHOD = os.getenv("PASSWORD_HASH_METHOD", "scrypt")
    PASSWORD_RESET_EXPOSE_TOKEN = False

    # Refresh token records
    REFRESH_TOKEN_BACKEND = os.getenv("REFRESH_TOKEN_BACKEND", "sqlalchemy")
    REDIS_URL = os.getenv("REDIS_URL")

    # Database
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./socialconnect.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)

    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:3000")

    USE_PROXYFIX = env_bool("USE_PROXYFIX", True)
    PROXYFIX_HOPS = env_int("PROXYFIX_HOPS", 1)

    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    DEBUG = env_bool("FLASK_DEBUG", True)
    CORS_MAX_AGE = 600  # 10 minutes
    PASSWORD_RESET_EXPOSE_TOKEN = env_bool("PASSWORD_RESET_EXPOSE_TOKEN", True)


class TestingConfig(BaseConfig):
    """In-memory SQLite (or ``TEST_DATABASE_URL``) with fixed secrets.

    ``PROPAGATE_EXCEPTIONS`` stays off so error handlers shape responses
    exactly as in production. The cheap hash method keeps the suite fast.
    """

    TESTING = True
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    SQLALCHEMY_ECHO = False
    JWT_SECRET_KEY = "test-jwt-secret-key-with-enough-length"
    ADMIN_SECRET_KEY = "test-admin-secret"
    PASSWORD_HASH_METHOD = "pbkdf2:sha256:1000"
    REFRESH_TOKEN_BACKEND = "sqlalchemy"
    REDIS_URL = None
    USE_PROXYFIX = False
    PASSWORD_RESET_EXPOSE_TOKEN = True


class ProductionConfig(BaseConfig):
    """Production defaults. Placeholder secrets are rejected at startup."""

    SQLALCHEMY_ECHO = False

    @classmethod
    def validate(cls) -> None:
        """
        :raises RuntimeError: ``SECRET_KEY`` or ``JWT_SECRET_KEY`` still holds
            a placeholder value.
        """
        weak = [
            name
            for name in ("SECRET_KEY", "JWT_SECRET_KEY")
            if getattr(cls, name) in PLACEHOLDER_SECRETS
        ]
        if weak:
            raise RuntimeError(f"Refusing to start with placeholder secrets: {', '.join(weak)}")


CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Config class named by ``APP_ENV``; unknown or unset means development."""
    name = os.getenv(ENV_VAR, "development").strip().lower()
    return CONFIG_MAP.get(name, DevelopmentConfig)
