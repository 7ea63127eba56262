"""Application factory for the SocialConnect API."""

from __future__ import annotations

import logging

from flask import Flask

from socialconnect import cli
from socialconnect.api import init_app as init_api
from socialconnect.core import cors, errors, extensions, proxy
from socialconnect.core.config import BaseConfig, get_config
from socialconnect.core.logger import configure_logging, init_app as init_logging

log = logging.getLogger(__name__)

REFRESH_TOKEN_BACKENDS = frozenset({"sqlalchemy", "redis"})

# Order matters: proxy headers before request logging, error handlers after
# the blueprints they cover.
INITIALIZERS = (
    proxy.init_app,
    extensions.init_app,
    init_logging,
    cors.init_app,
    init_api,
    errors.init_app,
    cli.init_app,
)


def _load_config(app: Flask, config: str | type[BaseConfig] | object | None, pyfile: str) -> None:
    config_obj = get_config() if config is None else config
    if isinstance(config_obj, type) and hasattr(config_obj, "validate"):
        config_obj.validate()
    app.config.from_object(config_obj)
    if pyfile:
        app.config.from_pyfile(pyfile, silent=True)

    backend = str(app.config.get("REFRESH_TOKEN_BACKEND", "sqlalchemy")).lower()
    if backend not in REFRESH_TOKEN_BACKENDS:
        raise RuntimeError(
            f"Unknown REFRESH_TOKEN_BACKEND {backend!r}; "
            f"expected one of {sorted(REFRESH_TOKEN_BACKENDS)}."
        )
    app.config["REFRESH_TOKEN_BACKEND"] = backend


def create_app(
    config: str | type[BaseConfig] | object | None = None,
    *,
    instance_relative_config: bool = True,
    instance_config_filename: str = "config.py",
) -> Flask:
    """
    Build the API application.

    :param config: Config class, object or import path. ``None`` picks one
        from ``APP_ENV``.
    :param instance_config_filename: Optional overrides read from the
        instance folder; ignored when missing.
    :raises RuntimeError: Production placeholder secrets or an unknown
        refresh token backend.
    """
    app = Flask(__name__, instance_relative_config=instance_relative_config)
    _load_config(app, config, instance_config_filename if instance_relative_config else "")

    configure_logging(app.config.get("LOG_LEVEL", "INFO"))
    for initializer in INITIALIZERS:
        initializer(app)

    log.info(
        "app.ready",
        extra={
            "version": app.config.get("APP_VERSION", "dev"),
            "refresh_token_backend": app.config["REFRESH_TOKEN_BACKEND"],
        },
    )
    return app
