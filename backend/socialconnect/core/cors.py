"""CORS policy for the JSON API."""

from __future__ import annotations

from flask import Flask
from flask_cors import CORS


def init_app(app: Flask) -> None:
    """Allow browser clients listed in ``CORS_ORIGINS`` to call the API.

    Parameters
    ----------
    app: flask.Flask
        Application whose ``CORS_ORIGINS``, ``CORS_MAX_AGE`` and
        ``API_BASE_PREFIX`` settings are consulted.

    Notes
    -----
    ``CORS_ORIGINS`` is a comma-separated list. Blank or ``"*"`` opens the API
    to any origin without credentials. The ``Authorization`` header is always
    allowed since every gated endpoint reads its bearer token.
    """
    raw_origins = app.config.get("CORS_ORIGINS", "")
    origins = [o.strip() for o in raw_origins.split(",") if o.strip()]
    wildcard = len(origins) == 0 or origins == ["*"]
    api_prefix = app.config.get("API_BASE_PREFIX", "/api").rstrip("/")

    CORS(
        app,
        resources={rf"{api_prefix}/*": {"origins": "*" if wildcard else origins}},
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
        expose_headers=["X-Request-ID"],
        supports_credentials=not wildcard,
        max_age=app.config.get("CORS_MAX_AGE", 600),
    )
