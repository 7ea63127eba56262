"""Reverse-proxy awareness for the WSGI pipeline."""

from __future__ import annotations

from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix


def init_app(app: Flask) -> None:
    """Wrap the app in :class:`ProxyFix` when ``USE_PROXYFIX`` is set.

    ``PROXYFIX_HOPS`` (default ``1``) is the number of trusted proxies in
    front of gunicorn; client addresses in logs come from ``X-Forwarded-For``
    only through that many hops.
    """
    if not app.config.get("USE_PROXYFIX", True):
        return
    hops = int(app.config.get("PROXYFIX_HOPS", 1))
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=hops, x_proto=hops, x_host=hops, x_prefix=hops)
