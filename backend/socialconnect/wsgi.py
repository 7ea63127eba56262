"""WSGI entry point used by gunicorn (``socialconnect.wsgi:app``)."""

from __future__ import annotations

from socialconnect import create_app

app = create_app()
