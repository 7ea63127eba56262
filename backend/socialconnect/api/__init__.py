"""HTTP surface of SocialConnect, mounted as ``<API_BASE_PREFIX>/<version>/...``."""

from __future__ import annotations

from collections.abc import Iterable

from flask import Blueprint, Flask


def join_prefix(*segments: str) -> str:
    """Join URL segments into ``/a/b`` form, skipping empty ones."""

    parts = [segment.strip("/") for segment in segments if segment.strip("/")]
    return "/" + "/".join(parts)


def mount_version(app: Flask, base: str, entries: Iterable[tuple[Blueprint, str]]) -> None:
    """Register ``(blueprint, relative_prefix)`` pairs under ``base``.

    An empty relative prefix mounts the blueprint at the version root
    (``/api/v1/health``).
    """

    for blueprint, relative in entries:
        app.register_blueprint(blueprint, url_prefix=join_prefix(base, relative))


def init_app(app: Flask) -> None:
    from socialconnect.api.v1 import API_VERSION, REGISTRY

    base = join_prefix(app.config.get("API_BASE_PREFIX", "/api"), API_VERSION)
    mount_version(app, base, REGISTRY)


__all__ = ["init_app", "join_prefix", "mount_version"]
