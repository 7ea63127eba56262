"""Python client for the SocialConnect API with explicit session handling."""

from __future__ import annotations

from .api import ApiClient, ApiError
from .session import ClientSession, InMemorySessionStore, SessionStore

__all__ = [
    "ApiClient",
    "ApiError",
    "ClientSession",
    "InMemorySessionStore",
    "SessionStore",
]
