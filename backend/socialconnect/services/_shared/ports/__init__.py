"""
socialconnect.services._shared.ports
====================================

Collection of *ports* (hexagonal interfaces) that define the contracts for
credential hashing, token signing and refresh-token persistence.

Modules
-------
- :mod:`password_hasher`:
    Defines :class:`~.PasswordHasher`: one-way hashing and safe verification.

- :mod:`token_provider`:
    Defines :class:`~.TokenProvider`: abstraction for JWT creation and decoding,
    plus :class:`~.TokenDecodeError` raised on any untrusted token.

- :mod:`refresh_token_store`:
    Defines :class:`~.RefreshTokenStore`, :class:`~.RefreshTokenRecord` and
    :class:`~.TokenState`: the revocable record behind every refresh token.

Concrete adapters (werkzeug, Flask-JWT-Extended, SQLAlchemy, Redis) live
under ``socialconnect.infra``.
"""

from __future__ import annotations

from .password_hasher import PasswordHasher
from .refresh_token_store import (
    InMemoryRefreshTokenStore,
    RefreshTokenRecord,
    RefreshTokenStore,
    TokenState,
    hash_token,
)
from .token_provider import StubTokenProvider, TokenDecodeError, TokenProvider

__all__ = [
    "PasswordHasher",
    "TokenProvider",
    "TokenDecodeError",
    "RefreshTokenStore",
    "RefreshTokenRecord",
    "TokenState",
    "hash_token",
    "InMemoryRefreshTokenStore",
    "StubTokenProvider",
]
