from __future__ import annotations

import hashlib
import threading
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from enum import Enum
from typing import Protocol


class TokenState(Enum):
    """Lifecycle of a stored refresh token. ``REVOKED`` is terminal."""

    ACTIVE = "active"
    REVOKED = "revoked"


def hash_token(token: str) -> str:
    """Return the SHA-256 hex digest under which a refresh token is stored."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def _as_utc(dt: datetime) -> datetime:
    # Naive values coming back from SQLite are UTC already.
    return dt if dt.tzinfo is not None else dt.replace(tzinfo=UTC)


@dataclass(frozen=True)
class RefreshTokenRecord:
    """
    Read-model for a persisted refresh token.

    :ivar token_hash: SHA-256 digest of the opaque token string.
    :ivar user_id: Owning user id.
    :ivar expires_at: Absolute expiration (UTC).
    :ivar is_blacklisted: Revocation flag; never reset once set.
    """

    token_hash: str
    user_id: int
    expires_at: datetime
    is_blacklisted: bool = False

    @property
    def state(self) -> TokenState:
        return TokenState.REVOKED if self.is_blacklisted else TokenState.ACTIVE

    def is_usable(self, now: datetime | None = None) -> bool:
        """Return ``True`` while the token is active and not yet expired."""
        now = now or datetime.now(UTC)
        return self.state is TokenState.ACTIVE and now < _as_utc(self.expires_at)


class RefreshTokenStore(Protocol):
    """
    Persisted record of issued refresh tokens.

    Blacklisting is monotone: no operation moves a record back to active.
    """

    def insert(self, token: str, user_id: int, expires_at: datetime) -> None:
        """Persist a freshly issued token. MUST run before the token is handed out."""

    def find_active(self, token: str) -> RefreshTokenRecord | None:
        """Return the record only if it is neither blacklisted nor expired."""

    def blacklist_one(self, token: str) -> bool:
        """Revoke a single token. :returns: ``True`` if a record existed."""

    def blacklist_all(self, user_id: int) -> int:
        """
        Revoke every token owned by ``user_id``.

        :returns: Number of records that transitioned to revoked.
        """

    def purge_expired(self, now: datetime | None = None) -> int:
        """Drop records past their expiry. :returns: Number of records removed."""


class InMemoryRefreshTokenStore(RefreshTokenStore):
    """
    Process-local refresh token store.

    .. note::
       Uses a threading lock so concurrent test requests see atomic updates.
    """

    def __init__(self) -> None:
        self._by_hash: dict[str, RefreshTokenRecord] = {}
        self._lock = threading.Lock()

    def insert(self, token: str, user_id: int, expires_at: datetime) -> None:
        with self._lock:
            key = hash_token(token)
            self._by_hash[key] = RefreshTokenRecord(
                token_hash=key, user_id=int(user_id), expires_at=_as_utc(expires_at)
            )

    def find_active(self, token: str) -> RefreshTokenRecord | None:
        record = self._by_hash.get(hash_token(token))
        if record is None or not record.is_usable():
            return None
        return record

    def blacklist_one(self, token: str) -> bool:
        with self._lock:
            key = hash_token(token)
            record = self._by_hash.get(key)
            if record is None:
                return False
            self._by_hash[key] = replace(record, is_blacklisted=True)
            return True

    def blacklist_all(self, user_id: int) -> int:
        with self._lock:
            changed = 0
            for key, record in list(self._by_hash.items()):
                if record.user_id == int(user_id) and not record.is_blacklisted:
                    self._by_hash[key] = replace(record, is_blacklisted=True)
                    changed += 1
            return changed

    def purge_expired(self, now: datetime | None = None) -> int:
        now = now or datetime.now(UTC)
        with self._lock:
            stale = [k for k, r in self._by_hash.items() if _as_utc(r.expires_at) <= now]
            for key in stale:
                del self._by_hash[key]
            return len(stale)

    def get(self, token: str) -> RefreshTokenRecord | None:
        """Return the raw record regardless of state (test inspection helper)."""
        return self._by_hash.get(hash_token(token))
