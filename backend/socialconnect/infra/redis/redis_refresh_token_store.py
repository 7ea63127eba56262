# socialconnect/infra/redis/redis_refresh_token_store.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import cast

import redis  # type: ignore[import-untyped]

from socialconnect.services._shared.ports import (
    RefreshTokenRecord,
    RefreshTokenStore,
    hash_token,
)


@dataclass(slots=True)
class RedisRefreshTokenStore(RefreshTokenStore):
    """
    Redis-backed refresh token store.

    Each token lives in a hash ``rt:<sha256>`` that expires with the token; a
    per-user set ``rt:u:<user_id>`` indexes the digests for bulk revocation.

    :param r: A Redis client (already connected).
    """

    r: redis.Redis

    # -------------------- helpers --------------------

    @staticmethod
    def _k(token_hash: str) -> str:
        return f"rt:{token_hash}"

    @staticmethod
    def _ku(user_id: int) -> str:
        return f"rt:u:{user_id}"

    @staticmethod
    def _to_ts(dt: datetime) -> int:
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=UTC)
        return int(dt.timestamp())

    def _load(self, token_hash: str) -> RefreshTokenRecord | None:
        h = self.r.hgetall(self._k(token_hash))
        if not h:
            return None

        def _b(key: bytes, default: str = "") -> str:
            value = h.get(key)
            return value.decode() if value is not None else default

        return RefreshTokenRecord(
            token_hash=token_hash,
            user_id=int(_b(b"user_id", "0")),
            expires_at=datetime.fromtimestamp(int(_b(b"expires_at", "0")), tz=UTC),
            is_blacklisted=_b(b"blacklisted", "0") == "1",
        )

    # -------------------- API ------------------------

    def insert(self, token: str, user_id: int, expires_at: datetime) -> None:
        token_hash = hash_token(token)
        key = self._k(token_hash)
        ttl = max(1, self._to_ts(expires_at) - self._to_ts(datetime.now(UTC)))

        pipe = self.r.pipeline(transaction=True)
        pipe.hset(
            key,
            mapping={
                "user_id": str(user_id),
                "expires_at": str(self._to_ts(expires_at)),
                "blacklisted": "0",
            },
        )
        pipe.expire(key, ttl)
        pipe.sadd(self._ku(user_id), token_hash)
        pipe.execute()

    def find_active(self, token: str) -> RefreshTokenRecord | None:
        record = self._load(hash_token(token))
        if record is None or not record.is_usable():
            return None
        return record

    def blacklist_one(self, token: str) -> bool:
        key = self._k(hash_token(token))
        if not self.r.exists(key):
            return False
        self.r.hset(key, "blacklisted", "1")
        return True

    def blacklist_all(self, user_id: int) -> int:
        key_u = self._ku(user_id)
        members = [
            m.decode() if isinstance(m, bytes | bytearray) else str(m)
            for m in self.r.smembers(key_u)
        ]
        changed = 0
        stale: list[str] = []
        for token_hash in members:
            key = self._k(token_hash)
            current = self.r.hget(key, "blacklisted")
            if current is None:
                # Hash expired; drop it from the index.
                stale.append(token_hash)
                continue
            if current != b"1":
                self.r.hset(key, "blacklisted", "1")
                changed += 1
        if stale:
            self.r.srem(key_u, *stale)
        return changed

    def purge_expired(self, now: datetime | None = None) -> int:
        # Redis expires hashes on its own; only index entries need sweeping.
        removed = 0
        for key_u in self.r.scan_iter(match="rt:u:*"):
            members = cast(set[bytes], self.r.smembers(key_u))
            stale = [m for m in members if not self.r.exists(self._k(m.decode()))]
            if stale:
                removed += int(self.r.srem(key_u, *stale))
        return removed
