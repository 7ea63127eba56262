# socialconnect/infra/sqlalchemy/refresh_token_store.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime

from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session

from socialconnect.models.refresh_token import RefreshToken
from socialconnect.services._shared.ports import (
    RefreshTokenRecord,
    RefreshTokenStore,
    hash_token,
)


@dataclass(slots=True)
class SQLAlchemyRefreshTokenStore(RefreshTokenStore):
    """
    Relational refresh token store sharing the caller's session.

    Writes are flushed but never committed: the surrounding Unit of Work
    decides, so revocation lands atomically with e.g. a deactivation.

    :param session: Session bound to the active Unit of Work.
    """

    session: Session

    @staticmethod
    def _to_record(row: RefreshToken) -> RefreshTokenRecord:
        return RefreshTokenRecord(
            token_hash=row.token_hash,
            user_id=row.user_id,
            expires_at=row.expires_at,
            is_blacklisted=row.is_blacklisted,
        )

    def insert(self, token: str, user_id: int, expires_at: datetime) -> None:
        self.session.add(
            RefreshToken(token_hash=hash_token(token), user_id=user_id, expires_at=expires_at)
        )
        self.session.flush()

    def find_active(self, token: str) -> RefreshTokenRecord | None:
        stmt = select(RefreshToken).where(
            RefreshToken.token_hash == hash_token(token),
            RefreshToken.is_blacklisted.is_(False),
            RefreshToken.expires_at > datetime.now(UTC),
        )
        row = self.session.execute(stmt).scalars().first()
        return self._to_record(row) if row is not None else None

    def blacklist_one(self, token: str) -> bool:
        stmt = (
            update(RefreshToken)
            .where(RefreshToken.token_hash == hash_token(token))
            .values(is_blacklisted=True)
            .execution_options(synchronize_session=False)
        )
        return bool(self.session.execute(stmt).rowcount)

    def blacklist_all(self, user_id: int) -> int:
        stmt = (
            update(RefreshToken)
            .where(RefreshToken.user_id == user_id, RefreshToken.is_blacklisted.is_(False))
            .values(is_blacklisted=True)
            .execution_options(synchronize_session=False)
        )
        return int(self.session.execute(stmt).rowcount or 0)

    def purge_expired(self, now: datetime | None = None) -> int:
        stmt = (
            delete(RefreshToken)
            .where(RefreshToken.expires_at <= (now or datetime.now(UTC)))
            .execution_options(synchronize_session=False)
        )
        return int(self.session.execute(stmt).rowcount or 0)
