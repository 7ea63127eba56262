"""Persisted refresh token records."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from socialconnect.core.extensions import db

from .base import CreatedAtMixin, PKMixin, ReprMixin


class RefreshToken(PKMixin, ReprMixin, CreatedAtMixin, db.Model):
    """
    Server-side record of an issued refresh token.

    Only the SHA-256 digest of the token is stored. A row is usable while
    ``is_blacklisted`` is false and ``expires_at`` lies in the future; the
    flag is never cleared once set.
    """

    __tablename__ = "refresh_tokens"

    token_hash: Mapped[str] = mapped_column(String(64), nullable=False)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    is_blacklisted: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default="false"
    )

    __table_args__ = (
        UniqueConstraint("token_hash", name="uq_refresh_tokens_token_hash"),
        Index("ix_refresh_tokens_user_id", "user_id"),
    )

    user = relationship("User", lazy="joined")
