"""Directed follow edges between users."""

from __future__ import annotations

from sqlalchemy import CheckConstraint, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from socialconnect.core.extensions import db

from .base import CreatedAtMixin, PKMixin, ReprMixin
from .user import User


class Follow(PKMixin, ReprMixin, CreatedAtMixin, db.Model):
    """
    ``follower`` follows ``following``.

    The pair is unique and a user can never follow themselves; both rules are
    enforced by the database as well as by the service layer.
    """

    __tablename__ = "follows"

    follower_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    following_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )

    __table_args__ = (
        UniqueConstraint(
            "follower_id", "following_id", name="uq_follows_follower_id_following_id"
        ),
        CheckConstraint("follower_id <> following_id", name="no_self_follow"),
        Index("ix_follows_following_id", "following_id"),
    )

    follower: Mapped[User] = relationship(User, foreign_keys=[follower_id])
    following: Mapped[User] = relationship(User, foreign_keys=[following_id])
