"""Notification rows produced by social actions."""

from __future__ import annotations

from sqlalchemy import Boolean, Enum, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from socialconnect.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin
from .user import User

NOTIFICATION_TYPES = ("like", "comment", "follow", "mention")
NotificationType = Enum(*NOTIFICATION_TYPES, name="notification_type")


class Notification(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Inbox entry for ``user_id``.

    ``related_user_id`` is the actor; ``related_post_id`` is set for like and
    comment notifications. Delivery to connected clients is out of process.
    """

    __tablename__ = "notifications"

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    type: Mapped[str] = mapped_column(NotificationType, nullable=False)
    content: Mapped[str] = mapped_column(String(255), nullable=False)
    related_user_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    related_post_id: Mapped[int | None] = mapped_column(
        ForeignKey("posts.id", ondelete="SET NULL"), nullable=True
    )
    is_read: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default="false"
    )

    __table_args__ = (Index("ix_notifications_user_id_is_read", "user_id", "is_read"),)

    related_user: Mapped[User | None] = relationship(User, foreign_keys=[related_user_id])
