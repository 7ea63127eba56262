"""Posts and the engagement rows hanging off them (likes, comments)."""

from __future__ import annotations

from sqlalchemy import (
    CheckConstraint,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from socialconnect.core.extensions import db

from .base import CreatedAtMixin, PKMixin, ReprMixin, SoftDeleteMixin, TimestampMixin
from .user import User

# --- Domain Enums ---
CATEGORY_CHOICES = ("general", "announcement", "question")
PostCategory = Enum(*CATEGORY_CHOICES, name="post_category")

POST_MAX_LENGTH = 280
COMMENT_MAX_LENGTH = 500


class Post(PKMixin, ReprMixin, TimestampMixin, SoftDeleteMixin, db.Model):
    """
    Short post authored by a user.

    Either ``content`` or ``image_url`` must be present. ``like_count`` and
    ``comment_count`` are denormalized counters kept in step by the service
    layer. Moderation and author deletion only flip ``is_active``.
    """

    __tablename__ = "posts"

    author_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    content: Mapped[str | None] = mapped_column(String(POST_MAX_LENGTH), nullable=True)
    image_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    category: Mapped[str] = mapped_column(
        PostCategory, nullable=False, default="general", server_default="general"
    )
    like_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )
    comment_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )

    __table_args__ = (
        CheckConstraint("like_count >= 0", name="like_count_non_negative"),
        CheckConstraint("comment_count >= 0", name="comment_count_non_negative"),
        Index("ix_posts_author_id", "author_id"),
        Index("ix_posts_created_at", "created_at"),
    )

    author: Mapped[User] = relationship(User, lazy="joined")

    @validates("content")
    def _validate_content(self, key: str, value: str | None) -> str | None:
        if value is not None and len(value) > POST_MAX_LENGTH:
            raise ValueError(f"Content must be at most {POST_MAX_LENGTH} characters.")
        return value

    @validates("category")
    def _validate_category(self, key: str, value: str) -> str:
        if value not in CATEGORY_CHOICES:
            raise ValueError(f"Invalid category: {value!r}")
        return value


class Like(PKMixin, ReprMixin, CreatedAtMixin, db.Model):
    """A user's like on a post; one per ``(user, post)`` pair."""

    __tablename__ = "likes"

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    post_id: Mapped[int] = mapped_column(
        ForeignKey("posts.id", ondelete="CASCADE"), nullable=False
    )

    __table_args__ = (
        UniqueConstraint("user_id", "post_id", name="uq_likes_user_id_post_id"),
        Index("ix_likes_post_id", "post_id"),
    )


class Comment(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """Comment left on a post. Immutable once written."""

    __tablename__ = "comments"

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    post_id: Mapped[int] = mapped_column(
        ForeignKey("posts.id", ondelete="CASCADE"), nullable=False
    )
    content: Mapped[str] = mapped_column(String(COMMENT_MAX_LENGTH), nullable=False)

    __table_args__ = (
        CheckConstraint("length(content) > 0", name="content_not_empty"),
        Index("ix_comments_post_id", "post_id"),
    )

    author: Mapped[User] = relationship(User, lazy="joined")

    @validates("content")
    def _validate_content(self, key: str, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("Comment content is required.")
        if len(value) > COMMENT_MAX_LENGTH:
            raise ValueError(f"Comment must be at most {COMMENT_MAX_LENGTH} characters.")
        return value
