# socialconnect/services/posts/dto.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from socialconnect.models.post import Comment, Post
from socialconnect.services._shared.dto import PageMeta
from socialconnect.services.users.dto import UserSummaryOut

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class PostCreateIn:
    content: str | None = None
    image_url: str | None = None
    category: str = "general"


@dataclass(frozen=True, slots=True)
class PostUpdateIn:
    """Partial post update. Only keys present in ``fields`` are applied."""

    fields: dict[str, object] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class FeedFilterIn:
    """
    Feed filters.

    :param following: Only posts from authors the viewer follows.
    :param include_inactive: Include soft-deleted posts (admin console only).
    """

    category: str | None = None
    author_id: int | None = None
    following: bool = False
    include_inactive: bool = False


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class PostOut:
    """
    Post as returned to clients.

    :param is_liked: Whether the viewer liked it; ``None`` for anonymous viewers.
    """

    id: int
    author_id: int
    author: UserSummaryOut
    content: str | None
    image_url: str | None
    category: str
    like_count: int
    comment_count: int
    is_active: bool
    created_at: datetime | None
    updated_at: datetime | None
    is_liked: bool | None = None

    @classmethod
    def from_model(cls, post: Post, *, is_liked: bool | None = None) -> PostOut:
        return cls(
            id=post.id,
            author_id=post.author_id,
            author=UserSummaryOut.from_model(post.author),
            content=post.content,
            image_url=post.image_url,
            category=post.category,
            like_count=post.like_count,
            comment_count=post.comment_count,
            is_active=post.is_active,
            created_at=post.created_at,
            updated_at=post.updated_at,
            is_liked=is_liked,
        )


@dataclass(frozen=True, slots=True)
class PostListOut:
    items: list[PostOut]
    meta: PageMeta


@dataclass(frozen=True, slots=True)
class CommentOut:
    id: int
    post_id: int
    author: UserSummaryOut
    content: str
    created_at: datetime | None

    @classmethod
    def from_model(cls, comment: Comment) -> CommentOut:
        return cls(
            id=comment.id,
            post_id=comment.post_id,
            author=UserSummaryOut.from_model(comment.author),
            content=comment.content,
            created_at=comment.created_at,
        )


@dataclass(frozen=True, slots=True)
class CommentListOut:
    items: list[CommentOut]
    meta: PageMeta
