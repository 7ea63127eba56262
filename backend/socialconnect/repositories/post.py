"""Repositories for posts and their likes and comments."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import Any, cast

from sqlalchemy import Select, and_, delete, exists, or_, select, update

from socialconnect.models.follow import Follow
from socialconnect.models.post import Comment, Like, Post
from socialconnect.models.user import VISIBILITY_FOLLOWERS_ONLY, VISIBILITY_PUBLIC, User
from socialconnect.repositories.base import BaseRepository, Page, Pagination


class PostRepository(BaseRepository[Post]):
    """Persistence-only repository for :class:`Post`."""

    model = Post

    def _sortable_fields(self):
        return {
            "created_at": Post.created_at,
            "like_count": Post.like_count,
            "comment_count": Post.comment_count,
        }

    def _updatable_fields(self):
        return {"content", "image_url", "category"}

    def _soft_delete(self, instance: Post) -> bool:
        instance.deactivate()
        return True

    def get_active(self, post_id: int) -> Post | None:
        stmt = select(Post).where(Post.id == post_id, Post.is_active.is_(True))
        return cast(Post | None, self.session.execute(stmt).scalars().first())

    def feed_stmt(
        self,
        *,
        category: str | None = None,
        author_id: int | None = None,
        author_ids: Iterable[int] | None = None,
        include_inactive: bool = False,
        visible_to: int | None = None,
        restrict_visibility: bool = False,
    ) -> Select[Any]:
        """
        Build the base feed query, newest first.

        :param author_ids: Restrict to these authors (the "following" filter).
        :param include_inactive: Also return soft-deleted posts (moderation).
        :param visible_to: Viewer whose visibility applies (``None`` is anonymous).
        :param restrict_visibility: Prefilter on author visibility so page
            totals only count posts ``visible_to`` may see.
        """
        stmt = select(Post)
        if not include_inactive:
            stmt = stmt.where(Post.is_active.is_(True))
        if category:
            stmt = stmt.where(Post.category == category)
        if author_id is not None:
            stmt = stmt.where(Post.author_id == author_id)
        if author_ids is not None:
            stmt = stmt.where(Post.author_id.in_(list(author_ids)))
        if restrict_visibility:
            stmt = stmt.join(User, User.id == Post.author_id).where(
                self._visible_clause(visible_to)
            )
        return stmt

    @staticmethod
    def _visible_clause(viewer_id: int | None) -> Any:
        """SQL form of the visibility rules; anonymous viewers only see public authors."""
        clauses: list[Any] = [User.profile_visibility == VISIBILITY_PUBLIC]
        if viewer_id is not None:
            follows = exists().where(
                Follow.follower_id == viewer_id, Follow.following_id == Post.author_id
            )
            clauses.append(Post.author_id == viewer_id)
            clauses.append(and_(User.profile_visibility == VISIBILITY_FOLLOWERS_ONLY, follows))
        return or_(*clauses)

    def list_feed(self, pagination: Pagination, **filters: Any) -> Page[Post]:
        return self.paginate_stmt(self.feed_stmt(**filters), pagination)

    def bump_counter(self, post_id: int, column: str, delta: int) -> None:
        """Atomically add ``delta`` to ``like_count`` or ``comment_count``."""
        if column not in ("like_count", "comment_count"):
            raise ValueError(f"Unknown counter: {column}")
        attr = getattr(Post, column)
        stmt = (
            update(Post)
            .where(Post.id == post_id)
            .values({attr: attr + delta})
            .execution_options(synchronize_session="fetch")
        )
        self.session.execute(stmt)

    def count_created_since(self, since: datetime) -> int:
        return self.count(Post.created_at >= since)


class LikeRepository(BaseRepository[Like]):
    """Persistence-only repository for :class:`Like`."""

    model = Like

    def find(self, user_id: int, post_id: int) -> Like | None:
        return self.find_one(user_id=user_id, post_id=post_id)

    def remove(self, user_id: int, post_id: int) -> bool:
        """Delete the like if present. :returns: ``True`` when a row was removed."""
        stmt = delete(Like).where(Like.user_id == user_id, Like.post_id == post_id)
        return bool(self.session.execute(stmt).rowcount)

    def liked_post_ids(self, user_id: int, post_ids: Iterable[int]) -> set[int]:
        ids = list(post_ids)
        if not ids:
            return set()
        stmt = select(Like.post_id).where(Like.user_id == user_id, Like.post_id.in_(ids))
        return set(self.session.execute(stmt).scalars().all())


class CommentRepository(BaseRepository[Comment]):
    """Persistence-only repository for :class:`Comment`."""

    model = Comment

    def _sortable_fields(self):
        return {"created_at": Comment.created_at}

    def list_for_post(self, post_id: int, pagination: Pagination) -> Page[Comment]:
        stmt = select(Comment).where(Comment.post_id == post_id)
        return self.paginate_stmt(stmt, pagination)
