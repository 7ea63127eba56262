"""
PostService
===========

Posts, likes and comments.

Visibility is decided per post by :func:`can_view` using the author's
current ``profile_visibility`` and the viewer's current follow edge. Hidden
posts are indistinguishable from missing ones (``NotFoundError``).
"""

from __future__ import annotations

from sqlalchemy.exc import IntegrityError

from socialconnect.models.post import (
    CATEGORY_CHOICES,
    COMMENT_MAX_LENGTH,
    POST_MAX_LENGTH,
    Comment,
    Like,
    Post,
)
from socialconnect.services._shared.base import BaseService
from socialconnect.services._shared.dto import PaginationIn
from socialconnect.services._shared.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    violates,
)
from socialconnect.services._shared.policies.visibility import can_view
from socialconnect.services.notifications.service import record
from socialconnect.services.posts.dto import (
    CommentListOut,
    CommentOut,
    FeedFilterIn,
    PostCreateIn,
    PostListOut,
    PostOut,
    PostUpdateIn,
)

COMMENT_SORT = ["-created_at"]


def _check_content(content: str | None, *, required: bool) -> None:
    if content is None or not content.strip():
        if required:
            raise ValidationError("Content cannot be empty", field_name="content")
        return
    if len(content) > POST_MAX_LENGTH:
        raise ValidationError(
            f"Content must be {POST_MAX_LENGTH} characters or less", field_name="content"
        )


def _check_category(category: str) -> None:
    if category not in CATEGORY_CHOICES:
        raise ValidationError("Invalid category", field_name="category")


class PostService(BaseService):
    """Application service for posts and engagement."""

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #

    def _visible_post(self, uow, post_id: int, viewer_id: int | None) -> Post:
        """
        Load an active post the viewer may see.

        :raises NotFoundError: When missing, inactive or hidden.
        """
        post = uow.posts.get_active(post_id)
        if post is None:
            raise NotFoundError("Post", post_id)
        author = post.author
        follows = uow.follows.is_following(viewer_id, author.id)
        if not can_view(viewer_id, author.id, author.profile_visibility, follows):
            raise NotFoundError("Post", post_id)
        return post

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #

    def feed(
        self,
        viewer_id: int | None,
        filters: FeedFilterIn | None = None,
        page_in: PaginationIn | None = None,
    ) -> PostListOut:
        """
        List active posts visible to ``viewer_id``, newest first.

        ``following=True`` only applies to signed-in viewers; anonymous callers
        get the regular feed.
        """
        filters = filters or FeedFilterIn()
        pagination = self.ensure_pagination(page_in)

        with self.ro_uow() as uow:
            author_ids = None
            if filters.following and viewer_id is not None:
                author_ids = uow.follows.following_ids(viewer_id)
                if not author_ids:
                    return PostListOut(items=[], meta=self.page_meta(pagination, 0))

            page = uow.posts.list_feed(
                pagination,
                category=filters.category,
                author_id=filters.author_id,
                author_ids=author_ids,
                visible_to=viewer_id,
                restrict_visibility=True,
            )

            followed = uow.follows.followed_among(viewer_id, (p.author_id for p in page.items))
            visible = [
                p
                for p in page.items
                if can_view(
                    viewer_id, p.author_id, p.author.profile_visibility, p.author_id in followed
                )
            ]

            liked: set[int] = set()
            if viewer_id is not None:
                liked = uow.likes.liked_post_ids(viewer_id, (p.id for p in visible))

            return PostListOut(
                items=[
                    PostOut.from_model(
                        p, is_liked=(p.id in liked) if viewer_id is not None else None
                    )
                    for p in visible
                ],
                meta=self.page_meta(pagination, page.total),
            )

    def get(self, post_id: int, viewer_id: int | None = None) -> PostOut:
        """:raises NotFoundError: When missing, inactive or hidden from the viewer."""
        with self.ro_uow() as uow:
            post = self._visible_post(uow, post_id, viewer_id)
            is_liked = None
            if viewer_id is not None:
                is_liked = uow.likes.find(viewer_id, post.id) is not None
            return PostOut.from_model(post, is_liked=is_liked)

    # ------------------------------------------------------------------ #
    # Commands
    # ------------------------------------------------------------------ #

    def create(self, author_id: int, dto: PostCreateIn) -> PostOut:
        """
        Publish a post.

        :raises ValidationError: When neither content nor image is given, or
            content/category are invalid.
        """
        content = dto.content.strip() if dto.content else None
        if not content and not dto.image_url:
            raise ValidationError("Content or image is required", field_name="content")
        _check_content(content, required=False)
        _check_category(dto.category)

        with self.rw_uow() as uow:
            if uow.users.get_active(author_id) is None:
                raise NotFoundError("User", author_id)
            post = uow.posts.add(
                Post(
                    author_id=author_id,
                    content=content or None,
                    image_url=dto.image_url or None,
                    category=dto.category,
                )
            )
            self.log.info("post.created", extra={"user_id": author_id, "post_id": post.id})
            return PostOut.from_model(post, is_liked=False)

    def update(self, actor_id: int, post_id: int, dto: PostUpdateIn) -> PostOut:
        """
        Edit a post. Author only.

        :raises NotFoundError: When the post is missing or inactive.
        :raises AuthorizationError: When the actor is not the author.
        :raises ValidationError: On an empty update or invalid values.
        """
        fields = dict(dto.fields)
        if not fields:
            raise ValidationError("No valid fields to update")
        if "content" in fields:
            _check_content(fields["content"], required=True)
        if "category" in fields:
            _check_category(fields["category"])

        with self.rw_uow() as uow:
            post = uow.posts.get_active(post_id)
            if post is None:
                raise NotFoundError("Post", post_id)
            self.ensure_owner(actor_id, post.author_id, msg="You can only update your own posts")
            try:
                uow.posts.assign_updates(post, fields)
            except ValueError as exc:
                raise ValidationError(str(exc)) from exc
            is_liked = uow.likes.find(actor_id, post.id) is not None
            return PostOut.from_model(post, is_liked=is_liked)

    def delete(self, actor_id: int, post_id: int) -> None:
        """Soft-delete a post. Author only."""
        with self.rw_uow() as uow:
            post = uow.posts.get_active(post_id)
            if post is None:
                raise NotFoundError("Post", post_id)
            self.ensure_owner(actor_id, post.author_id, msg="You can only delete your own posts")
            uow.posts.delete(post)
        self.log.info("post.deleted", extra={"user_id": actor_id, "post_id": post_id})

    # ------------------------------------------------------------------ #
    # Likes
    # ------------------------------------------------------------------ #

    def like(self, user_id: int, post_id: int) -> None:
        """
        Like a post and notify its author.

        :raises NotFoundError: When the post is missing, inactive or hidden.
        :raises ConflictError: When already liked.
        """
        with self.rw_uow() as uow:
            post = self._visible_post(uow, post_id, user_id)
            actor = uow.users.get_active(user_id)
            if actor is None:
                raise NotFoundError("User", user_id)
            if uow.likes.find(user_id, post.id) is not None:
                raise ConflictError("Like", "Post already liked")
            try:
                uow.likes.add(Like(user_id=user_id, post_id=post.id))
            except IntegrityError as exc:
                if violates(
                    exc, "uq_likes_user_id_post_id", columns=("likes.user_id", "likes.post_id")
                ):
                    raise ConflictError("Like", "Post already liked") from exc
                raise
            uow.posts.bump_counter(post.id, "like_count", 1)
            record(uow, recipient_id=post.author_id, kind="like", actor=actor, post_id=post.id)

    def unlike(self, user_id: int, post_id: int) -> bool:
        """Remove a like if present; the counter only moves when a row was removed."""
        with self.rw_uow() as uow:
            removed = uow.likes.remove(user_id, post_id)
            if removed:
                uow.posts.bump_counter(post_id, "like_count", -1)
        return removed

    # ------------------------------------------------------------------ #
    # Comments
    # ------------------------------------------------------------------ #

    def list_comments(
        self, post_id: int, viewer_id: int | None = None, page_in: PaginationIn | None = None
    ) -> CommentListOut:
        pagination = self.ensure_pagination(page_in, sort=COMMENT_SORT)
        with self.ro_uow() as uow:
            self._visible_post(uow, post_id, viewer_id)
            page = uow.comments.list_for_post(post_id, pagination)
            return CommentListOut(
                items=[CommentOut.from_model(c) for c in page.items],
                meta=self.page_meta(pagination, page.total),
            )

    def add_comment(self, user_id: int, post_id: int, content: str) -> CommentOut:
        """
        Comment on a post and notify its author.

        :raises ValidationError: On empty or over-long content.
        :raises NotFoundError: When the post is missing, inactive or hidden.
        """
        if not content or not content.strip():
            raise ValidationError("Comment content is required", field_name="content")
        if len(content) > COMMENT_MAX_LENGTH:
            raise ValidationError(
                f"Comment must be {COMMENT_MAX_LENGTH} characters or less", field_name="content"
            )

        with self.rw_uow() as uow:
            post = self._visible_post(uow, post_id, user_id)
            actor = uow.users.get_active(user_id)
            if actor is None:
                raise NotFoundError("User", user_id)
            try:
                comment = Comment(user_id=user_id, post_id=post.id, content=content)
            except ValueError as exc:
                raise ValidationError(str(exc), field_name="content") from exc
            uow.comments.add(comment)
            uow.posts.bump_counter(post.id, "comment_count", 1)
            record(uow, recipient_id=post.author_id, kind="comment", actor=actor, post_id=post.id)
            return CommentOut.from_model(comment)
