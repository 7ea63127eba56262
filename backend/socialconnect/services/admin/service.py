"""
AdminService
============

Moderation console operations. Callers are expected to have passed the
admin gate already; :meth:`AdminService.provision` is the exception and
authenticates with the shared provisioning secret instead.
"""

from __future__ import annotations

import hmac
from datetime import timedelta

from socialconnect.models.post import Post
from socialconnect.models.user import User
from socialconnect.services._shared.base import BaseService, ServiceContext
from socialconnect.services._shared.dto import PaginationIn
from socialconnect.services._shared.errors import (
    AuthorizationError,
    NotFoundError,
    ValidationError,
)
from socialconnect.services.admin.dto import (
    AdminUserListOut,
    EngagementStats,
    PostStats,
    SystemStatsOut,
    UserStats,
)
from socialconnect.services.posts.dto import PostListOut, PostOut
from socialconnect.services.users.dto import ProfileOut, UserOut, UserStatsOut

STATUS_ACTIVE = "active"
STATUS_INACTIVE = "inactive"


class AdminService(BaseService):
    """
    Application service for the admin console.

    :param admin_secret: Shared secret accepted by :meth:`provision`.
        Provisioning is disabled while it is empty.
    """

    def __init__(self, *, admin_secret: str | None = None, ctx: ServiceContext | None = None) -> None:
        super().__init__(ctx=ctx)
        self.admin_secret = admin_secret or ""

    # ------------------------------------------------------------------ #
    # Dashboard
    # ------------------------------------------------------------------ #

    def stats(self) -> SystemStatsOut:
        now = self.now()
        midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
        with self.ro_uow() as uow:
            return SystemStatsOut(
                users=UserStats(
                    total=uow.users.count(),
                    active=uow.users.count(User.is_active.is_(True)),
                    active_today=uow.users.count(User.last_login >= now - timedelta(days=1)),
                ),
                posts=PostStats(
                    total=uow.posts.count(Post.is_active.is_(True)),
                    created_today=uow.posts.count_created_since(midnight),
                ),
                engagement=EngagementStats(
                    total_likes=uow.likes.count(),
                    total_comments=uow.comments.count(),
                    total_follows=uow.follows.count(),
                ),
            )

    # ------------------------------------------------------------------ #
    # Users
    # ------------------------------------------------------------------ #

    def list_users(
        self,
        page_in: PaginationIn | None = None,
        *,
        search: str | None = None,
        status: str | None = None,
    ) -> AdminUserListOut:
        """
        Page through every account, email included in the search.

        :param status: ``active``, ``inactive`` or ``None`` for both.
        """
        is_active = {STATUS_ACTIVE: True, STATUS_INACTIVE: False}.get(status or "")
        pagination = self.ensure_pagination(page_in)
        with self.ro_uow() as uow:
            page = uow.users.search(
                pagination, search=search, is_active=is_active, include_email=True
            )
            items = [
                ProfileOut(
                    user=UserOut.from_model(u),
                    stats=UserStatsOut.from_counts(uow.users.relationship_counts(u.id)),
                )
                for u in page.items
            ]
            return AdminUserListOut(items=items, meta=self.page_meta(pagination, page.total))

    def get_user(self, user_id: int) -> ProfileOut:
        """Account detail regardless of ``is_active``."""
        with self.ro_uow() as uow:
            user = uow.users.get(user_id)
            if user is None:
                raise NotFoundError("User", user_id)
            counts = uow.users.relationship_counts(user.id)
            return ProfileOut(user=UserOut.from_model(user), stats=UserStatsOut.from_counts(counts))

    def deactivate_user(self, actor_id: int, user_id: int) -> int:
        """
        Deactivate an account and revoke all of its refresh tokens.

        Access tokens already issued stay valid until they expire.

        :returns: Number of refresh tokens revoked.
        :raises ValidationError: When an admin targets their own account.
        :raises NotFoundError: When the account does not exist.
        """
        if actor_id == user_id:
            raise ValidationError("You cannot deactivate your own account")
        with self.rw_uow() as uow:
            user = uow.users.get(user_id)
            if user is None:
                raise NotFoundError("User", user_id)
            uow.users.delete(user)
            revoked = uow.refresh_tokens.blacklist_all(user.id)
        self.log.warning(
            "admin.user_deactivated",
            extra={"user_id": actor_id, "target_id": user_id, "revoked": revoked},
        )
        return revoked

    def provision(self, secret_key: str | None, user_id: int | None) -> UserOut:
        """
        Promote ``user_id`` to admin when ``secret_key`` matches.

        :raises AuthorizationError: On a missing or wrong secret.
        :raises ValidationError: When ``user_id`` is missing.
        :raises NotFoundError: When the account does not exist.
        """
        if (
            not self.admin_secret
            or not secret_key
            or not hmac.compare_digest(secret_key.encode("utf-8"), self.admin_secret.encode("utf-8"))
        ):
            raise AuthorizationError("Invalid secret key")
        if user_id is None:
            raise ValidationError("User ID is required", field_name="user_id")
        return self.promote(user_id)

    def promote(self, user_id: int) -> UserOut:
        """Set ``is_admin`` on an account. Used by :meth:`provision` and the CLI."""
        with self.rw_uow() as uow:
            user = uow.users.get(user_id)
            if user is None:
                raise NotFoundError("User", user_id)
            user.is_admin = True
            uow.users.flush()
            out = UserOut.from_model(user)
        self.log.warning("admin.user_provisioned", extra={"target_id": user_id})
        return out

    # ------------------------------------------------------------------ #
    # Posts
    # ------------------------------------------------------------------ #

    def list_posts(
        self, page_in: PaginationIn | None = None, *, include_inactive: bool = False
    ) -> PostListOut:
        """Every post regardless of author visibility; moderation view."""
        pagination = self.ensure_pagination(page_in)
        with self.ro_uow() as uow:
            page = uow.posts.list_feed(pagination, include_inactive=include_inactive)
            return PostListOut(
                items=[PostOut.from_model(p) for p in page.items],
                meta=self.page_meta(pagination, page.total),
            )

    def delete_post(self, actor_id: int, post_id: int) -> None:
        with self.rw_uow() as uow:
            post = uow.posts.get(post_id)
            if post is None:
                raise NotFoundError("Post", post_id)
            uow.posts.delete(post)
        self.log.warning("admin.post_deleted", extra={"user_id": actor_id, "post_id": post_id})
