"""
UserService
===========

Profiles, directory search and the follow graph.

Profile reads go through :func:`can_view` on every request; follow edges are
never cached, so a follow or unfollow takes effect on the next read.
"""

from __future__ import annotations

from sqlalchemy.exc import IntegrityError

from socialconnect.models.follow import Follow
from socialconnect.models.user import BIO_MAX_LENGTH, VISIBILITY_CHOICES
from socialconnect.services._shared.base import BaseService
from socialconnect.services._shared.dto import PaginationIn
from socialconnect.services._shared.errors import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
    violates,
)
from socialconnect.services._shared.policies.credentials import check_username
from socialconnect.services._shared.policies.visibility import (
    can_view,
    visibility_denial_message,
)
from socialconnect.services.notifications.service import record
from socialconnect.services.users.dto import (
    ProfileOut,
    ProfileUpdateIn,
    UserListOut,
    UserOut,
    UserStatsOut,
)


class UserService(BaseService):
    """Application service for user profiles and follows."""

    # ------------------------------------------------------------------ #
    # Profiles
    # ------------------------------------------------------------------ #

    def get_profile(self, user_id: int, viewer_id: int | None = None) -> ProfileOut:
        """
        Fetch a profile as seen by ``viewer_id``.

        :raises NotFoundError: When the user is missing or deactivated.
        :raises AuthorizationError: When the owner's visibility hides the profile.
        """
        with self.ro_uow() as uow:
            user = uow.users.get_active(user_id)
            if user is None:
                raise NotFoundError("User", user_id)

            follows = uow.follows.is_following(viewer_id, user.id)
            if not can_view(viewer_id, user.id, user.profile_visibility, follows):
                raise AuthorizationError(visibility_denial_message(user.profile_visibility))

            counts = uow.users.relationship_counts(user.id)
            return ProfileOut(
                user=UserOut.from_model(user),
                stats=UserStatsOut.from_counts(counts),
                is_following=follows,
            )

    def get_me(self, user_id: int) -> ProfileOut:
        with self.ro_uow() as uow:
            user = uow.users.get(user_id)
            if user is None:
                raise NotFoundError("User", user_id)
            counts = uow.users.relationship_counts(user.id)
            return ProfileOut(user=UserOut.from_model(user), stats=UserStatsOut.from_counts(counts))

    def update_me(self, user_id: int, dto: ProfileUpdateIn) -> UserOut:
        """
        Apply a partial profile update.

        :raises ValidationError: On an empty update or an invalid field value.
        :raises ConflictError: When the requested username belongs to someone else.
        """
        fields = dict(dto.fields)
        if not fields:
            raise ValidationError("No valid fields to update")

        if "username" in fields:
            check_username(fields["username"])
        bio = fields.get("bio")
        if bio is not None and len(bio) > BIO_MAX_LENGTH:
            raise ValidationError(
                f"Bio must be {BIO_MAX_LENGTH} characters or less", field_name="bio"
            )
        if "profile_visibility" in fields and fields["profile_visibility"] not in VISIBILITY_CHOICES:
            raise ValidationError("Invalid profile visibility", field_name="profile_visibility")

        with self.rw_uow() as uow:
            user = uow.users.get_active(user_id)
            if user is None:
                raise NotFoundError("User", user_id)
            if "username" in fields and uow.users.username_taken(
                fields["username"], exclude_id=user.id
            ):
                raise ConflictError("User", "Username already taken")
            try:
                uow.users.assign_updates(user, fields)
            except ValueError as exc:
                raise ValidationError(str(exc)) from exc
            except IntegrityError as exc:
                if violates(exc, "uq_users_username", columns=("users.username",)):
                    raise ConflictError("User", "Username already taken") from exc
                raise
            self.log.info(
                "user.profile_updated", extra={"user_id": user.id, "fields": sorted(fields)}
            )
            return UserOut.from_model(user)

    def search(self, page_in: PaginationIn | None = None, *, search: str | None = None) -> UserListOut:
        """Directory of active users, optionally filtered by name or handle."""
        pagination = self.ensure_pagination(page_in)
        with self.ro_uow() as uow:
            page = uow.users.search(pagination, search=search)
            return UserListOut(
                items=[UserOut.from_model(u) for u in page.items],
                meta=self.page_meta(pagination, page.total),
            )

    # ------------------------------------------------------------------ #
    # Follow graph
    # ------------------------------------------------------------------ #

    def follow(self, follower_id: int, target_id: int) -> None:
        """
        Create the edge ``follower_id -> target_id`` and notify the target.

        :raises ValidationError: On a self-follow.
        :raises NotFoundError: When the target is missing or deactivated.
        :raises ConflictError: When the edge already exists.
        """
        if follower_id == target_id:
            raise ValidationError("You cannot follow yourself")

        with self.rw_uow() as uow:
            target = uow.users.get_active(target_id)
            if target is None:
                raise NotFoundError("User", target_id)
            follower = uow.users.get_active(follower_id)
            if follower is None:
                raise NotFoundError("User", follower_id)
            if uow.follows.is_following(follower_id, target_id):
                raise ConflictError("Follow", "Already following this user")
            try:
                uow.follows.add(Follow(follower_id=follower_id, following_id=target_id))
            except IntegrityError as exc:
                if violates(
                    exc,
                    "uq_follows_follower_id_following_id",
                    columns=("follows.follower_id", "follows.following_id"),
                ):
                    raise ConflictError("Follow", "Already following this user") from exc
                raise
            record(uow, recipient_id=target_id, kind="follow", actor=follower)

        self.log.info("user.followed", extra={"user_id": follower_id, "target_id": target_id})

    def unfollow(self, follower_id: int, target_id: int) -> bool:
        """Remove the edge if present. Missing edges are not an error."""
        with self.rw_uow() as uow:
            removed = uow.follows.remove(follower_id, target_id)
        if removed:
            self.log.info(
                "user.unfollowed", extra={"user_id": follower_id, "target_id": target_id}
            )
        return removed

    def followers(self, user_id: int, page_in: PaginationIn | None = None) -> UserListOut:
        pagination = self.ensure_pagination(page_in)
        with self.ro_uow() as uow:
            if uow.users.get_active(user_id) is None:
                raise NotFoundError("User", user_id)
            page = uow.users.list_followers(user_id, pagination)
            return UserListOut(
                items=[UserOut.from_model(u) for u in page.items],
                meta=self.page_meta(pagination, page.total),
            )

    def following(self, user_id: int, page_in: PaginationIn | None = None) -> UserListOut:
        pagination = self.ensure_pagination(page_in)
        with self.ro_uow() as uow:
            if uow.users.get_active(user_id) is None:
                raise NotFoundError("User", user_id)
            page = uow.users.list_following(user_id, pagination)
            return UserListOut(
                items=[UserOut.from_model(u) for u in page.items],
                meta=self.page_meta(pagination, page.total),
            )
