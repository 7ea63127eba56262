"""User repository for lookups, search and relationship counts."""

from __future__ import annotations

from datetime import datetime
from typing import Any, cast

from sqlalchemy import Select, func, or_, select

from socialconnect.models.follow import Follow
from socialconnect.models.post import Post
from socialconnect.models.user import User
from socialconnect.repositories.base import BaseRepository, Page, Pagination


class UserRepository(BaseRepository[User]):
    """Persistence-only repository for :class:`User`.

    It never handles tokens, only account rows.
    """

    model = User

    # ---------------------------- Whitelists ----------------------------

    def _sortable_fields(self):
        return {
            "id": User.id,
            "username": User.username,
            "created_at": User.created_at,
            "last_login": User.last_login,
        }

    def _updatable_fields(self):
        """Profile fields a user may edit on themselves (not password or flags)."""
        return {
            "username",
            "first_name",
            "last_name",
            "bio",
            "avatar_url",
            "website",
            "location",
            "profile_visibility",
        }

    # ---------------------------- Lookup helpers ----------------------------

    def get_by_email(self, email: str) -> User | None:
        stmt = select(User).where(User.email == email.lower().strip())
        return cast(User | None, self.session.execute(stmt).scalars().first())

    def get_by_username(self, username: str) -> User | None:
        """Case-insensitive username lookup."""
        stmt = select(User).where(func.lower(User.username) == username.strip().lower())
        return cast(User | None, self.session.execute(stmt).scalars().first())

    def get_by_login(self, identifier: str) -> User | None:
        """Resolve a login identifier that may be an email or a username."""
        if "@" in identifier:
            return self.get_by_email(identifier)
        return self.get_by_username(identifier)

    def get_active(self, user_id: int) -> User | None:
        stmt = select(User).where(User.id == user_id, User.is_active.is_(True))
        return cast(User | None, self.session.execute(stmt).scalars().first())

    def exists_by_email(self, email: str) -> bool:
        stmt = select(User.id).where(User.email == email.lower().strip())
        return bool(self.session.execute(stmt).first())

    def username_taken(self, username: str, *, exclude_id: int | None = None) -> bool:
        stmt = select(User.id).where(func.lower(User.username) == username.strip().lower())
        if exclude_id is not None:
            stmt = stmt.where(User.id != exclude_id)
        return bool(self.session.execute(stmt).first())

    # ---------------------------- Mutations ----------------------------

    def touch_last_login(self, user: User, when: datetime) -> None:
        user.last_login = when
        self.flush()

    def _soft_delete(self, instance: User) -> bool:
        instance.deactivate()
        return True

    # ---------------------------- Listing ----------------------------

    def search(
        self,
        pagination: Pagination,
        *,
        search: str | None = None,
        is_active: bool | None = True,
        include_email: bool = False,
    ) -> Page[User]:
        """
        Page through users matching ``search`` (ILIKE over names and handle).

        :param is_active: Filter on the flag; ``None`` lists every account.
        :param include_email: Also match the email column (admin console).
        """
        stmt = select(User)
        if search:
            pattern = f"%{search.strip()}%"
            columns = [User.username, User.first_name, User.last_name]
            if include_email:
                columns.append(User.email)
            stmt = stmt.where(or_(*(c.ilike(pattern) for c in columns)))
        if is_active is not None:
            stmt = stmt.where(User.is_active.is_(is_active))
        return self.paginate_stmt(stmt, pagination)

    def list_followers(self, user_id: int, pagination: Pagination) -> Page[User]:
        stmt = (
            select(User)
            .join(Follow, Follow.follower_id == User.id)
            .where(Follow.following_id == user_id, User.is_active.is_(True))
        )
        return self.paginate_stmt(stmt, pagination)

    def list_following(self, user_id: int, pagination: Pagination) -> Page[User]:
        stmt = (
            select(User)
            .join(Follow, Follow.following_id == User.id)
            .where(Follow.follower_id == user_id, User.is_active.is_(True))
        )
        return self.paginate_stmt(stmt, pagination)

    # ---------------------------- Counters ----------------------------

    def relationship_counts(self, user_id: int) -> dict[str, int]:
        """Return ``followers``, ``following`` and active ``posts`` counts."""

        def _count(stmt: Select[Any]) -> int:
            return int(self.session.execute(stmt).scalar_one())

        return {
            "followers": _count(
                select(func.count()).select_from(Follow).where(Follow.following_id == user_id)
            ),
            "following": _count(
                select(func.count()).select_from(Follow).where(Follow.follower_id == user_id)
            ),
            "posts": _count(
                select(func.count())
                .select_from(Post)
                .where(Post.author_id == user_id, Post.is_active.is_(True))
            ),
        }
