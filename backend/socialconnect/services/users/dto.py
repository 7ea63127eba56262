# socialconnect/services/users/dto.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from socialconnect.models.user import User
from socialconnect.services._shared.dto import PageMeta

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class ProfileUpdateIn:
    """
    Partial profile update. Only keys present in ``fields`` are applied.

    :param fields: Mapping of profile field name to new value.
    """

    fields: dict[str, object] = field(default_factory=dict)


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class UserSummaryOut:
    """Compact author/actor reference embedded in posts and notifications."""

    id: int
    username: str
    first_name: str
    last_name: str
    avatar_url: str | None

    @classmethod
    def from_model(cls, user: User) -> UserSummaryOut:
        return cls(
            id=user.id,
            username=user.username,
            first_name=user.first_name,
            last_name=user.last_name,
            avatar_url=user.avatar_url,
        )


@dataclass(frozen=True, slots=True)
class UserOut:
    """Account representation. Never carries the password hash."""

    id: int
    email: str
    username: str
    first_name: str
    last_name: str
    bio: str | None
    avatar_url: str | None
    website: str | None
    location: str | None
    is_active: bool
    is_admin: bool
    email_verified: bool
    profile_visibility: str
    created_at: datetime | None
    last_login: datetime | None

    @classmethod
    def from_model(cls, user: User) -> UserOut:
        return cls(
            id=user.id,
            email=user.email,
            username=user.username,
            first_name=user.first_name,
            last_name=user.last_name,
            bio=user.bio,
            avatar_url=user.avatar_url,
            website=user.website,
            location=user.location,
            is_active=user.is_active,
            is_admin=user.is_admin,
            email_verified=user.email_verified,
            profile_visibility=user.profile_visibility,
            created_at=user.created_at,
            last_login=user.last_login,
        )


@dataclass(frozen=True, slots=True)
class UserStatsOut:
    followers_count: int
    following_count: int
    posts_count: int

    @classmethod
    def from_counts(cls, counts: dict[str, int]) -> UserStatsOut:
        return cls(
            followers_count=counts["followers"],
            following_count=counts["following"],
            posts_count=counts["posts"],
        )


@dataclass(frozen=True, slots=True)
class ProfileOut:
    """
    Profile with relationship counts.

    :param is_following: Whether the viewer follows this user (``False`` for anonymous).
    """

    user: UserOut
    stats: UserStatsOut
    is_following: bool = False


@dataclass(frozen=True, slots=True)
class UserListOut:
    items: list[UserOut]
    meta: PageMeta
