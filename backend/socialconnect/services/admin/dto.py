# socialconnect/services/admin/dto.py
from __future__ import annotations

from dataclasses import dataclass

from socialconnect.services._shared.dto import PageMeta
from socialconnect.services.users.dto import ProfileOut


@dataclass(frozen=True, slots=True)
class UserStats:
    total: int
    active: int
    active_today: int


@dataclass(frozen=True, slots=True)
class PostStats:
    total: int
    created_today: int


@dataclass(frozen=True, slots=True)
class EngagementStats:
    total_likes: int
    total_comments: int
    total_follows: int


@dataclass(frozen=True, slots=True)
class SystemStatsOut:
    """
    Console dashboard figures.

    ``users.active_today`` counts logins in the last 24 hours;
    ``posts.created_today`` counts posts since midnight UTC.
    """

    users: UserStats
    posts: PostStats
    engagement: EngagementStats


@dataclass(frozen=True, slots=True)
class AdminUserListOut:
    items: list[ProfileOut]
    meta: PageMeta
