"""Repository package exposing persistence-layer access for all domain models."""

from __future__ import annotations

from socialconnect.repositories.base import BaseRepository, Page, Pagination
from socialconnect.repositories.follow import FollowRepository
from socialconnect.repositories.notification import NotificationRepository
from socialconnect.repositories.post import CommentRepository, LikeRepository, PostRepository
from socialconnect.repositories.user import UserRepository

__all__ = [
    # Base
    "BaseRepository",
    "Page",
    "Pagination",
    # Domain
    "UserRepository",
    "PostRepository",
    "LikeRepository",
    "CommentRepository",
    "FollowRepository",
    "NotificationRepository",
]
