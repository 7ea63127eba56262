"""
Unit of Work contract seen by the service layer.

A Unit of Work is the transaction boundary of one use case. Every
repository it exposes shares that transaction, so a like, its counter bump
and the author's notification land together or not at all.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from socialconnect.repositories import (
        CommentRepository,
        FollowRepository,
        LikeRepository,
        NotificationRepository,
        PostRepository,
        UserRepository,
    )
    from socialconnect.services._shared.ports import RefreshTokenStore


class UnitOfWork(ABC):
    """
    Transactional scope over the social graph and its token records.

    Implementations commit when the ``with`` block exits cleanly and roll
    back otherwise. Read-only variants never commit.
    """

    users: UserRepository
    posts: PostRepository
    likes: LikeRepository
    comments: CommentRepository
    follows: FollowRepository
    notifications: NotificationRepository

    @property
    @abstractmethod
    def refresh_tokens(self) -> RefreshTokenStore:
        """Store for the configured refresh token backend."""

    @abstractmethod
    def __enter__(self) -> UnitOfWork: ...

    @abstractmethod
    def __exit__(self, exc_type, exc, tb) -> None: ...

    @abstractmethod
    def commit(self) -> None: ...

    @abstractmethod
    def rollback(self) -> None: ...
