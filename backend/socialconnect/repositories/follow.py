"""Follow edge repository."""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import delete, select

from socialconnect.models.follow import Follow
from socialconnect.repositories.base import BaseRepository


class FollowRepository(BaseRepository[Follow]):
    """Persistence-only repository for :class:`Follow` edges."""

    model = Follow

    def is_following(self, follower_id: int | None, following_id: int) -> bool:
        if follower_id is None:
            return False
        return self.exists(follower_id=follower_id, following_id=following_id)

    def followed_among(self, follower_id: int | None, candidate_ids: Iterable[int]) -> set[int]:
        """Return the subset of ``candidate_ids`` that ``follower_id`` follows right now."""
        ids = list(set(candidate_ids))
        if follower_id is None or not ids:
            return set()
        stmt = select(Follow.following_id).where(
            Follow.follower_id == follower_id, Follow.following_id.in_(ids)
        )
        return set(self.session.execute(stmt).scalars().all())

    def following_ids(self, follower_id: int) -> list[int]:
        stmt = select(Follow.following_id).where(Follow.follower_id == follower_id)
        return list(self.session.execute(stmt).scalars().all())

    def remove(self, follower_id: int, following_id: int) -> bool:
        stmt = delete(Follow).where(
            Follow.follower_id == follower_id, Follow.following_id == following_id
        )
        return bool(self.session.execute(stmt).rowcount)
