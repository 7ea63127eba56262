"""Notification repository."""

from __future__ import annotations

from typing import cast

from sqlalchemy import select, update

from socialconnect.models.notification import Notification
from socialconnect.repositories.base import BaseRepository, Page, Pagination


class NotificationRepository(BaseRepository[Notification]):
    """Persistence-only repository for :class:`Notification`."""

    model = Notification

    def _sortable_fields(self):
        return {"created_at": Notification.created_at}

    def get_owned(self, notification_id: int, user_id: int) -> Notification | None:
        stmt = select(Notification).where(
            Notification.id == notification_id, Notification.user_id == user_id
        )
        return cast(Notification | None, self.session.execute(stmt).scalars().first())

    def list_for_user(
        self, user_id: int, pagination: Pagination, *, unread_only: bool = False
    ) -> Page[Notification]:
        stmt = select(Notification).where(Notification.user_id == user_id)
        if unread_only:
            stmt = stmt.where(Notification.is_read.is_(False))
        return self.paginate_stmt(stmt, pagination)

    def unread_count(self, user_id: int) -> int:
        return self.count(Notification.user_id == user_id, Notification.is_read.is_(False))

    def mark_all_read(self, user_id: int) -> int:
        stmt = (
            update(Notification)
            .where(Notification.user_id == user_id, Notification.is_read.is_(False))
            .values(is_read=True)
            .execution_options(synchronize_session="evaluate")
        )
        return int(self.session.execute(stmt).rowcount or 0)
