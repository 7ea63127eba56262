"""
NotificationService
===================

Reads and acknowledgements of a user's inbox, plus :func:`record`, the
single entry point other services use to produce notifications inside
their own Unit of Work.
"""

from __future__ import annotations

from socialconnect.models.notification import Notification
from socialconnect.models.user import User
from socialconnect.services._shared.base import BaseService
from socialconnect.services._shared.dto import PaginationIn
from socialconnect.services._shared.errors import NotFoundError
from socialconnect.services.notifications.dto import NotificationListOut, NotificationOut

_TEMPLATES = {
    "like": "{actor} liked your post",
    "comment": "{actor} commented on your post",
    "follow": "{actor} started following you",
    "mention": "{actor} mentioned you",
}


def record(
    uow,
    *,
    recipient_id: int,
    kind: str,
    actor: User,
    post_id: int | None = None,
) -> Notification | None:
    """
    Stage a notification for ``recipient_id`` in the caller's transaction.

    Self-actions produce nothing.

    :param uow: Open read-write Unit of Work.
    :param kind: One of ``like``, ``comment``, ``follow``, ``mention``.
    :returns: The staged row, or ``None`` for a self-action.
    """
    if recipient_id == actor.id:
        return None
    notification = Notification(
        user_id=recipient_id,
        type=kind,
        content=_TEMPLATES[kind].format(actor=actor.username),
        related_user_id=actor.id,
        related_post_id=post_id,
        is_read=False,
    )
    return uow.notifications.add(notification)


class NotificationService(BaseService):
    """Inbox operations, always scoped to the calling user."""

    def inbox(
        self, user_id: int, page_in: PaginationIn | None = None, *, unread_only: bool = False
    ) -> NotificationListOut:
        pagination = self.ensure_pagination(page_in)
        with self.ro_uow() as uow:
            page = uow.notifications.list_for_user(user_id, pagination, unread_only=unread_only)
            return NotificationListOut(
                items=[NotificationOut.from_model(n) for n in page.items],
                meta=self.page_meta(pagination, page.total),
                unread_count=uow.notifications.unread_count(user_id),
            )

    def mark_read(self, user_id: int, notification_id: int) -> NotificationOut:
        """:raises NotFoundError: When the notification is missing or not owned."""
        with self.rw_uow() as uow:
            notification = uow.notifications.get_owned(notification_id, user_id)
            if notification is None:
                raise NotFoundError("Notification", notification_id)
            notification.is_read = True
            uow.notifications.flush()
            return NotificationOut.from_model(notification)

    def mark_all_read(self, user_id: int) -> int:
        with self.rw_uow() as uow:
            updated = uow.notifications.mark_all_read(user_id)
        self.log.debug("notifications.mark_all_read", extra={"user_id": user_id, "count": updated})
        return updated
