# socialconnect/services/notifications/dto.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from socialconnect.models.notification import Notification
from socialconnect.services._shared.dto import PageMeta
from socialconnect.services.users.dto import UserSummaryOut


@dataclass(frozen=True, slots=True)
class NotificationOut:
    """
    Inbox entry.

    :param related_user: Actor summary, ``None`` once the actor row is gone.
    """

    id: int
    type: str
    content: str
    is_read: bool
    related_post_id: int | None
    related_user: UserSummaryOut | None
    created_at: datetime | None

    @classmethod
    def from_model(cls, notification: Notification) -> NotificationOut:
        actor = notification.related_user
        return cls(
            id=notification.id,
            type=notification.type,
            content=notification.content,
            is_read=notification.is_read,
            related_post_id=notification.related_post_id,
            related_user=UserSummaryOut.from_model(actor) if actor is not None else None,
            created_at=notification.created_at,
        )


@dataclass(frozen=True, slots=True)
class NotificationListOut:
    items: list[NotificationOut]
    meta: PageMeta
    unread_count: int
