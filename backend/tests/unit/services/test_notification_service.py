# tests/unit/services/test_notification_service.py
from __future__ import annotations

import pytest

from socialconnect.services._shared.dto import PaginationIn
from socialconnect.services._shared.errors import NotFoundError
from socialconnect.services.notifications.service import NotificationService
from tests.factories.post import NotificationFactory
from tests.factories.user import UserFactory


@pytest.fixture()
def service(app) -> NotificationService:
    return NotificationService()


@pytest.fixture()
def inbox_owner():
    user = UserFactory()
    actor = UserFactory(username="actor")
    for is_read in (False, False, True):
        NotificationFactory(user_id=user.id, related_user_id=actor.id, is_read=is_read)
    NotificationFactory()  # someone else's
    return user


def test_inbox_is_scoped_to_owner_with_unread_count(service, inbox_owner):
    out = service.inbox(inbox_owner.id)

    assert out.meta.total == 3
    assert out.unread_count == 2
    assert {n.related_user.username for n in out.items} == {"actor"}


def test_inbox_unread_only(service, inbox_owner):
    out = service.inbox(inbox_owner.id, PaginationIn(limit=10), unread_only=True)
    assert len(out.items) == 2
    assert all(n.is_read is False for n in out.items)


def test_inbox_newest_first(service):
    user = UserFactory()
    notes = [NotificationFactory(user_id=user.id) for _ in range(3)]
    out = service.inbox(user.id)
    assert [n.id for n in out.items] == [n.id for n in reversed(notes)]


def test_mark_read(service, inbox_owner):
    target = next(n for n in service.inbox(inbox_owner.id).items if not n.is_read)

    out = service.mark_read(inbox_owner.id, target.id)

    assert out.is_read is True
    assert service.inbox(inbox_owner.id).unread_count == 1


def test_mark_read_of_foreign_notification_is_not_found(service, inbox_owner):
    foreign = NotificationFactory()
    with pytest.raises(NotFoundError, match="Notification not found"):
        service.mark_read(inbox_owner.id, foreign.id)


def test_mark_all_read(service, inbox_owner):
    assert service.mark_all_read(inbox_owner.id) == 2
    assert service.inbox(inbox_owner.id).unread_count == 0
    assert service.mark_all_read(inbox_owner.id) == 0
