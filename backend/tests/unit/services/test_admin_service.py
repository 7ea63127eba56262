# tests/unit/services/test_admin_service.py
from __future__ import annotations

import pytest

from socialconnect.services._shared.errors import (
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    ValidationError,
)
from socialconnect.services._shared.ports import StubTokenProvider
from socialconnect.services.admin.service import AdminService
from socialconnect.services.auth.dto import LoginIn
from socialconnect.services.auth.service import AuthService
from socialconnect.services.auth.tokens import TokenService
from tests.factories.post import CommentFactory, FollowFactory, PostFactory
from tests.factories.user import DEFAULT_PASSWORD, AdminFactory, UserFactory

SECRET = "s3cret-provisioning-key"


@pytest.fixture()
def service(app) -> AdminService:
    return AdminService(admin_secret=SECRET)


def test_stats_summarise_the_network(service):
    alice, bob = UserFactory(), UserFactory()
    UserFactory(is_active=False)
    post = PostFactory(author=alice)
    PostFactory(author=bob, is_active=False)
    CommentFactory(post_id=post.id, author=bob)
    FollowFactory(follower=alice, following=bob)

    stats = service.stats()

    assert stats.users.total == 3
    assert stats.users.active == 2
    assert stats.posts.total == 1
    assert stats.engagement.total_comments == 1
    assert stats.engagement.total_follows == 1
    assert stats.engagement.total_likes == 0


def test_list_users_filters_status_and_searches_email(service):
    active = UserFactory(email="find-me@corp.example")
    UserFactory(email="find-me-too@corp.example", is_active=False)

    everyone = service.list_users(search="corp.example")
    inactive = service.list_users(status="inactive")
    only_active = service.list_users(search="corp.example", status="active")

    assert everyone.meta.total == 2
    assert all(not p.user.is_active for p in inactive.items)
    assert [p.user.id for p in only_active.items] == [active.id]


def test_get_user_includes_deactivated_accounts(service):
    user = UserFactory(is_active=False)
    assert service.get_user(user.id).user.is_active is False
    with pytest.raises(NotFoundError):
        service.get_user(999_999)


def test_deactivate_user_revokes_refresh_tokens(service, app):
    auth = AuthService(TokenService(StubTokenProvider()))
    admin, victim = AdminFactory(), UserFactory()
    pair = auth.login(LoginIn(identifier=victim.email, password=DEFAULT_PASSWORD))

    assert service.deactivate_user(admin.id, victim.id) == 1

    assert service.get_user(victim.id).user.is_active is False
    with pytest.raises(AuthenticationError):
        auth.refresh(pair.refresh_token)
    # An access token issued before deactivation keeps verifying until expiry.
    assert auth.tokens.verify_access(pair.access_token).user_id == victim.id


def test_admin_cannot_deactivate_self(service):
    admin = AdminFactory()
    with pytest.raises(ValidationError, match="cannot deactivate your own account"):
        service.deactivate_user(admin.id, admin.id)


def test_provision_with_the_right_secret(service):
    user = UserFactory()
    assert service.provision(SECRET, user.id).is_admin is True


@pytest.mark.parametrize("secret", [None, "", "wrong"])
def test_provision_rejects_bad_secrets(service, secret):
    user = UserFactory()
    with pytest.raises(AuthorizationError, match="Invalid secret key"):
        service.provision(secret, user.id)


def test_provision_is_disabled_without_configured_secret(app):
    user = UserFactory()
    with pytest.raises(AuthorizationError):
        AdminService(admin_secret="").provision("", user.id)


def test_provision_requires_existing_user(service):
    with pytest.raises(ValidationError, match="User ID is required"):
        service.provision(SECRET, None)
    with pytest.raises(NotFoundError):
        service.provision(SECRET, 999_999)


def test_list_posts_ignores_visibility_and_can_include_deleted(service):
    hidden_author = UserFactory(profile_visibility="private")
    live = PostFactory(author=hidden_author)
    gone = PostFactory(is_active=False)

    default = {p.id for p in service.list_posts().items}
    everything = {p.id for p in service.list_posts(include_inactive=True).items}

    assert default == {live.id}
    assert everything == {live.id, gone.id}


def test_delete_post_soft_deletes(service, session):
    admin, post = AdminFactory(), PostFactory()
    service.delete_post(admin.id, post.id)
    session.refresh(post)
    assert post.is_active is False
    with pytest.raises(NotFoundError):
        service.delete_post(admin.id, 999_999)
