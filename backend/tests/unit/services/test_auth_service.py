# tests/unit/services/test_auth_service.py
from __future__ import annotations

import pytest

from socialconnect.services._shared.errors import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    ValidationError,
)
from socialconnect.services._shared.ports import StubTokenProvider
from socialconnect.services.auth.dto import (
    LoginIn,
    PasswordChangeIn,
    PasswordResetConfirmIn,
    RegisterIn,
)
from socialconnect.services.auth.service import AuthService
from socialconnect.services.auth.tokens import TokenService
from tests.factories.post import FollowFactory, PostFactory
from tests.factories.user import DEFAULT_PASSWORD, UserFactory


# ------------------------------ Fixtures ---------------------------------- #
@pytest.fixture()
def service(app) -> AuthService:
    """
    Build an AuthService over the stub token provider.

    Refresh token records go through the configured store (the relational
    one under testing), so revocation is observable through the service.
    """
    return AuthService(TokenService(StubTokenProvider()))


def _register_in(**overrides) -> RegisterIn:
    data = {
        "email": "new@example.com",
        "username": "new_user",
        "password": "Passw0rd1",
        "first_name": "New",
        "last_name": "User",
    }
    data.update(overrides)
    return RegisterIn(**data)


# ---------------------------- Registration -------------------------------- #
def test_register_creates_an_active_unverified_account(service):
    out = service.register(_register_in(email="New@Example.com"))

    assert out.id is not None
    assert out.email == "new@example.com"
    assert out.is_active is True
    assert out.email_verified is False
    assert not hasattr(out, "password_hash")


def test_register_rejects_duplicate_email(service):
    UserFactory(email="taken@example.com")
    with pytest.raises(ConflictError, match="Email already registered"):
        service.register(_register_in(email="taken@example.com"))


def test_register_rejects_duplicate_username_ignoring_case(service):
    UserFactory(username="Taken")
    with pytest.raises(ConflictError, match="Username already taken"):
        service.register(_register_in(username="taken"))


@pytest.mark.parametrize(
    "overrides, field",
    [({"username": "ab"}, "username"), ({"password": "short1"}, "password")],
)
def test_register_validates_credentials(service, overrides, field):
    with pytest.raises(ValidationError) as exc:
        service.register(_register_in(**overrides))
    assert exc.value.field_name == field


def test_username_availability(service):
    UserFactory(username="grace")

    assert service.username_availability("grace").available is False
    assert service.username_availability("hopper").available is True
    bad = service.username_availability("x")
    assert bad.available is False
    assert "3-30 characters" in bad.error


# ------------------------------ Sessions ---------------------------------- #
def test_login_by_email_or_username_issues_a_pair(service):
    user = UserFactory(username="ada")
    FollowFactory(following=user)
    PostFactory(author=user)

    by_email = service.login(LoginIn(identifier=user.email, password=DEFAULT_PASSWORD))
    by_name = service.login(LoginIn(identifier="ADA", password=DEFAULT_PASSWORD))

    assert by_email.user.id == by_name.user.id == user.id
    assert by_email.user.last_login is not None
    assert by_email.stats.followers_count == 1
    assert by_email.stats.posts_count == 1
    claims = service.tokens.verify_access(by_email.access_token)
    assert claims.user_id == user.id
    assert claims.is_admin is False


@pytest.mark.parametrize("identifier, password", [("ghost", "x"), ("real", "wrong-pass1")])
def test_login_rejects_bad_credentials(service, identifier, password):
    UserFactory(username="real")
    with pytest.raises(AuthenticationError, match="Invalid credentials"):
        service.login(LoginIn(identifier=identifier, password=password))


def test_login_rejects_deactivated_accounts(service):
    user = UserFactory(is_active=False)
    with pytest.raises(AuthorizationError, match="Account is deactivated"):
        service.login(LoginIn(identifier=user.email, password=DEFAULT_PASSWORD))


def test_refresh_issues_a_new_access_token(service):
    user = UserFactory()
    pair = service.login(LoginIn(identifier=user.email, password=DEFAULT_PASSWORD))

    out = service.refresh(pair.refresh_token)
    assert out.access_token != pair.access_token
    assert service.tokens.verify_access(out.access_token).user_id == user.id


def test_refresh_requires_a_token(service):
    with pytest.raises(ValidationError, match="Refresh token is required"):
        service.refresh("")


def test_refresh_rejects_access_tokens(service):
    user = UserFactory()
    pair = service.login(LoginIn(identifier=user.email, password=DEFAULT_PASSWORD))
    with pytest.raises(AuthenticationError, match="Invalid refresh token"):
        service.refresh(pair.access_token)


def test_logout_blacklists_the_refresh_token(service):
    user = UserFactory()
    pair = service.login(LoginIn(identifier=user.email, password=DEFAULT_PASSWORD))

    assert service.logout(user.id, pair.refresh_token) is True
    with pytest.raises(AuthenticationError, match="revoked"):
        service.refresh(pair.refresh_token)


def test_logout_ignores_tokens_of_other_users(service):
    owner, intruder = UserFactory(), UserFactory()
    pair = service.login(LoginIn(identifier=owner.email, password=DEFAULT_PASSWORD))

    assert service.logout(intruder.id, pair.refresh_token) is False
    assert service.refresh(pair.refresh_token).access_token


def test_refresh_rejects_deactivated_owner(service, session):
    user = UserFactory()
    pair = service.login(LoginIn(identifier=user.email, password=DEFAULT_PASSWORD))
    user.is_active = False
    session.commit()

    with pytest.raises(AuthenticationError, match="User not found or inactive"):
        service.refresh(pair.refresh_token)


# --------------------------- Password lifecycle --------------------------- #
def test_change_password_revokes_every_refresh_token(service):
    user = UserFactory()
    first = service.login(LoginIn(identifier=user.email, password=DEFAULT_PASSWORD))
    second = service.login(LoginIn(identifier=user.email, password=DEFAULT_PASSWORD))

    revoked = service.change_password(
        user.id, PasswordChangeIn(current_password=DEFAULT_PASSWORD, new_password="N3wPassword")
    )

    assert revoked == 2
    for pair in (first, second):
        with pytest.raises(AuthenticationError):
            service.refresh(pair.refresh_token)
    assert service.login(LoginIn(identifier=user.email, password="N3wPassword")).access_token


def test_change_password_checks_the_current_one(service):
    user = UserFactory()
    with pytest.raises(AuthenticationError, match="Current password is incorrect"):
        service.change_password(
            user.id, PasswordChangeIn(current_password="nope1234", new_password="N3wPassword")
        )


def test_password_reset_round_trip_is_single_use(service):
    user = UserFactory()
    pair = service.login(LoginIn(identifier=user.email, password=DEFAULT_PASSWORD))
    token = service.request_password_reset(user.email)
    assert token

    dto = PasswordResetConfirmIn(email=user.email, reset_token=token, new_password="Res3tPass")
    assert service.confirm_password_reset(dto) == 1

    with pytest.raises(AuthenticationError):
        service.refresh(pair.refresh_token)
    assert service.login(LoginIn(identifier=user.email, password="Res3tPass")).access_token
    # The password fingerprint changed, so the same token is now worthless.
    with pytest.raises(ValidationError, match="Invalid reset token or email"):
        service.confirm_password_reset(
            PasswordResetConfirmIn(email=user.email, reset_token=token, new_password="Again1234")
        )


def test_password_reset_for_unknown_or_inactive_accounts(service):
    inactive = UserFactory(is_active=False)
    assert service.request_password_reset("ghost@example.com") is None
    assert service.request_password_reset(inactive.email) is None


def test_password_reset_token_is_bound_to_the_email(service):
    user, other = UserFactory(), UserFactory()
    token = service.request_password_reset(user.email)

    with pytest.raises(ValidationError, match="Invalid reset token or email"):
        service.confirm_password_reset(
            PasswordResetConfirmIn(email=other.email, reset_token=token, new_password="Res3tPass")
        )


def test_password_reset_rejects_ordinary_access_tokens(service):
    user = UserFactory()
    pair = service.login(LoginIn(identifier=user.email, password=DEFAULT_PASSWORD))

    with pytest.raises(ValidationError):
        service.confirm_password_reset(
            PasswordResetConfirmIn(
                email=user.email, reset_token=pair.access_token, new_password="Res3tPass"
            )
        )


def test_whoami_returns_counts(service):
    user = UserFactory()
    FollowFactory(follower=user)

    profile = service.whoami(user.id)
    assert profile.user.id == user.id
    assert profile.stats.following_count == 1
