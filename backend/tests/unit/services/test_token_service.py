"""Unit tests for access/refresh token issuance and verification."""

from __future__ import annotations

from datetime import timedelta

import pytest
from freezegun import freeze_time

from socialconnect.services._shared.ports import InMemoryRefreshTokenStore, StubTokenProvider
from socialconnect.services.auth.dto import TokenClaims
from socialconnect.services.auth.tokens import TokenService

CLAIMS = TokenClaims(user_id=7, email="ada@example.com", username="ada", is_admin=True)


@pytest.fixture()
def tokens() -> TokenService:
    return TokenService(
        StubTokenProvider(), access_ttl=timedelta(minutes=15), refresh_ttl=timedelta(days=7)
    )


def test_access_claims_round_trip(tokens):
    token = tokens.issue_access(CLAIMS)
    assert tokens.verify_access(token) == CLAIMS


def test_refresh_is_persisted_before_it_is_returned(tokens):
    store = InMemoryRefreshTokenStore()
    issued = tokens.issue_refresh(CLAIMS, store)

    record = store.find_active(issued.token)
    assert record is not None
    assert record.user_id == CLAIMS.user_id
    assert tokens.verify_refresh(issued.token) == CLAIMS


def test_token_types_are_not_interchangeable(tokens):
    access = tokens.issue_access(CLAIMS)
    refresh = tokens.issue_refresh(CLAIMS, InMemoryRefreshTokenStore()).token

    assert tokens.verify_refresh(access) is None
    assert tokens.verify_access(refresh) is None


@pytest.mark.parametrize("token", [None, "", "garbage", "access.7.999"])
def test_unknown_or_missing_tokens_verify_to_none(tokens, token):
    assert tokens.verify_access(token) is None
    assert tokens.verify_refresh(token) is None


def test_access_token_expires_after_ttl(tokens):
    with freeze_time("2026-01-01 12:00:00") as frozen:
        token = tokens.issue_access(CLAIMS)
        frozen.tick(timedelta(minutes=14))
        assert tokens.verify_access(token) is not None
        frozen.tick(timedelta(minutes=2))
        assert tokens.verify_access(token) is None


def test_refresh_token_expires_after_seven_days(tokens):
    store = InMemoryRefreshTokenStore()
    with freeze_time("2026-01-01 12:00:00") as frozen:
        issued = tokens.issue_refresh(CLAIMS, store)
        frozen.tick(timedelta(days=7, seconds=1))
        assert tokens.verify_refresh(issued.token) is None
        assert store.find_active(issued.token) is None


def test_non_integer_subject_is_rejected():
    provider = StubTokenProvider()
    tokens = TokenService(provider)
    token = provider.create_access_token(identity="not-a-number")
    assert tokens.verify_access(token) is None


def test_purpose_bound_tokens_do_not_authenticate():
    provider = StubTokenProvider()
    svc = TokenService(provider)
    reset = provider.create_access_token(
        identity="1", additional_claims={"purpose": "password_reset", "email": "a@example.com"}
    )
    assert svc.verify_access(reset) is None
