"""Unit tests for the Flask-JWT-Extended token provider."""

from __future__ import annotations

from datetime import timedelta

import pytest

from socialconnect.infra.jwt.flask_jwt_token_provider import JWTTokenProvider
from socialconnect.services._shared.ports import TokenDecodeError


@pytest.fixture()
def provider(app):
    with app.app_context():
        yield JWTTokenProvider()


def test_access_token_carries_identity_and_claims(provider):
    token = provider.create_access_token(identity="3", additional_claims={"username": "ada"})
    payload = provider.decode(token)

    assert payload["sub"] == "3"
    assert payload["type"] == "access"
    assert payload["username"] == "ada"
    assert payload["jti"]


def test_refresh_token_type(provider):
    token = provider.create_refresh_token(identity="3")
    assert provider.decode(token)["type"] == "refresh"


def test_tampered_token_is_rejected(provider):
    token = provider.create_access_token(identity="3")
    head, body, signature = token.split(".")
    forged = ".".join([head, body, signature[::-1]])

    with pytest.raises(TokenDecodeError):
        provider.decode(forged)


def test_expired_token_is_rejected(provider):
    token = provider.create_access_token(identity="3", expires_delta=timedelta(seconds=-1))
    with pytest.raises(TokenDecodeError):
        provider.decode(token)


@pytest.mark.parametrize("token", ["", "abc", "a.b.c"])
def test_malformed_token_is_rejected(provider, token):
    with pytest.raises(TokenDecodeError):
        provider.decode(token)
