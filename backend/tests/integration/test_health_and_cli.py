"""Integration tests for the health probe and operator CLI."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from sqlalchemy.exc import OperationalError

from socialconnect.models.refresh_token import RefreshToken
from tests.factories.user import UserFactory
from tests.helpers.assertions import assert_problem


def test_health(client):
    resp = client.get("/api/v1/health")
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["status"] == "ok"
    assert body["db"] == "ok"
    assert body["refresh_tokens"] == {"backend": "sqlalchemy", "status": "ok"}
    assert "version" in body


def test_health_reports_degraded_database(client, session, monkeypatch):
    def unreachable(*_args, **_kwargs):
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))

    monkeypatch.setattr(session, "execute", unreachable)
    resp = client.get("/api/v1/health")

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["status"] == "degraded"
    assert body["db"] == "fail"
    assert body["refresh_tokens"]["status"] == "fail"


def test_unknown_route_is_problem_json(client):
    body = assert_problem(client.get("/api/v1/nope"), 404)
    assert body["error"] == "Route '/api/v1/nope' not found"


def test_cli_provision(app):
    user = UserFactory()
    result = app.test_cli_runner().invoke(args=["admin", "provision", str(user.id)])

    assert result.exit_code == 0, result.output
    assert "is now an administrator" in result.output
    assert user.is_admin is True


def test_cli_provision_unknown_user(app):
    result = app.test_cli_runner().invoke(args=["admin", "provision", "999999"])
    assert result.exit_code != 0
    assert "User not found" in result.output


def test_cli_purge_tokens(app, session):
    user = UserFactory()
    now = datetime.now(UTC)
    session.add_all(
        [
            RefreshToken(
                token_hash="a" * 64, user_id=user.id, expires_at=now - timedelta(days=1)
            ),
            RefreshToken(
                token_hash="b" * 64, user_id=user.id, expires_at=now + timedelta(days=1)
            ),
        ]
    )
    session.commit()

    result = app.test_cli_runner().invoke(args=["admin", "purge-tokens"])

    assert result.exit_code == 0, result.output
    assert "Purged 1 refresh token(s)." in result.output
    assert session.query(RefreshToken).count() == 1
