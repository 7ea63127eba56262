from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any, Protocol


class TokenDecodeError(Exception):
    """Raised by providers when a token cannot be trusted.

    Covers bad signatures, malformed input and expired tokens alike; callers
    are not expected to tell them apart.
    """


class TokenProvider(Protocol):
    """Port for issuing and decoding signed tokens."""

    def create_access_token(
        self,
        *,
        identity: str,
        additional_claims: dict[str, Any] | None = None,
        expires_delta: timedelta | None = None,
    ) -> str: ...

    def create_refresh_token(
        self,
        *,
        identity: str,
        additional_claims: dict[str, Any] | None = None,
        expires_delta: timedelta | None = None,
    ) -> str: ...

    def decode(self, token: str) -> dict[str, Any]:
        """Return the verified payload or raise :class:`TokenDecodeError`."""
        ...


class StubTokenProvider(TokenProvider):
    """Deterministic token provider used in unit tests.

    Tokens are opaque sequence strings; payloads live in memory. Expiry is
    evaluated against ``datetime.now(UTC)`` at decode time so freezegun can
    drive it.
    """

    def __init__(self) -> None:
        self._seq = 0
        self._issued: dict[str, dict[str, Any]] = {}

    def _mk(
        self,
        *,
        identity: str,
        ttype: str,
        exp_delta: timedelta,
        additional_claims: dict[str, Any] | None = None,
    ) -> str:
        self._seq += 1
        now = datetime.now(UTC)
        token = f"{ttype}.{identity}.{self._seq}"
        payload: dict[str, Any] = {
            "sub": identity,
            "type": ttype,
            "jti": f"jti-{self._seq}",
            "iat": int(now.timestamp()),
            "exp": int((now + exp_delta).timestamp()),
        }
        if additional_claims:
            payload.update(additional_claims)
        self._issued[token] = payload
        return token

    def create_access_token(
        self,
        *,
        identity: str,
        additional_claims: dict[str, Any] | None = None,
        expires_delta: timedelta | None = None,
    ) -> str:
        return self._mk(
            identity=identity,
            ttype="access",
            exp_delta=expires_delta or timedelta(minutes=15),
            additional_claims=additional_claims,
        )

    def create_refresh_token(
        self,
        *,
        identity: str,
        additional_claims: dict[str, Any] | None = None,
        expires_delta: timedelta | None = None,
    ) -> str:
        return self._mk(
            identity=identity,
            ttype="refresh",
            exp_delta=expires_delta or timedelta(days=7),
            additional_claims=additional_claims,
        )

    def decode(self, token: str) -> dict[str, Any]:
        payload = self._issued.get(token)
        if payload is None:
            raise TokenDecodeError("Unknown token")
        if payload["exp"] <= int(datetime.now(UTC).timestamp()):
            raise TokenDecodeError("Token has expired")
        return dict(payload)
