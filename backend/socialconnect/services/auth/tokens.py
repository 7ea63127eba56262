"""
TokenService
============

Issue and verify the two token kinds. Both carry the same claim shape
(:class:`TokenClaims`) and differ in lifetime and in how far they are
trusted:

- Access tokens are verified statelessly on every request.
- Refresh tokens are only as good as their row in the
  :class:`RefreshTokenStore`; a valid signature alone is never enough.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from socialconnect.services._shared.ports import (
    RefreshTokenStore,
    TokenDecodeError,
    TokenProvider,
)
from socialconnect.services.auth.dto import TokenClaims

ACCESS = "access"
REFRESH = "refresh"


@dataclass(frozen=True, slots=True)
class IssuedToken:
    token: str
    expires_at: datetime


class TokenService:
    """
    Thin policy layer over a :class:`TokenProvider`.

    :param provider: Signing/decoding adapter.
    :param access_ttl: Access token lifetime.
    :param refresh_ttl: Refresh token lifetime.
    """

    def __init__(
        self,
        provider: TokenProvider,
        *,
        access_ttl: timedelta = timedelta(minutes=15),
        refresh_ttl: timedelta = timedelta(days=7),
    ) -> None:
        self.provider = provider
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl

    @classmethod
    def from_config(cls, config) -> TokenService:
        """Build from a Flask config mapping using the JWT adapter."""
        from socialconnect.infra.providers import get_token_provider

        return cls(
            get_token_provider(),
            access_ttl=config.get("JWT_ACCESS_TOKEN_EXPIRES", timedelta(minutes=15)),
            refresh_ttl=config.get("JWT_REFRESH_TOKEN_EXPIRES", timedelta(days=7)),
        )

    # -------------------------------- issue --------------------------------

    def issue_access(self, claims: TokenClaims) -> str:
        return self.provider.create_access_token(
            identity=str(claims.user_id),
            additional_claims=claims.to_claims(),
            expires_delta=self.access_ttl,
        )

    def issue_refresh(self, claims: TokenClaims, store: RefreshTokenStore) -> IssuedToken:
        """
        Sign a refresh token and persist its record before returning it.

        :param store: Store that must know about the token before the client does.
        """
        expires_at = datetime.now(UTC) + self.refresh_ttl
        token = self.provider.create_refresh_token(
            identity=str(claims.user_id),
            additional_claims=claims.to_claims(),
            expires_delta=self.refresh_ttl,
        )
        store.insert(token, claims.user_id, expires_at)
        return IssuedToken(token=token, expires_at=expires_at)

    # ------------------------------- verify --------------------------------

    def _verify(self, token: str | None, expected_type: str) -> TokenClaims | None:
        if not token:
            return None
        try:
            payload = self.provider.decode(token)
        except TokenDecodeError:
            return None
        if payload.get("type") != expected_type:
            return None
        # Purpose-bound tokens (password reset) never authenticate requests.
        if payload.get("purpose"):
            return None
        try:
            return TokenClaims.from_payload(payload)
        except (KeyError, TypeError, ValueError):
            return None

    def verify_access(self, token: str | None) -> TokenClaims | None:
        """Return claims for a well-signed, unexpired access token, else ``None``."""
        return self._verify(token, ACCESS)

    def verify_refresh(self, token: str | None) -> TokenClaims | None:
        """
        Signature and expiry check only.

        Callers MUST also require ``store.find_active(token)`` before trusting it.
        """
        return self._verify(token, REFRESH)
