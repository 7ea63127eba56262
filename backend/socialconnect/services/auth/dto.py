# socialconnect/services/auth/dto.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from socialconnect.services.users.dto import UserOut, UserStatsOut

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class RegisterIn:
    email: str
    username: str
    password: str
    first_name: str
    last_name: str


@dataclass(frozen=True, slots=True)
class LoginIn:
    """
    Input DTO for login.

    :param identifier: Email address or username.
    :param password: Raw password (to be verified).
    """

    identifier: str
    password: str


@dataclass(frozen=True, slots=True)
class PasswordChangeIn:
    current_password: str
    new_password: str


@dataclass(frozen=True, slots=True)
class PasswordResetConfirmIn:
    email: str
    reset_token: str
    new_password: str


# --------------------------- Claims & Output DTOs -------------------------- #


@dataclass(frozen=True, slots=True)
class TokenClaims:
    """
    Identity claims shared by access and refresh tokens.

    :param user_id: Subject of the token.
    :param email: Email at issuance time.
    :param username: Username at issuance time.
    :param is_admin: Admin flag at issuance time. Not re-checked until expiry.
    """

    user_id: int
    email: str
    username: str
    is_admin: bool = False

    def to_claims(self) -> dict[str, Any]:
        """Extra JWT claims; the user id travels as ``sub``."""
        return {"email": self.email, "username": self.username, "is_admin": self.is_admin}

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> TokenClaims:
        """
        Rebuild claims from a verified JWT payload.

        :raises ValueError: When ``sub`` is not an integer id.
        """
        return cls(
            user_id=int(payload["sub"]),
            email=str(payload.get("email", "")),
            username=str(payload.get("username", "")),
            is_admin=bool(payload.get("is_admin", False)),
        )


@dataclass(frozen=True, slots=True)
class AuthOut:
    """Successful login: profile, counts and a fresh token pair."""

    user: UserOut
    stats: UserStatsOut
    access_token: str
    refresh_token: str


@dataclass(frozen=True, slots=True)
class AccessTokenOut:
    access_token: str


@dataclass(frozen=True, slots=True)
class UsernameAvailabilityOut:
    available: bool
    error: str | None = None
