"""User model definition for the SocialConnect network."""

from __future__ import annotations

import re
from datetime import datetime
from typing import Any

from sqlalchemy import Boolean, DateTime, Enum, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, validates

from socialconnect.core.extensions import db

from .base import PKMixin, ReprMixin, SoftDeleteMixin, TimestampMixin

# --- Domain Enums ---
VISIBILITY_PUBLIC = "public"
VISIBILITY_PRIVATE = "private"
VISIBILITY_FOLLOWERS_ONLY = "followers_only"
VISIBILITY_CHOICES = (VISIBILITY_PUBLIC, VISIBILITY_PRIVATE, VISIBILITY_FOLLOWERS_ONLY)

ProfileVisibility = Enum(*VISIBILITY_CHOICES, name="profile_visibility")

USERNAME_RE = re.compile(r"^[A-Za-z0-9_]{3,30}$")
BIO_MAX_LENGTH = 160


class User(PKMixin, ReprMixin, TimestampMixin, SoftDeleteMixin, db.Model):
    """
    Account identity, credential and public profile.

    Accounts are never hard-deleted; administrators flip ``is_active``.

    Fields
    ------
    email : str
        Login address, stored lowercased and trimmed.
    username : str
        Public handle, 3-30 characters of letters, digits and underscores.
    password_hash : str
        Salted digest (write-only setter via ``password``).
    first_name, last_name : str
        Display names.
    bio : str | None
        Short profile blurb, at most 160 characters.
    avatar_url, website, location : str | None
        Free-form profile fields.
    is_admin : bool
        Grants access to the moderation console.
    email_verified : bool
        Set once the address is confirmed.
    profile_visibility : str
        One of ``public``, ``private`` or ``followers_only``.
    last_login : datetime | None
        Updated on each successful login.
    """

    __tablename__ = "users"

    # Columns
    email: Mapped[str] = mapped_column(String(254), nullable=False)
    username: Mapped[str] = mapped_column(String(30), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    bio: Mapped[str | None] = mapped_column(String(BIO_MAX_LENGTH), nullable=True)
    avatar_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    website: Mapped[str | None] = mapped_column(String(255), nullable=True)
    location: Mapped[str | None] = mapped_column(String(100), nullable=True)
    is_admin: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default="false"
    )
    email_verified: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default="false"
    )
    profile_visibility: Mapped[str] = mapped_column(
        ProfileVisibility, nullable=False, default=VISIBILITY_PUBLIC, server_default=VISIBILITY_PUBLIC
    )
    last_login: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Constraints & indexes
    __table_args__ = (
        UniqueConstraint("email", name="uq_users_email"),
        UniqueConstraint("username", name="uq_users_username"),
        Index("ix_users_is_active", "is_active"),
    )

    # -- credentials --
    @property
    def password(self) -> Any:  # pragma: no cover
        raise AttributeError("User.password can only be assigned; compare with verify_password().")

    @password.setter
    def password(self, raw: str) -> None:
        """Store the digest of ``raw`` using the configured hash method."""
        from socialconnect.infra.providers import get_password_hasher

        self.password_hash = get_password_hasher().hash(raw)

    def verify_password(self, raw: str) -> bool:
        from socialconnect.infra.providers import get_password_hasher

        return get_password_hasher().verify(raw, self.password_hash)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    # -- validators --
    @validates("email")
    def _normalize_email(self, key: str, value: str) -> str:
        """Lowercase and trim; the schema layer does the strict format check."""
        if not isinstance(value, str) or not value.strip():
            raise ValueError("Email is required.")
        email = value.strip().lower()
        local, _, domain = email.rpartition("@")
        if not local or "." not in domain:
            raise ValueError(f"Invalid email address: {email!r}")
        return email

    @validates("username")
    def _validate_username(self, key: str, value: str) -> str:
        if not isinstance(value, str):
            raise ValueError("Username is required.")
        v = value.strip()
        if not USERNAME_RE.match(v):
            raise ValueError(
                "Username must be 3-30 characters of letters, numbers and underscores."
            )
        return v

    @validates("profile_visibility")
    def _validate_visibility(self, key: str, value: str) -> str:
        if value not in VISIBILITY_CHOICES:
            raise ValueError(f"Invalid profile visibility: {value!r}")
        return value

    @validates("bio")
    def _validate_bio(self, key: str, value: str | None) -> str | None:
        if value is not None and len(value) > BIO_MAX_LENGTH:
            raise ValueError(f"Bio must be at most {BIO_MAX_LENGTH} characters.")
        return value
