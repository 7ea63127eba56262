"""Username and password format rules shared by registration and profile edits."""

from __future__ import annotations

import re

from socialconnect.models.user import USERNAME_RE
from socialconnect.services._shared.errors import ValidationError

PASSWORD_MIN_LENGTH = 8

_LETTER = re.compile(r"[A-Za-z]")
_DIGIT = re.compile(r"\d")


def check_password_policy(password: str) -> None:
    """
    Enforce the credential policy: at least 8 characters with a letter and a digit.

    :raises ValidationError: Describing the first rule that fails.
    """
    if not password or len(password) < PASSWORD_MIN_LENGTH:
        raise ValidationError(
            f"Password must be at least {PASSWORD_MIN_LENGTH} characters long",
            field_name="password",
        )
    if not _LETTER.search(password) or not _DIGIT.search(password):
        raise ValidationError(
            "Password must contain at least one letter and one number",
            field_name="password",
        )


def check_username(username: str) -> None:
    """:raises ValidationError: When the handle breaks the username format."""
    if not username or not USERNAME_RE.match(username):
        raise ValidationError(
            "Username must be 3-30 characters and contain only letters, numbers, "
            "and underscores",
            field_name="username",
        )
