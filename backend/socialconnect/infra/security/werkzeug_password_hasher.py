# socialconnect/infra/security/werkzeug_password_hasher.py
from __future__ import annotations

from dataclasses import dataclass

from werkzeug.security import check_password_hash, generate_password_hash

from socialconnect.services._shared.ports import PasswordHasher


@dataclass(slots=True)
class WerkzeugPasswordHasher(PasswordHasher):
    """
    Adapter over :mod:`werkzeug.security` (scrypt with a random salt by default).

    :param method: Werkzeug method string, e.g. ``"scrypt"`` or ``"pbkdf2:sha256"``.
    :param salt_length: Salt length in characters.
    """

    method: str = "scrypt"
    salt_length: int = 16

    def hash(self, plaintext: str) -> str:
        if not isinstance(plaintext, str) or not plaintext:
            raise ValueError("Password must be a non-empty string.")
        return generate_password_hash(plaintext, method=self.method, salt_length=self.salt_length)

    def verify(self, plaintext: str, digest: str | None) -> bool:
        if not digest or not isinstance(plaintext, str):
            return False
        try:
            return bool(check_password_hash(digest, plaintext))
        except (ValueError, TypeError):
            # Unknown scheme or truncated digest.
            return False
