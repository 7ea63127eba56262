from __future__ import annotations

from typing import Protocol


class PasswordHasher(Protocol):
    """Port for one-way credential hashing.

    Implementations embed a per-call random salt in the digest, so two calls
    with the same plaintext yield different digests that both verify.
    """

    def hash(self, plaintext: str) -> str: ...

    def verify(self, plaintext: str, digest: str | None) -> bool:
        """Return ``True`` when ``plaintext`` matches ``digest``.

        MUST NOT raise: malformed, empty or unknown-scheme digests yield ``False``.
        """
        ...
