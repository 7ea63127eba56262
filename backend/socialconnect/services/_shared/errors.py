"""
Service-layer exceptions.

Nothing here knows about Flask or HTTP. ``socialconnect.core.errors`` maps each
class to a status code and a problem+json body; the CLI prints the message.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from sqlalchemy.exc import IntegrityError


def violates(
    exc: IntegrityError, constraint_name: str, *, columns: Iterable[str] = ()
) -> bool:
    """
    Tell whether ``exc`` was raised by ``constraint_name``.

    PostgreSQL names the constraint in its message; SQLite only lists the
    offending ``table.column`` pairs, so every entry of ``columns`` (for
    example ``"users.email"``) matching also counts.
    """
    message = str(exc.orig).lower() if exc.orig else ""
    if constraint_name.lower() in message:
        return True
    cols = [c.lower() for c in columns]
    return bool(cols) and all(c in message for c in cols)


class ServiceError(Exception):
    """Root of the service errors; ``message`` is safe to show to clients."""

    def __init__(self, message: str = "Service error") -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class ValidationError(ServiceError):
    """Malformed or missing input that passed schema parsing."""

    def __init__(self, message: str = "Invalid input", *, field_name: str | None = None) -> None:
        super().__init__(message)
        self.field_name = field_name


class AuthenticationError(ServiceError):
    """Missing, invalid, revoked or expired credentials."""

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(message)


class AuthorizationError(ServiceError):
    """Valid identity lacking privilege, or content hidden by its owner."""

    def __init__(self, message: str = "Forbidden") -> None:
        super().__init__(message)


@dataclass(eq=False)
class NotFoundError(ServiceError):
    """
    Missing, or hidden from the caller; the message never says which.

    :param entity: Entity name such as ``"Post"``.
    :param key: Lookup key, kept for logging only.
    """

    entity: str
    key: str | int | None = None
    message: str = field(init=False)

    def __post_init__(self) -> None:
        self.message = f"{self.entity} not found"
        Exception.__init__(self, self.message)

    def __str__(self) -> str:
        return self.message


@dataclass(eq=False)
class ConflictError(ServiceError):
    """
    Duplicate username or email, double like, repeat follow.

    :param entity: Entity name such as ``"Follow"``.
    :param detail: Client-facing message.
    """

    entity: str
    detail: str
    message: str = field(init=False)

    def __post_init__(self) -> None:
        self.message = self.detail
        Exception.__init__(self, self.message)

    def __str__(self) -> str:
        return self.message


class StoreError(ServiceError):
    """Backing database failure. Logged server-side; callers see a generic message."""

    def __init__(self, message: str = "Internal server error") -> None:
        super().__init__(message)
