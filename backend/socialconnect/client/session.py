"""Explicit client-side auth session and its pluggable persistence."""

from __future__ import annotations

import json
import threading
from dataclasses import asdict, dataclass, field
from typing import Any, Protocol

DEFAULT_SESSION_KEY = "socialconnect.session"


@dataclass(slots=True)
class ClientSession:
    """
    Tokens and user snapshot returned by a successful login.

    :ivar access_token: Short-lived bearer credential; replaced on refresh.
    :ivar refresh_token: Long-lived credential used only against ``/auth/token/refresh``.
    :ivar user: User payload from the login response.
    """

    access_token: str
    refresh_token: str
    user: dict[str, Any] = field(default_factory=dict)

    @property
    def user_id(self) -> int | None:
        raw = self.user.get("id")
        return int(raw) if raw is not None else None

    def to_json(self) -> str:
        return json.dumps(asdict(self))

    @classmethod
    def from_json(cls, raw: str) -> ClientSession:
        """
        Rebuild a session serialized by :meth:`to_json`.

        :raises ValueError: If the payload is not a session document.
        """
        data = json.loads(raw)
        if not isinstance(data, dict) or "access_token" not in data:
            raise ValueError("Stored value is not a client session.")
        return cls(
            access_token=str(data["access_token"]),
            refresh_token=str(data.get("refresh_token") or ""),
            user=dict(data.get("user") or {}),
        )


class SessionStore(Protocol):
    """Key-value persistence the client saves sessions through."""

    def get(self, key: str) -> str | None: ...

    def put(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class InMemorySessionStore(SessionStore):
    """Process-local store, suitable for scripts and tests."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def put(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)
