"""Thin ``requests`` client for the SocialConnect HTTP API."""

from __future__ import annotations

import logging
from typing import Any

import requests

from .session import DEFAULT_SESSION_KEY, ClientSession, InMemorySessionStore, SessionStore

logger = logging.getLogger(__name__)

REFRESH_PATH = "/auth/token/refresh"


class ApiError(Exception):
    """Non-2xx response, carrying the server's ``error`` message."""

    def __init__(self, status: int, message: str, payload: Any = None) -> None:
        super().__init__(f"{status}: {message}")
        self.status = status
        self.message = message
        self.payload = payload


class ApiClient:
    """
    Call the API with an explicitly passed :class:`ClientSession`.

    Nothing is kept in module state: callers hold the session returned by
    :meth:`login` (or :meth:`load_session`) and pass it to each call. When a
    call answers 401 the client refreshes the access token once, updates the
    session in place, saves it through the store and retries.

    :param base_url: API root including the version, e.g. ``http://host/api/v1``.
    :param store: Persistence for sessions; in-memory when omitted.
    :param http: Pre-configured :class:`requests.Session` to reuse connections.
    :param timeout: Per-request timeout in seconds.
    :param session_key: Key under which the session is saved.
    """

    def __init__(
        self,
        base_url: str,
        *,
        store: SessionStore | None = None,
        http: requests.Session | None = None,
        timeout: float = 10.0,
        session_key: str = DEFAULT_SESSION_KEY,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.store = store if store is not None else InMemorySessionStore()
        self.http = http or requests.Session()
        self.timeout = timeout
        self.session_key = session_key

    # ------------------------------------------------------------------ #
    # Session lifecycle
    # ------------------------------------------------------------------ #

    def load_session(self) -> ClientSession | None:
        raw = self.store.get(self.session_key)
        if raw is None:
            return None
        try:
            return ClientSession.from_json(raw)
        except ValueError:
            logger.warning("client.session_corrupt")
            self.store.delete(self.session_key)
            return None

    def save_session(self, session: ClientSession) -> None:
        self.store.put(self.session_key, session.to_json())

    def clear_session(self) -> None:
        self.store.delete(self.session_key)

    def login(self, identifier: str, password: str) -> ClientSession:
        """Authenticate with an email or username and persist the new session."""
        body = self._send("POST", "/auth/login", json={"identifier": identifier, "password": password})
        session = ClientSession(
            access_token=body["access_token"],
            refresh_token=body["refresh_token"],
            user=body.get("user") or {},
        )
        self.save_session(session)
        return session

    def logout(self, session: ClientSession) -> None:
        """Revoke the refresh token server-side, then forget the session locally."""
        try:
            self.request(
                "POST", "/auth/logout", session=session, json={"refresh_token": session.refresh_token}
            )
        finally:
            self.clear_session()

    def refresh(self, session: ClientSession) -> ClientSession:
        """
        Exchange the refresh token for a new access token.

        :raises ApiError: When the refresh token is rejected; the stored
            session is cleared in that case.
        """
        try:
            body = self._send("POST", REFRESH_PATH, json={"refresh_token": session.refresh_token})
        except ApiError:
            self.clear_session()
            raise
        session.access_token = body["access_token"]
        self.save_session(session)
        return session

    # ------------------------------------------------------------------ #
    # Requests
    # ------------------------------------------------------------------ #

    def request(
        self,
        method: str,
        path: str,
        *,
        session: ClientSession | None = None,
        json: Any = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """
        Perform a call, authenticated when ``session`` is given.

        :returns: Decoded JSON body (``None`` for empty responses).
        :raises ApiError: On any non-2xx status after the optional retry.
        """
        try:
            return self._send(method, path, session=session, json=json, params=params)
        except ApiError as exc:
            if exc.status != 401 or session is None or not session.refresh_token:
                raise
        logger.info("client.access_token_refresh", extra={"endpoint": path})
        self.refresh(session)
        return self._send(method, path, session=session, json=json, params=params)

    def get(self, path: str, *, session: ClientSession | None = None, **params: Any) -> Any:
        return self.request("GET", path, session=session, params=params or None)

    def post(self, path: str, *, session: ClientSession | None = None, json: Any = None) -> Any:
        return self.request("POST", path, session=session, json=json)

    def patch(self, path: str, *, session: ClientSession | None = None, json: Any = None) -> Any:
        return self.request("PATCH", path, session=session, json=json)

    def delete(self, path: str, *, session: ClientSession | None = None) -> Any:
        return self.request("DELETE", path, session=session)

    def _send(
        self,
        method: str,
        path: str,
        *,
        session: ClientSession | None = None,
        json: Any = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        headers = {"Accept": "application/json"}
        if session is not None:
            headers["Authorization"] = f"Bearer {session.access_token}"
        resp = self.http.request(
            method,
            f"{self.base_url}{path}",
            headers=headers,
            json=json,
            params=params,
            timeout=self.timeout,
        )
        payload: Any = None
        if resp.content:
            try:
                payload = resp.json()
            except ValueError:
                payload = resp.text
        if not resp.ok:
            message = payload.get("error") if isinstance(payload, dict) else None
            raise ApiError(resp.status_code, message or resp.reason or "Request failed", payload)
        return payload
