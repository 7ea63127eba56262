"""
SQLAlchemy Units of Work over the Flask-scoped session.

Both variants expose the same repositories bound to ``db.session()``:

* :class:`SQLAlchemyUnitOfWork` commits on a clean exit and rolls back when
  the block raises. Commands (register, like, follow, deactivate...) use it.
* :class:`SQLAlchemyReadOnlyUnitOfWork` always rolls back and refuses writes
  both at the ORM level and at the SQL level. Feed, profile and inbox
  queries use it.
"""

from __future__ import annotations

from contextlib import suppress
from typing import Any

from flask import current_app
from sqlalchemy import event, text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import IntegrityError, InvalidRequestError, SQLAlchemyError
from sqlalchemy.orm import Session, SessionTransaction

from socialconnect.core.extensions import db
from socialconnect.repositories import (
    CommentRepository,
    FollowRepository,
    LikeRepository,
    NotificationRepository,
    PostRepository,
    UserRepository,
)
from socialconnect.services._shared.errors import StoreError
from socialconnect.services._shared.ports import RefreshTokenStore
from socialconnect.uow.base import UnitOfWork

WRITE_KEYWORDS = (
    "insert",
    "update",
    "delete",
    "merge",
    "alter",
    "drop",
    "truncate",
    "create",
    "replace",
    "grant",
    "revoke",
)
SET_TRANSACTION_DIALECTS = frozenset({"postgresql", "mysql", "mariadb"})


class ReadOnlyViolation(RuntimeError):
    """A write was attempted inside a read-only Unit of Work."""


class SQLAlchemyRepositoryContainer:
    """Repositories sharing one SQLAlchemy session."""

    def __init__(self, *, session: Session) -> None:
        self.session = session
        self.users = UserRepository(session=session)
        self.posts = PostRepository(session=session)
        self.likes = LikeRepository(session=session)
        self.comments = CommentRepository(session=session)
        self.follows = FollowRepository(session=session)
        self.notifications = NotificationRepository(session=session)
        self._refresh_tokens: RefreshTokenStore | None = None

    @property
    def refresh_tokens(self) -> RefreshTokenStore:
        """Refresh token store for the configured backend, bound to this session."""
        if self._refresh_tokens is None:
            from socialconnect.infra.providers import get_refresh_token_store

            self._refresh_tokens = get_refresh_token_store(self.session)
        return self._refresh_tokens


class SQLAlchemyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    Read-write scope. The session begins lazily on the first statement.

    Repositories flush as they go so generated keys and constraint
    violations surface inside the block; the commit happens on exit.
    """

    def __init__(self) -> None:
        super().__init__(session=db.session())

    def __enter__(self) -> SQLAlchemyUnitOfWork:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            self.rollback()
            return
        try:
            self.commit()
        except Exception:
            self.rollback()
            raise

    def commit(self) -> None:
        """
        :raises IntegrityError: A unique or check constraint failed at commit.
        :raises StoreError: Any other database failure.
        """
        try:
            self.session.commit()
        except IntegrityError:
            raise
        except SQLAlchemyError as exc:
            raise StoreError() from exc

    def rollback(self) -> None:
        self.session.rollback()


class _WriteGuard:
    """
    Session and connection listeners that raise :class:`ReadOnlyViolation`.

    The ORM hook catches pending objects before any SQL is built; the cursor
    hook catches bulk statements and raw SQL.
    """

    def __init__(self, session: Session, target: Connection | Any) -> None:
        self.session = session
        self.target = target
        self.installed = False

    @staticmethod
    def _before_flush(session: Session, flush_context: Any, instances: Any) -> None:
        if session.new or session.dirty or session.deleted:
            raise ReadOnlyViolation(
                "Read-only UnitOfWork: ORM flush blocked (new/dirty/deleted objects present)."
            )

    @staticmethod
    def _before_cursor_execute(
        conn: Any, cursor: Any, statement: str, parameters: Any, context: Any, executemany: bool
    ) -> None:
        keyword = statement.lstrip().split(None, 1)[0].lower() if statement else ""
        if keyword in WRITE_KEYWORDS:
            raise ReadOnlyViolation(
                f"Read-only UnitOfWork: SQL statement blocked: {keyword.upper()}"
            )

    def install(self) -> None:
        if self.installed:
            return
        event.listen(self.session, "before_flush", self._before_flush)
        event.listen(self.target, "before_cursor_execute", self._before_cursor_execute)
        self.installed = True

    def remove(self) -> None:
        if not self.installed:
            return
        with suppress(InvalidRequestError):
            event.remove(self.session, "before_flush", self._before_flush)
        with suppress(InvalidRequestError):
            event.remove(self.target, "before_cursor_execute", self._before_cursor_execute)
        self.installed = False


class SQLAlchemyReadOnlyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    Read-only scope that always rolls back.

    :param isolation_level: Isolation hint such as ``"READ COMMITTED"``;
        ``None`` keeps the connection default.
    :param enforce_db_readonly: Also issue ``SET TRANSACTION READ ONLY``.

    Notes
    -----
    ``SET TRANSACTION`` is only issued on PostgreSQL and MySQL/MariaDB and
    only when this scope owns the transaction. SQLite relies on the write
    guards alone.
    """

    def __init__(
        self,
        *,
        isolation_level: str | None = "READ COMMITTED",
        enforce_db_readonly: bool = True,
    ) -> None:
        super().__init__(session=db.session())
        self.isolation_level = isolation_level
        self.enforce_db_readonly = enforce_db_readonly
        self._txn: SessionTransaction | None = None
        self._guard: _WriteGuard | None = None

    def __enter__(self) -> SQLAlchemyReadOnlyUnitOfWork:
        """
        Open (or join) a transaction and install the write guards.

        An earlier write in the same request leaves a transaction open; the
        scope then joins it and leaves its fate to the owner.
        """
        try:
            self._txn = self.session.begin()
        except InvalidRequestError:
            self._txn = None

        conn = self.session.connection()
        self._guard = _WriteGuard(self.session, conn)
        self._guard.install()

        if self._txn is not None and conn.dialect.name in SET_TRANSACTION_DIALECTS:
            self._apply_transaction_characteristics()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if self._txn is not None:
                with suppress(SQLAlchemyError):
                    self.session.rollback()
                self._txn = None
        finally:
            if self._guard is not None:
                self._guard.remove()
                self._guard = None

    def _apply_transaction_characteristics(self) -> None:
        try:
            if self.isolation_level:
                level = self.isolation_level.upper().strip()
                self.session.execute(text(f"SET TRANSACTION ISOLATION LEVEL {level}"))
            if self.enforce_db_readonly:
                self.session.execute(text("SET TRANSACTION READ ONLY"))
        except SQLAlchemyError as exc:
            current_app.logger.warning(
                "SET TRANSACTION directives failed (%s). Falling back to guards-only.", exc
            )

    def commit(self) -> None:
        """:raises ReadOnlyViolation: always."""
        raise ReadOnlyViolation("Read-only UnitOfWork does not allow commit().")

    def rollback(self) -> None:
        self.session.rollback()
