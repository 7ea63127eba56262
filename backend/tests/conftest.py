"""Pytest fixtures configuring an isolated transactional database layer.

Each test runs inside an outer transaction against an in-memory SQLite
database. Application sessions join it through SAVEPOINTs, so service
commits are visible to later requests in the same test and everything is
rolled back afterwards.
"""

from __future__ import annotations

import os

import pytest
from sqlalchemy import event
from sqlalchemy.orm import scoped_session, sessionmaker

from socialconnect.core.config import TestingConfig
from socialconnect.core.extensions import db as _db
from socialconnect.factory import create_app


@pytest.fixture(scope="session")
def app():
    """Create a Flask application configured for testing.

    Returns
    -------
    flask.Flask
        Application instance with :class:`TestingConfig` applied and logging
        noise reduced.
    """
    # Ensure env-based config does not leak into tests
    os.environ.pop("DATABASE_URL", None)
    app = create_app(TestingConfig)
    app.logger.setLevel("WARNING")
    return app


@pytest.fixture(scope="session")
def db(app):
    """Create database tables once per test session.

    Parameters
    ----------
    app: flask.Flask
        Application fixture ensuring the Flask context is available.

    Yields
    ------
    flask_sqlalchemy.SQLAlchemy
        Database extension bound to the testing application.

    Notes
    -----
    pysqlite defers ``BEGIN`` on its own, which breaks SAVEPOINTs; the
    listeners hand transaction control back to SQLAlchemy.
    """
    with app.app_context():
        engine = _db.engine
        if engine.dialect.name == "sqlite":

            @event.listens_for(engine, "connect")
            def _disable_pysqlite_begin(dbapi_connection, _record):  # pragma: no cover
                dbapi_connection.isolation_level = None

            @event.listens_for(engine, "begin")
            def _emit_begin(conn):  # pragma: no cover
                conn.exec_driver_sql("BEGIN")

        _db.create_all()
        yield _db
        _db.session.remove()
        _db.drop_all()


@pytest.fixture(scope="session")
def connection(db):
    """Keep a dedicated DBAPI connection open for the whole session.

    Yields
    ------
    sqlalchemy.engine.Connection
        Connection reused by the per-test outer transaction.
    """
    conn = db.engine.connect()
    try:
        yield conn
    finally:
        conn.close()


class _TestScopedSession(scoped_session):
    """Scoped session that survives app-context teardown.

    Flask-SQLAlchemy calls ``remove()`` after every request; closing here
    would detach factory-built objects the test still holds.
    """

    def remove(self) -> None:
        pass

    def dispose(self) -> None:
        super().remove()


@pytest.fixture(scope="function")
def session(db, connection):
    """Provide a SQLAlchemy session joined to a per-test transaction.

    Yields
    ------
    sqlalchemy.orm.scoping.scoped_session
        Scoped session bound to the shared connection; rolled back after
        each test.

    Notes
    -----
    ``create_savepoint`` makes every session commit a SAVEPOINT release, and
    ``expire_on_commit=False`` keeps factory-built objects loaded across the
    service layer's commits.
    """
    top_trans = connection.begin()

    SessionFactory = sessionmaker(
        bind=connection,
        expire_on_commit=False,
        join_transaction_mode="create_savepoint",
    )
    scoped = _TestScopedSession(SessionFactory)

    # Monkey-patch db.session so app code uses this scoped session
    original_session = db.session
    db.session.remove()
    db.session = scoped

    try:
        yield scoped
    finally:
        scoped.dispose()
        db.session = original_session
        top_trans.rollback()


@pytest.fixture()
def client(app, session):
    """Return a Flask test client sharing the transactional session."""
    return app.test_client()


@pytest.fixture(scope="session")
def faker():
    """Provide a :class:`faker.Faker` instance seeded for deterministic tests."""
    from faker import Faker

    fk = Faker()
    Faker.seed(1337)
    return fk


# -- Hook up Factory Boy to pytest SQLAlchemy session --------------------------
@pytest.fixture(autouse=True)
def _factories_session(session):
    """Wire Factory Boy's session helper to the transactional session fixture."""
    from tests.factories import SQLAlchemySession

    SQLAlchemySession.set(session)
    yield


@pytest.fixture()
def auth_headers(app):
    """Return a callable building ``Authorization`` headers for a user."""
    from tests.helpers.auth import bearer_headers

    return bearer_headers
