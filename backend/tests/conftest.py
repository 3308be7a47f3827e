"""Pytest fixtures configuring an isolated transactional database layer.

Each test runs inside an outer transaction on a shared in-memory SQLite
connection; the session joins it through SAVEPOINTs, so commits made by the
code under test are discarded when the test ends.
"""

from __future__ import annotations

import os

import pytest
from sqlalchemy import event
from sqlalchemy.orm import scoped_session, sessionmaker

from boxoffice.core.config import TestingConfig
from boxoffice.core.extensions import db as _db  # Flask-SQLAlchemy instance
from boxoffice.factory import create_app  # application factory under test


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

    Yields
    ------
    flask_sqlalchemy.SQLAlchemy
        Database extension bound to the testing application.

    Notes
    -----
    pysqlite defers ``BEGIN`` on its own, which breaks SAVEPOINT nesting. The
    listeners hand transaction control to SQLAlchemy instead.
    """
    with app.app_context():
        engine = _db.engine

        @event.listens_for(engine, "connect")
        def _disable_pysqlite_begin(dbapi_connection, connection_record):  # pragma: no cover
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
    """Keep a dedicated connection open for the whole session."""
    conn = db.engine.connect()
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture(scope="function")
def session(db, connection):
    """Provide a SQLAlchemy session joined to a per-test outer transaction.

    Yields
    ------
    sqlalchemy.orm.scoping.scoped_session
        Scoped session installed as ``db.session`` for the duration of the
        test. ``commit()`` releases a SAVEPOINT; the outer transaction is
        rolled back afterwards.
    """
    outer = connection.begin()
    scoped = scoped_session(
        sessionmaker(bind=connection, join_transaction_mode="create_savepoint")
    )

    # Monkey-patch db.session so app code uses this scoped session
    original_session = db.session
    db.session = scoped

    try:
        yield scoped
    finally:
        scoped.remove()
        db.session = original_session
        outer.rollback()


@pytest.fixture()
def client(app, session):
    """Flask test client sharing the transactional session."""
    with app.app_context():
        yield app.test_client()


@pytest.fixture()
def session_manager(app, session):
    """The application's wired :class:`SessionManager` (SQLAlchemy stores)."""
    return app.extensions["session_manager"]


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
