"""Pytest fixtures configuring an isolated transactional database layer.

Each test runs inside a SAVEPOINT-backed transaction against an in-memory
SQLite database so data changes never leak between cases. Collaborators
(media store, denylist) are replaced with fresh in-memory doubles per test.
"""

from __future__ import annotations

import os

import pytest
from accounts_api.core.config import TestingConfig
from accounts_api.core.extensions import (
    DENYLIST_KEY,
    MEDIA_STORE_KEY,
)
from accounts_api.core.extensions import db as _db  # Flask-SQLAlchemy instance
from accounts_api.factory import create_app  # application factory under test
from accounts_api.services._shared.ports import (
    InMemoryDenylistStore,
    InMemoryMediaStore,
    StubTokenProvider,
)
from sqlalchemy import event
from sqlalchemy.orm import scoped_session, sessionmaker


@pytest.fixture(scope="session")
def app(tmp_path_factory):
    """Create a Flask application configured for testing.

    Returns
    -------
    flask.Flask
        Application instance with :class:`TestingConfig` applied, uploads
        staged under a session temp dir and logging noise reduced.
    """
    # Ensure env-based config does not leak into tests
    os.environ.pop("DATABASE_URL", None)
    os.environ.pop("REDIS_URL", None)
    app = create_app(TestingConfig)
    app.config["UPLOAD_TMP_DIR"] = str(tmp_path_factory.mktemp("uploads"))
    app.logger.setLevel("WARNING")
    return app


@pytest.fixture(scope="session")
def db(app):
    """Create database tables once per test session.

    Yields
    ------
    flask_sqlalchemy.SQLAlchemy
        Database extension bound to the testing application.
    """
    with app.app_context():
        _db.create_all()
    yield _db
    with app.app_context():
        _db.session.remove()
        _db.drop_all()


@pytest.fixture(scope="session")
def connection(app, db):
    """Keep a dedicated DBAPI connection open for the whole session."""
    with app.app_context():
        conn = db.engine.connect()
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture()
def app_ctx(app):
    """Push a fresh application context, and so a fresh ``g``, per test."""
    with app.app_context() as ctx:
        yield ctx


@pytest.fixture(scope="function")
def session(app_ctx, db, connection):
    """Provide a SQLAlchemy session wrapped in a nested transaction.

    Yields
    ------
    sqlalchemy.orm.scoping.scoped_session
        Scoped session bound to the shared connection; automatically rolled
        back after each test.

    Notes
    -----
    The session joins the connection in SQLAlchemy's default
    ``conservative_savepoint`` mode: its own commits and rollbacks only
    release or roll back an inner SAVEPOINT, so Unit of Work commits stay
    inside the per-test transaction.
    """
    # 1) Top-level transaction
    top_trans = connection.begin()

    # 2) Scoped session bound to the connection
    SessionFactory = sessionmaker(bind=connection, future=True)
    scoped = scoped_session(SessionFactory)

    # 3) SAVEPOINT per test
    nested = connection.begin_nested()

    # 4) Re-create SAVEPOINT when the previous nested transaction ends
    @event.listens_for(scoped(), "after_transaction_end")
    def _restart_savepoint(sess, trans):  # pragma: no cover
        if trans.nested and not trans._parent.nested:
            nonlocal nested
            nested = connection.begin_nested()

    # 5) Swap db.session so app code (UoW, repositories) uses this scoped session
    original_session = db.session
    db.session.remove()
    db.session = scoped

    try:
        yield scoped
    finally:
        scoped.remove()
        db.session = original_session
        top_trans.rollback()


@pytest.fixture()
def media_store(app) -> InMemoryMediaStore:
    """Install a fresh in-memory media store for the test."""
    store = InMemoryMediaStore()
    app.extensions[MEDIA_STORE_KEY] = store
    return store


@pytest.fixture()
def denylist(app) -> InMemoryDenylistStore:
    """Install a fresh in-memory access-token denylist for the test."""
    store = InMemoryDenylistStore()
    app.extensions[DENYLIST_KEY] = store
    return store


@pytest.fixture()
def tokens() -> StubTokenProvider:
    """Deterministic token provider for service-level tests."""
    return StubTokenProvider()


@pytest.fixture()
def make_upload(tmp_path):
    """Return a helper writing a small local file, as a staged upload would be."""

    def _make(name: str = "avatar.png", payload: bytes = b"\x89PNG fake") -> str:
        path = tmp_path / name
        path.write_bytes(payload)
        return str(path)

    return _make


@pytest.fixture()
def client(app, session, media_store, denylist):
    """Flask test client running against the transactional session."""
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
