"""Shared fixtures: one testing app, one SQLite connection, a SAVEPOINT per test.

Application code reaches the database through ``db.session``; the ``session``
fixture swaps that attribute for a scoped session bound to a connection whose
outer transaction is rolled back after every test, so commits made by the
auth store never leak between cases.
"""

from __future__ import annotations

import os

import pytest
from sqlalchemy import event
from sqlalchemy.orm import scoped_session, sessionmaker

from subtrack.core.config import TestingConfig
from subtrack.core.extensions import db as _db
from subtrack.factory import create_app
from tests.helpers.auth import bearer


@pytest.fixture(scope="session")
def app():
    """Local-mode application built from :class:`TestingConfig`."""
    os.environ.pop("DATABASE_URL", None)
    app = create_app(TestingConfig, instance_relative_config=False)
    app.logger.setLevel("WARNING")
    return app


@pytest.fixture(scope="session")
def db(app):
    """Create the schema once and keep an app context pushed for the session."""
    with app.app_context():
        _db.create_all()
        yield _db
        _db.session.remove()
        _db.drop_all()


@pytest.fixture(scope="session")
def connection(db):
    """Single DBAPI connection reused by every test transaction."""
    conn = db.engine.connect()
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture(scope="function")
def session(db, connection):
    """
    Scoped session inside an outer transaction that is always rolled back.

    The session joins the connection's SAVEPOINT, so ``commit()`` in a unit of
    work only releases a nested savepoint. A new SAVEPOINT is opened whenever
    SQLAlchemy ends the current one.
    """
    outer = connection.begin()
    scoped = scoped_session(sessionmaker(bind=connection, future=True))
    nested = connection.begin_nested()

    @event.listens_for(scoped(), "after_transaction_end")
    def _restart_savepoint(sess, trans):  # pragma: no cover
        nonlocal nested
        if trans.nested and not trans._parent.nested:
            nested = connection.begin_nested()

    original_session = db.session
    db.session.remove()
    db.session = scoped

    try:
        yield scoped
    finally:
        scoped.remove()
        db.session = original_session
        outer.rollback()


@pytest.fixture(scope="session")
def faker():
    """Seeded :class:`faker.Faker` instance."""
    from faker import Faker

    fk = Faker()
    Faker.seed(1337)
    return fk


@pytest.fixture(autouse=True)
def _factories_session(session):
    """Point Factory Boy at the per-test session."""
    from tests.factories import SQLAlchemySession

    SQLAlchemySession.set(session)
    yield


# -- HTTP helpers ---------------------------------------------------------------
@pytest.fixture()
def client(app, session):
    """Flask test client sharing the transactional session."""
    return app.test_client()


@pytest.fixture()
def user(session):
    """Persisted user with the default factory password."""
    from tests.factories.user import UserFactory

    return UserFactory()


@pytest.fixture()
def access_token(app, user):
    """Session token minted for :func:`user` by the app's own issuer."""
    from subtrack.auth.providers import get_provider

    return get_provider(app).issuer.mint(user.id)


@pytest.fixture()
def auth_header(access_token):
    """``Authorization`` header carrying :func:`access_token`."""
    return bearer(access_token)
