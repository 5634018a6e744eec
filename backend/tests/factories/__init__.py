"""Factory Boy base classes bound to the per-test SQLAlchemy session."""

from __future__ import annotations

import factory


class SQLAlchemySession:
    """Holder for the session installed by the ``_factories_session`` fixture."""

    _session = None

    @classmethod
    def set(cls, session):
        cls._session = session

    @classmethod
    def get(cls):
        """Return the installed session.

        :raises RuntimeError: If a factory runs outside the ``session`` fixture.
        """
        if cls._session is None:
            raise RuntimeError("Factories session not set. Did you pass the 'session' fixture?")
        return cls._session


class BaseFactory(factory.alchemy.SQLAlchemyModelFactory):
    """Flush (never commit) each created object into the per-test session."""

    class Meta:
        abstract = True
        # A callable keeps Factory Boy lazy so it picks up the per-test session.
        sqlalchemy_session_factory = SQLAlchemySession.get
        sqlalchemy_session_persistence = "flush"
