"""
SQLAlchemy implementation of UnitOfWork for Flask.
"""

from __future__ import annotations

from sqlalchemy.orm import Session

from subtrack.core.extensions import db
from subtrack.repositories import RefreshTokenRepository, UserRepository
from subtrack.uow.base import UnitOfWork


class SQLAlchemyUnitOfWork(UnitOfWork):
    """
    Read-write UoW using the Flask-scoped session.

    All repositories share one session, so a ``with`` block is one transaction:
    committed on normal exit, rolled back when the block raises.
    """

    def __init__(self, session: Session | None = None) -> None:
        self.session: Session = session if session is not None else db.session
        self.users = UserRepository(session=self.session)
        self.refresh_tokens = RefreshTokenRepository(session=self.session)

    def __enter__(self) -> SQLAlchemyUnitOfWork:
        # The session begins lazily on first use.
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            try:
                self.commit()
            except Exception:
                self.rollback()
                raise
        else:
            self.rollback()

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()
