"""Generic repository base for SQLAlchemy 2.x.

Repositories are persistence-only:

- no business rules, no token or password logic;
- no commit/rollback; the Unit of Work owns transactions;
- updates go through an explicit ``_updatable_fields`` whitelist.
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar, cast

from sqlalchemy import Select, delete, select
from sqlalchemy.orm import InstrumentedAttribute, Session

from subtrack.core.extensions import db

E = TypeVar("E")  # SQLAlchemy mapped entity type


class BaseRepository(Generic[E]):
    """Generic, persistence-only repository for a single aggregate.

    Subclasses MUST define ``model``; they MAY override
    ``_default_eagerload`` and ``_updatable_fields``.
    """

    #: SQLAlchemy mapped model (must be set by subclasses)
    model: type[E]

    def __init__(self, session: Session | None = None) -> None:
        """Initialise the repository with an optional SQLAlchemy session.

        :param session: Session shared across the Unit of Work scope. Falls back
            to the Flask-scoped session when omitted.
        :type session: :class:`sqlalchemy.orm.Session` | None
        """
        self._session: Session | None = session

    @property
    def session(self) -> Session:
        """Return the injected session, or the Flask-scoped one."""
        if self._session is not None:
            return self._session
        return cast(Session, db.session)

    # ------------------------------ Extensibility ----------------------------

    def _default_eagerload(self, stmt: Select[Any]) -> Select[Any]:
        return stmt

    def _pk_attr(self) -> InstrumentedAttribute[Any] | None:
        return getattr(self.model, "id", None)

    def _updatable_fields(self) -> set[str]:
        """Whitelist of keys :meth:`update` may assign (empty = none)."""
        return set()

    # --------------------------------- CRUD ----------------------------------

    def add(self, instance: E) -> E:
        """Stage a new entity and flush so defaults and constraints apply.

        :param instance: New entity instance.
        :type instance: E
        :returns: The same instance after ``flush()``.
        :rtype: E
        """
        self.session.add(instance)
        self.flush()
        return instance

    def get(self, entity_id: Any) -> E | None:
        """Retrieve a single entity by primary key.

        :raises RuntimeError: If no PK attribute can be detected.
        """
        pk_attr = self._pk_attr()
        if pk_attr is None:
            raise RuntimeError("BaseRepository.get requires a detectable PK attribute.")
        stmt = self._default_eagerload(select(self.model).where(pk_attr == entity_id))
        return cast(E | None, self.session.execute(stmt).scalars().first())

    def find_one_by(self, column: InstrumentedAttribute[Any], value: Any) -> E | None:
        """Return the first entity whose ``column`` equals ``value``."""
        stmt = self._default_eagerload(select(self.model).where(column == value))
        return cast(E | None, self.session.execute(stmt).scalars().first())

    def update(self, instance: E, **fields: Any) -> E:
        """Assign whitelisted ``fields`` and flush.

        :raises ValueError: On keys outside :meth:`_updatable_fields`.
        """
        unknown = [k for k in fields if k not in self._updatable_fields()]
        if unknown:
            raise ValueError(f"Unknown or non-updatable fields: {unknown}")
        for key, value in fields.items():
            setattr(instance, key, value)
        self.flush()
        return instance

    def delete_all(self) -> int:
        """Hard-delete every row of ``model``; returns the affected count."""
        result = self.session.execute(delete(self.model))
        return int(getattr(result, "rowcount", 0) or 0)

    def flush(self) -> None:
        self.session.flush()

