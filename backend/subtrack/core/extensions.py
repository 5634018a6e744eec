"""Flask extension singletons shared by models, the CLI and migrations."""

from __future__ import annotations

from flask import Flask
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import MetaData

# Constraint names; the migration files rely on these patterns
convention = {
    "ix": "ix_%(table_name)s_%(column_0_name)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(naming_convention=convention)

db: SQLAlchemy = SQLAlchemy(session_options={"autoflush": False}, metadata=metadata)
migrate = Migrate(render_as_batch=True)


def init_app(app: Flask) -> None:
    """Bind SQLAlchemy and Flask-Migrate to ``app``.

    :param app: Application being configured.
    :type app: flask.Flask

    Importing :mod:`subtrack.models` registers the ``users`` and
    ``refresh_tokens`` tables on the shared metadata before Alembic reads it.
    """
    db.init_app(app)

    from subtrack import models as _models  # noqa: F401

    migrate.init_app(app, db)
