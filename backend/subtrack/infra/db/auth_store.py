# comments in English; reST docstrings
from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from uuid import UUID

from sqlalchemy.exc import IntegrityError

from subtrack.models.base import as_utc
from subtrack.models.refresh_token import RefreshToken
from subtrack.models.user import User
from subtrack.services._shared.errors import ConflictError
from subtrack.services._shared.ports.auth_store import (
    AuthStore,
    RefreshTokenRecord,
    UserRecord,
)
from subtrack.uow.sqlalchemy_uow import SQLAlchemyUnitOfWork


def _user_record(user: User) -> UserRecord:
    return UserRecord(
        id=user.id,
        email=user.email,
        password_hash=user.password_hash,
        created_at=as_utc(user.created_at),
        updated_at=as_utc(user.updated_at),
    )


def _token_record(row: RefreshToken) -> RefreshTokenRecord:
    return RefreshTokenRecord(
        id=row.id,
        user_id=row.user_id,
        token=row.token,
        expires_at=as_utc(row.expires_at),
        revoked_at=as_utc(row.revoked_at) if row.revoked_at is not None else None,
        created_at=as_utc(row.created_at),
        updated_at=as_utc(row.updated_at),
    )


class SQLAlchemyAuthStore(AuthStore):
    """
    :class:`AuthStore` over the relational schema.

    Every method runs in its own :class:`SQLAlchemyUnitOfWork`; read-models
    are built before the commit so no expired ORM state escapes.

    :param uow_factory: Builds a unit of work (tests may inject one bound to
        a specific session).
    """

    def __init__(self, uow_factory: Callable[[], SQLAlchemyUnitOfWork] = SQLAlchemyUnitOfWork):
        self._uow_factory = uow_factory

    # ----------------------------- users -----------------------------

    def get_user_by_email(self, email: str) -> UserRecord | None:
        with self._uow_factory() as uow:
            user = uow.users.get_by_email(email)
            return _user_record(user) if user is not None else None

    def get_user_by_id(self, user_id: UUID) -> UserRecord | None:
        with self._uow_factory() as uow:
            user = uow.users.get(user_id)
            return _user_record(user) if user is not None else None

    def create_user(self, *, email: str, password_hash: str) -> UserRecord:
        try:
            with self._uow_factory() as uow:
                user = uow.users.create(email=email, password_hash=password_hash)
                uow.session.refresh(user)
                return _user_record(user)
        except IntegrityError as exc:
            # Lost a race against a concurrent registration of the same email.
            raise ConflictError("User", "email already registered") from exc

    # ------------------------- refresh tokens -------------------------

    def get_refresh_token(self, user_id: UUID) -> RefreshTokenRecord | None:
        with self._uow_factory() as uow:
            row = uow.refresh_tokens.get_by_user(user_id)
            return _token_record(row) if row is not None else None

    def save_refresh_token(
        self, *, user_id: UUID, token: str, expires_at: datetime
    ) -> RefreshTokenRecord:
        try:
            with self._uow_factory() as uow:
                row = uow.refresh_tokens.upsert_for_user(
                    user_id, token=token, expires_at=expires_at
                )
                uow.session.refresh(row)
                return _token_record(row)
        except IntegrityError as exc:
            raise ConflictError("RefreshToken", "could not store refresh token") from exc

    def revoke_refresh_token(
        self, *, user_id: UUID, revoked_at: datetime
    ) -> RefreshTokenRecord | None:
        with self._uow_factory() as uow:
            row = uow.refresh_tokens.get_by_user(user_id)
            if row is None:
                return None
            if row.revoked_at is None:
                uow.refresh_tokens.update(row, revoked_at=revoked_at)
                uow.session.refresh(row)
            return _token_record(row)

    def delete_refresh_tokens(self) -> int:
        with self._uow_factory() as uow:
            return uow.refresh_tokens.delete_all()
