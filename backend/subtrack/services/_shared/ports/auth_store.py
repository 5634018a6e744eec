"""Persistence capability required by the authentication services.

:class:`AuthStore` is the only surface the auth services use to read and
write users and refresh tokens. :class:`InMemoryAuthStore` backs unit tests;
:class:`subtrack.infra.db.auth_store.SQLAlchemyAuthStore` backs the app.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID, uuid4

from subtrack.models.base import as_utc
from subtrack.services._shared.errors import ConflictError


@dataclass(frozen=True, slots=True)
class UserRecord:
    """
    Read-model for a user.

    :ivar id: User identifier.
    :ivar email: Normalized email.
    :ivar password_hash: bcrypt hash.
    :ivar created_at: Creation timestamp.
    :ivar updated_at: Last update timestamp.
    """

    id: UUID
    email: str
    password_hash: str
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True, slots=True)
class RefreshTokenRecord:
    """
    Read-model for a user's current refresh token.

    :ivar id: Record identifier.
    :ivar user_id: Owner.
    :ivar token: Opaque 64-char hex value.
    :ivar expires_at: Absolute expiry (UTC).
    :ivar revoked_at: Revocation instant, ``None`` while active.
    """

    id: UUID
    user_id: UUID
    token: str
    expires_at: datetime
    revoked_at: datetime | None
    created_at: datetime
    updated_at: datetime

    @property
    def revoked(self) -> bool:
        return self.revoked_at is not None

    def expired(self, now: datetime) -> bool:
        return as_utc(self.expires_at) < as_utc(now)

    def usable(self, now: datetime) -> bool:
        """Return ``True`` when neither revoked nor expired at ``now``."""
        return not self.revoked and not self.expired(now)


class AuthStore(Protocol):
    """
    User and refresh-token persistence.

    Each call is its own transaction. Lookups return ``None`` when nothing
    matches; writes raise :class:`ConflictError` on uniqueness violations.
    """

    def get_user_by_email(self, email: str) -> UserRecord | None: ...

    def get_user_by_id(self, user_id: UUID) -> UserRecord | None: ...

    def create_user(self, *, email: str, password_hash: str) -> UserRecord: ...

    def get_refresh_token(self, user_id: UUID) -> RefreshTokenRecord | None: ...

    def save_refresh_token(
        self, *, user_id: UUID, token: str, expires_at: datetime
    ) -> RefreshTokenRecord:
        """Insert the user's record, or replace it and clear ``revoked_at``."""
        ...

    def revoke_refresh_token(
        self, *, user_id: UUID, revoked_at: datetime
    ) -> RefreshTokenRecord | None:
        """Set ``revoked_at`` unless already set; ``None`` when no record exists."""
        ...

    def delete_refresh_tokens(self) -> int:
        """Hard-delete every refresh record. Administrative reset only."""
        ...


class InMemoryAuthStore(AuthStore):
    """
    Dictionary-backed :class:`AuthStore` for unit tests.

    .. note::
       A single lock serializes writes, standing in for database transactions.
    """

    def __init__(self, now: Callable[[], datetime] | None = None) -> None:
        self._users: dict[UUID, UserRecord] = {}
        self._tokens: dict[UUID, RefreshTokenRecord] = {}
        self._lock = threading.Lock()
        self._now = now

    def _timestamp(self) -> datetime:
        return self._now() if self._now else datetime.now(UTC)

    # ----------------------------- users -----------------------------

    def get_user_by_email(self, email: str) -> UserRecord | None:
        needle = email.strip().lower()
        return next((u for u in self._users.values() if u.email == needle), None)

    def get_user_by_id(self, user_id: UUID) -> UserRecord | None:
        return self._users.get(user_id)

    def create_user(self, *, email: str, password_hash: str) -> UserRecord:
        with self._lock:
            normalized = email.strip().lower()
            if any(u.email == normalized for u in self._users.values()):
                raise ConflictError("User", "email already registered")
            now = self._timestamp()
            record = UserRecord(
                id=uuid4(),
                email=normalized,
                password_hash=password_hash,
                created_at=now,
                updated_at=now,
            )
            self._users[record.id] = record
            return record

    # ------------------------- refresh tokens -------------------------

    def get_refresh_token(self, user_id: UUID) -> RefreshTokenRecord | None:
        return self._tokens.get(user_id)

    def save_refresh_token(
        self, *, user_id: UUID, token: str, expires_at: datetime
    ) -> RefreshTokenRecord:
        with self._lock:
            if user_id not in self._users:
                raise ConflictError("RefreshToken", "unknown user")
            now = self._timestamp()
            current = self._tokens.get(user_id)
            if current is None:
                record = RefreshTokenRecord(
                    id=uuid4(),
                    user_id=user_id,
                    token=token,
                    expires_at=expires_at,
                    revoked_at=None,
                    created_at=now,
                    updated_at=now,
                )
            else:
                record = replace(
                    current, token=token, expires_at=expires_at, revoked_at=None, updated_at=now
                )
            self._tokens[user_id] = record
            return record

    def revoke_refresh_token(
        self, *, user_id: UUID, revoked_at: datetime
    ) -> RefreshTokenRecord | None:
        with self._lock:
            current = self._tokens.get(user_id)
            if current is None or current.revoked_at is not None:
                return current
            record = replace(current, revoked_at=revoked_at, updated_at=revoked_at)
            self._tokens[user_id] = record
            return record

    def delete_refresh_tokens(self) -> int:
        with self._lock:
            count = len(self._tokens)
            self._tokens.clear()
            return count


__all__ = ["AuthStore", "InMemoryAuthStore", "RefreshTokenRecord", "UserRecord"]
