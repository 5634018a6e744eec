# subtrack/services/auth/refresh_tokens.py
from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from uuid import UUID

from subtrack.auth.tokens import make_refresh_token
from subtrack.services._shared.errors import NotFoundError
from subtrack.services._shared.ports.auth_store import AuthStore, RefreshTokenRecord

log = logging.getLogger(__name__)

DEFAULT_REFRESH_TTL = timedelta(days=60)


class RefreshTokenStore:
    """
    Lifecycle of the per-user refresh token.

    States
    ------
    * **Active**: ``revoked_at`` is ``None`` and ``expires_at >= now``.
    * **Revoked**: terminal; set by :meth:`revoke`.
    * **Expired**: derived at read time from ``expires_at``; never stored.

    The opaque value of an active record is never overwritten; only an
    inactive record is replaced by :meth:`create_for_user`.
    """

    def __init__(
        self,
        store: AuthStore,
        *,
        token_factory: Callable[[], str] = make_refresh_token,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """
        :param store: Persistence capability.
        :param token_factory: Generator of opaque token values.
        :param clock: Returns the current UTC instant (tests pin it).
        """
        self.store = store
        self._token_factory = token_factory
        self._clock = clock or (lambda: datetime.now(UTC))

    def now(self) -> datetime:
        return self._clock()

    @staticmethod
    def is_usable(record: RefreshTokenRecord, now: datetime) -> bool:
        """Return ``True`` when ``record`` may be exchanged for an access token."""
        return record.usable(now)

    def get_for_user(self, user_id: UUID) -> RefreshTokenRecord:
        """
        Return the user's current record.

        :raises NotFoundError: If the user has no record.
        """
        record = self.store.get_refresh_token(user_id)
        if record is None:
            raise NotFoundError("RefreshToken", str(user_id))
        return record

    def create_for_user(
        self, user_id: UUID, ttl: timedelta = DEFAULT_REFRESH_TTL
    ) -> RefreshTokenRecord:
        """
        Ensure the user holds an active refresh token.

        An active, unexpired record is returned unchanged. Otherwise a fresh
        256-bit value is generated with ``expires_at = now + ttl``, replacing
        any revoked or expired record.

        :param user_id: Owner.
        :param ttl: Lifetime of a newly generated token.
        :returns: The active record.
        :rtype: RefreshTokenRecord
        """
        now = self.now()
        current = self.store.get_refresh_token(user_id)
        if current is not None and current.usable(now):
            return current
        return self.rotate(user_id, ttl, now=now)

    def rotate(
        self, user_id: UUID, ttl: timedelta = DEFAULT_REFRESH_TTL, *, now: datetime | None = None
    ) -> RefreshTokenRecord:
        """Unconditionally store a new opaque value for ``user_id``."""
        if ttl <= timedelta(0):
            raise ValueError("Refresh token lifetime must be positive.")
        issued = now or self.now()
        record = self.store.save_refresh_token(
            user_id=user_id,
            token=self._token_factory(),
            expires_at=issued + ttl,
        )
        log.info("refresh_token.issued user_id=%s", user_id)
        return record

    def revoke(self, user_id: UUID) -> RefreshTokenRecord:
        """
        Mark the user's record revoked; repeated calls keep the first timestamp.

        :raises NotFoundError: If the user has no record.
        """
        record = self.store.revoke_refresh_token(user_id=user_id, revoked_at=self.now())
        if record is None:
            raise NotFoundError("RefreshToken", str(user_id))
        log.info("refresh_token.revoked user_id=%s", user_id)
        return record
