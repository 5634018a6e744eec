"""Refresh-token repository keyed by owner."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from subtrack.models.refresh_token import RefreshToken
from subtrack.repositories.base import BaseRepository


class RefreshTokenRepository(BaseRepository[RefreshToken]):
    """Persistence-only repository for :class:`RefreshToken`."""

    model = RefreshToken

    def _updatable_fields(self) -> set[str]:
        return {"token", "expires_at", "revoked_at"}

    def get_by_user(self, user_id: UUID) -> RefreshToken | None:
        return self.find_one_by(RefreshToken.user_id, user_id)

    def upsert_for_user(self, user_id: UUID, *, token: str, expires_at: datetime) -> RefreshToken:
        """Insert the user's record, or overwrite its value and clear revocation."""
        current = self.get_by_user(user_id)
        if current is None:
            return self.add(RefreshToken(user_id=user_id, token=token, expires_at=expires_at))
        return self.update(current, token=token, expires_at=expires_at, revoked_at=None)
