"""Refresh-token state: one current record per user."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import DateTime, ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from subtrack.core.extensions import db

from .base import ReprMixin, TimestampMixin, UUIDPKMixin


class RefreshToken(UUIDPKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Opaque, long-lived credential exchanged for new access tokens.

    Fields
    ------
    user_id : uuid.UUID
        Owner; unique, so each user has at most one record.
    token : str
        64 hex characters (256 random bits).
    expires_at : datetime
        Absolute expiry. Expiry is evaluated at read time, never stored as a state.
    revoked_at : datetime | None
        Set once by revocation; a revoked record is never re-activated in place
        except by an explicit rotation.
    """

    __tablename__ = "refresh_tokens"

    user_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    token: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    revoked_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
