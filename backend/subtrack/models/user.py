"""User model: the credential owner for the authentication core."""

from __future__ import annotations

from sqlalchemy import String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, validates

from subtrack.core.extensions import db

from .base import ReprMixin, TimestampMixin, UUIDPKMixin


class User(UUIDPKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Account identified by email and authenticated with a bcrypt hash.

    Fields
    ------
    email : str
        Login email. Stored normalized (lowercase, trimmed).
    password_hash : str
        bcrypt hash produced by :class:`subtrack.auth.password.PasswordVerifier`.
        The plaintext never reaches the model.
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(254), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(100), nullable=False)

    __table_args__ = (UniqueConstraint("email", name="uq_users_email"),)

    @validates("email")
    def _normalize_email(self, key: str, value: str) -> str:
        """
        Normalize and sanity-check the email.

        :raises ValueError: If the email is missing or malformed.
        """
        if not value or not isinstance(value, str):
            raise ValueError("Email is required.")
        v = value.strip().lower()
        # Minimal sanity check; full validation happens at the API layer.
        if "@" not in v or "." not in v.split("@")[-1]:
            raise ValueError("Email format looks invalid.")
        return v
