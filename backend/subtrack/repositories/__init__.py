"""Repository package exposing persistence-layer access for the domain models."""

from __future__ import annotations

from subtrack.repositories.base import BaseRepository
from subtrack.repositories.refresh_token import RefreshTokenRepository
from subtrack.repositories.user import UserRepository

__all__ = ["BaseRepository", "RefreshTokenRepository", "UserRepository"]
