"""Relational adapters for service-layer ports."""

from .auth_store import SQLAlchemyAuthStore

__all__ = ["SQLAlchemyAuthStore"]
