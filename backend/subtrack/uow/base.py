"""
Abstract Unit of Work contract.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from subtrack.repositories import RefreshTokenRepository, UserRepository


class UnitOfWork(ABC):
    """
    One transaction around the user and refresh-token repositories.

    A ``with`` block commits when it exits normally and rolls back when it
    raises. The auth store opens one per call, so every store operation is
    atomic on its own.
    """

    users: UserRepository
    refresh_tokens: RefreshTokenRepository

    @abstractmethod
    def __enter__(self) -> UnitOfWork: ...
    @abstractmethod
    def __exit__(self, exc_type, exc, tb) -> None: ...
    @abstractmethod
    def commit(self) -> None: ...
    @abstractmethod
    def rollback(self) -> None: ...
