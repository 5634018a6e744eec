"""
subtrack.services._shared.ports
===============================

*Ports* (hexagonal interfaces) the service layer depends on.

Modules
-------
- :mod:`auth_store`:
    Defines :class:`~.AuthStore` with the :class:`~.UserRecord` and
    :class:`~.RefreshTokenRecord` read-models, plus :class:`~.InMemoryAuthStore`.

Concrete adapters live under ``subtrack.infra``.
"""

from __future__ import annotations

from .auth_store import AuthStore, InMemoryAuthStore, RefreshTokenRecord, UserRecord

__all__ = ["AuthStore", "InMemoryAuthStore", "RefreshTokenRecord", "UserRecord"]
