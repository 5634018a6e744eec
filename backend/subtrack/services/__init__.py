"""Service layer public API.

This package exposes the essential building blocks for the service layer so that
callers can import from :mod:`subtrack.services` without knowing internal structure.

Re-exports
----------
- Base primitives (from ``subtrack.services._shared.base``)
    * :class:`BaseService`
    * :class:`ServiceContext`

- Local authentication (from ``subtrack.services.auth``)
    * :class:`AuthService`
    * :class:`RefreshTokenStore`
    * DTOs: :class:`RegisterIn`, :class:`LoginIn`, :class:`LoginOut`,
      :class:`AccessTokenOut`, :class:`AuthTokenConfig`

- External authentication (from ``subtrack.services.auth.external``)
    * :class:`ExternalAuthService`
"""

from __future__ import annotations

from ._shared.base import BaseService, ServiceContext
from .auth import (
    AccessTokenOut,
    AuthService,
    AuthTokenConfig,
    ExternalAuthService,
    LoginIn,
    LoginOut,
    RefreshTokenStore,
    RegisterIn,
)

__all__ = [
    "AccessTokenOut",
    "AuthService",
    "AuthTokenConfig",
    "BaseService",
    "ExternalAuthService",
    "LoginIn",
    "LoginOut",
    "RefreshTokenStore",
    "RegisterIn",
    "ServiceContext",
]
