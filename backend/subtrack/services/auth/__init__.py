"""Authentication use cases: local sign-in lifecycle and provider delegation."""

from __future__ import annotations

from .dto import AccessTokenOut, AuthTokenConfig, LoginIn, LoginOut, RegisterIn
from .external import ExternalAuthService
from .refresh_tokens import RefreshTokenStore
from .service import AuthService

__all__ = [
    "AccessTokenOut",
    "AuthService",
    "AuthTokenConfig",
    "ExternalAuthService",
    "LoginIn",
    "LoginOut",
    "RefreshTokenStore",
    "RegisterIn",
]
