"""Convenience exports for application schemas."""

from __future__ import annotations

from .auth import (
    AccessTokenSchema,
    ExternalSessionSchema,
    LoginResponseSchema,
    LoginSchema,
    RefreshTokenStatusSchema,
    RegisterSchema,
    TokenExchangeSchema,
    UserSchema,
    WhoAmISchema,
)

__all__ = [
    "AccessTokenSchema",
    "ExternalSessionSchema",
    "LoginResponseSchema",
    "LoginSchema",
    "RefreshTokenStatusSchema",
    "RegisterSchema",
    "TokenExchangeSchema",
    "UserSchema",
    "WhoAmISchema",
]
