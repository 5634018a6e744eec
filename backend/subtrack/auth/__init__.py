"""Authentication core: credentials, session tokens and trust providers.

Public entry points are re-exported here so API and service modules can
``from subtrack.auth import ...`` without knowing the module layout.
"""

from __future__ import annotations

from .bearer import extract_bearer_token
from .context import Identity, get_identity, set_identity
from .jwks import ExternalIdentityValidator, ExternalSession, jwks_url_for
from .password import PasswordPolicy, PasswordVerifier, estimate_entropy
from .providers import (
    AuthProvider,
    ExternalOIDC,
    LocalSigned,
    build_provider,
    get_provider,
    init_app,
)
from .tokens import TokenIssuer, make_refresh_token, mint_token, validate_token

__all__ = [
    "AuthProvider",
    "ExternalIdentityValidator",
    "ExternalOIDC",
    "ExternalSession",
    "Identity",
    "LocalSigned",
    "PasswordPolicy",
    "PasswordVerifier",
    "TokenIssuer",
    "build_provider",
    "estimate_entropy",
    "extract_bearer_token",
    "get_identity",
    "get_provider",
    "init_app",
    "jwks_url_for",
    "make_refresh_token",
    "mint_token",
    "set_identity",
    "validate_token",
]
