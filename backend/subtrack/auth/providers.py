"""Trust-mode selection: one :class:`AuthProvider` per deployment.

``AUTH_MODE=local`` validates HS256 tokens minted by this service;
``AUTH_MODE=external`` validates provider tokens against its JWKS. The
provider is built once in :func:`init_app` and never mixed per request.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import timedelta
from typing import Any, Protocol, cast

from flask import Flask, current_app

from subtrack.auth.context import AuthMode, Identity
from subtrack.auth.jwks import ExternalIdentityValidator, jwks_url_for
from subtrack.auth.provider_client import IdentityProviderClient
from subtrack.auth.tokens import TokenIssuer

log = logging.getLogger(__name__)

LOCAL_MODE: AuthMode = "local"
EXTERNAL_MODE: AuthMode = "external"

_PROVIDER_KEY = "auth_provider"
_CLIENT_KEY = "auth_provider_client"


class AuthProvider(Protocol):
    """Validate a bearer token and resolve the caller's identity."""

    mode: AuthMode

    def validate(self, token: str) -> Identity: ...

    def close(self) -> None: ...


class LocalSigned:
    """Identity from self-signed session tokens."""

    mode: AuthMode = LOCAL_MODE

    def __init__(self, issuer: TokenIssuer) -> None:
        self.issuer = issuer

    def validate(self, token: str) -> Identity:
        return Identity(user_id=self.issuer.validate(token), mode=self.mode)

    def close(self) -> None:
        return None


class ExternalOIDC:
    """Identity from provider-signed tokens checked against the provider JWKS."""

    mode: AuthMode = EXTERNAL_MODE

    def __init__(self, validator: ExternalIdentityValidator) -> None:
        self.validator = validator

    def validate(self, token: str) -> Identity:
        session = self.validator.validate(token)
        return Identity(
            user_id=session.user_id,
            mode=self.mode,
            email=session.email,
            session=session,
        )

    def close(self) -> None:
        self.validator.close()


def build_provider(config: Mapping[str, Any]) -> AuthProvider:
    """
    Construct the provider selected by ``AUTH_MODE``.

    :param config: Flask config mapping.
    :type config: Mapping[str, Any]
    :returns: ``LocalSigned`` or ``ExternalOIDC``.
    :rtype: AuthProvider
    :raises RuntimeError: If the mode is unknown or its settings are missing.
    :raises KeySetFetchError: If the external key set cannot be fetched.
    """
    mode = str(config.get("AUTH_MODE", LOCAL_MODE)).strip().lower()

    if mode == LOCAL_MODE:
        secret = config.get("JWT_SECRET")
        if not secret:
            raise RuntimeError("JWT_SECRET must be set when AUTH_MODE=local.")
        ttl = timedelta(seconds=int(config.get("ACCESS_TOKEN_TTL_SECONDS", 3600)))
        return LocalSigned(TokenIssuer(secret, access_ttl=ttl))

    if mode == EXTERNAL_MODE:
        base_url = config.get("AUTH_PROVIDER_URL")
        if not base_url or not config.get("AUTH_PROVIDER_API_KEY"):
            raise RuntimeError(
                "AUTH_PROVIDER_URL and AUTH_PROVIDER_API_KEY must be set when AUTH_MODE=external."
            )
        validator = ExternalIdentityValidator(
            jwks_url_for(base_url),
            algorithms=config.get("JWKS_ALGORITHMS", ("ES256",)),
            clock_skew=int(config.get("JWKS_CLOCK_SKEW_SECONDS", 60)),
            timeout=float(config.get("JWKS_TIMEOUT_SECONDS", 5.0)),
            refresh_min_interval=float(config.get("JWKS_REFRESH_MIN_INTERVAL_SECONDS", 300)),
        )
        return ExternalOIDC(validator)

    raise RuntimeError(f"Unknown AUTH_MODE {mode!r}; expected 'local' or 'external'.")


def init_app(app: Flask) -> None:
    """Build the configured provider and attach it to ``app.extensions``."""
    provider = build_provider(app.config)
    app.extensions[_PROVIDER_KEY] = provider

    if provider.mode == EXTERNAL_MODE:
        app.extensions[_CLIENT_KEY] = IdentityProviderClient(
            app.config["AUTH_PROVIDER_URL"],
            app.config["AUTH_PROVIDER_API_KEY"],
            timeout=float(app.config.get("JWKS_TIMEOUT_SECONDS", 5.0)),
        )
    log.info("auth.provider_ready mode=%s", provider.mode)


def get_provider(app: Flask | None = None) -> AuthProvider:
    """Return the provider configured for ``app`` (default: current app)."""
    target = app or current_app
    try:
        return cast(AuthProvider, target.extensions[_PROVIDER_KEY])
    except KeyError as exc:
        raise RuntimeError("Auth provider is not initialized. Call init_app() first.") from exc


def get_provider_client(app: Flask | None = None) -> IdentityProviderClient | None:
    target = app or current_app
    return cast(IdentityProviderClient | None, target.extensions.get(_CLIENT_KEY))


def shutdown(app: Flask) -> None:
    """Release network resources held by the provider and its client."""
    provider = app.extensions.pop(_PROVIDER_KEY, None)
    if provider is not None:
        provider.close()
    client = app.extensions.pop(_CLIENT_KEY, None)
    if client is not None:
        client.close()


__all__ = [
    "AuthProvider",
    "EXTERNAL_MODE",
    "ExternalOIDC",
    "LOCAL_MODE",
    "LocalSigned",
    "build_provider",
    "get_provider",
    "get_provider_client",
    "init_app",
    "shutdown",
]
