"""Shared API helpers: JSON responses, timing and service construction."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar

from flask import Response, current_app, jsonify, request

from subtrack.auth.context import get_identity
from subtrack.auth.jwks import ExternalIdentityValidator
from subtrack.auth.password import PasswordPolicy, PasswordVerifier
from subtrack.auth.providers import (
    EXTERNAL_MODE,
    LOCAL_MODE,
    ExternalOIDC,
    LocalSigned,
    get_provider,
    get_provider_client,
)
from subtrack.core.errors import NotFound
from subtrack.core.logger import ensure_request_id
from subtrack.infra.db import SQLAlchemyAuthStore
from subtrack.services._shared.base import ServiceContext
from subtrack.services._shared.errors import MalformedRequestError
from subtrack.services.auth.dto import AuthTokenConfig
from subtrack.services.auth.external import ExternalAuthService
from subtrack.services.auth.service import AuthService

F = TypeVar("F", bound=Callable[..., Any])


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def json_body() -> dict[str, Any]:
    """
    Return the request body as a JSON object.

    :raises MalformedRequestError: If the body is missing, not JSON or not an object.
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise MalformedRequestError("Request body must be a JSON object.")
    return data


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            request_endpoint = getattr(request, "endpoint", None)
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request_endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]


def require_mode(mode: str) -> Callable[[F], F]:
    """Expose the decorated endpoint only under the given ``AUTH_MODE``.

    Endpoints that belong to the other trust mode answer ``404`` as if they
    were not mounted at all.
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any):
            if get_provider().mode != mode:
                raise NotFound(f"Route '{request.path}' not found")
            return func(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator


require_local = require_mode(LOCAL_MODE)
require_external = require_mode(EXTERNAL_MODE)


def service_context(*, authenticated: bool = False) -> ServiceContext:
    """Build the request-scoped :class:`ServiceContext`.

    :param authenticated: Read the actor from the identity set by
        :func:`~subtrack.auth.middleware.require_auth`.
    """
    actor_id = get_identity().user_id if authenticated else None
    return ServiceContext(actor_id=actor_id, request_id=ensure_request_id())


def build_auth_service(*, authenticated: bool = False) -> AuthService:
    """Wire :class:`AuthService` to SQL storage and the local token issuer."""

    provider = get_provider()
    if not isinstance(provider, LocalSigned):
        raise NotFound(f"Route '{request.path}' not found")
    config = current_app.config
    return AuthService(
        store=SQLAlchemyAuthStore(),
        verifier=PasswordVerifier(PasswordPolicy.from_config(config)),
        issuer=provider.issuer,
        token_cfg=AuthTokenConfig.from_config(config),
        ctx=service_context(authenticated=authenticated),
    )


def build_external_auth_service() -> ExternalAuthService:
    """Wire :class:`ExternalAuthService` to the provider client and JWKS validator."""

    provider = get_provider()
    client = get_provider_client()
    if not isinstance(provider, ExternalOIDC) or client is None:
        raise NotFound(f"Route '{request.path}' not found")
    validator: ExternalIdentityValidator = provider.validator
    return ExternalAuthService(client=client, validator=validator)


__all__ = [
    "build_auth_service",
    "build_external_auth_service",
    "json_response",
    "require_external",
    "require_local",
    "require_mode",
    "service_context",
    "timing",
]
