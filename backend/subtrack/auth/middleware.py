"""Route decorator guarding endpoints with bearer-token authentication."""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable
from typing import Any, TypeVar

from flask import request

from subtrack.auth.bearer import extract_bearer_token
from subtrack.auth.context import set_identity
from subtrack.auth.errors import BearerError, KeySetFetchError, TokenValidationError
from subtrack.auth.providers import get_provider
from subtrack.core.errors import InternalError, Unauthorized

F = TypeVar("F", bound=Callable[..., Any])

log = logging.getLogger(__name__)


def require_auth(func: F) -> F:
    """
    Authenticate the request before calling the view.

    On success the resolved :class:`~subtrack.auth.context.Identity` is available
    through :func:`~subtrack.auth.context.get_identity`. On failure the view is
    not invoked: header and token errors become ``401`` and a failed key-set
    refresh becomes ``500``.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        provider = get_provider()
        try:
            token = extract_bearer_token(request.headers)
            identity = provider.validate(token)
        except (BearerError, TokenValidationError) as exc:
            # Reason only; never the token itself.
            log.warning("auth.rejected reason=%s mode=%s", type(exc).__name__, provider.mode)
            raise Unauthorized() from exc
        except KeySetFetchError as exc:
            log.error("auth.jwks_unavailable", exc_info=True)
            raise InternalError() from exc

        set_identity(identity)
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


__all__ = ["require_auth"]
