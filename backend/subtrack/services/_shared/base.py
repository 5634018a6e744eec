# subtrack/services/_shared/base.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from subtrack.auth.errors import (
    AuthError,
    IdentityNotSetError,
    InputTooLongError,
    KeySetFetchError,
    WeakPasswordError,
)
from subtrack.core import errors as api_errors
from subtrack.services._shared.errors import (
    AuthenticationError,
    ConflictError,
    ForbiddenError,
    MalformedRequestError,
    NotFoundError,
    ServiceError,
    ServiceUnavailableError,
)
from subtrack.services._shared.policies.common import is_owner


@dataclass(slots=True)
class ServiceContext:
    """
    Carry cross-cutting request-scoped data.

    :param actor_id: Authenticated user identifier.
    :param request_id: Correlation id for logging.
    """

    actor_id: UUID | None = None
    request_id: str | None = None


class BaseService:
    """
    Base class for application services.

    Responsibilities
    ----------------
    * Hold the request-scoped :class:`ServiceContext`.
    * Centralize error translation to HTTP problems.
    * Offer the shared ownership policy.

    Notes
    -----
    Services never touch the Flask session or request; persistence goes through
    an injected store and HTTP concerns stay in ``subtrack.api``.
    """

    def __init__(self, *, ctx: ServiceContext | None = None) -> None:
        self.ctx = ctx or ServiceContext()

    @staticmethod
    def now_utc() -> datetime:
        return datetime.now(UTC)

    # -------------------------- Error handling ------------------------------

    @staticmethod
    def translate_exceptions(exc: Exception) -> Exception:
        """
        Map service and credential errors to API-level (HTTP) errors.

        Messages are generic; the specific cause stays in server logs.

        :param exc: Exception raised within a service.
        :type exc: Exception
        :returns: Translated exception ready to be raised.
        :rtype: Exception
        """
        if isinstance(exc, NotFoundError):
            return api_errors.NotFound(str(exc))

        if isinstance(exc, ConflictError):
            return api_errors.Conflict(str(exc))

        if isinstance(exc, AuthenticationError):
            return api_errors.Unauthorized(str(exc))

        if isinstance(exc, ForbiddenError):
            return api_errors.Forbidden(str(exc))

        if isinstance(exc, (ServiceUnavailableError, KeySetFetchError, IdentityNotSetError)):
            return api_errors.InternalError()

        if isinstance(exc, (WeakPasswordError, InputTooLongError, MalformedRequestError)):
            return api_errors.BadRequest(str(exc))

        # Any other ServiceError subclass → 400 Bad Request
        if isinstance(exc, ServiceError):
            return api_errors.BadRequest(str(exc))

        # Remaining auth-core errors are header or token problems → 401
        if isinstance(exc, AuthError):
            return api_errors.Unauthorized()

        return exc

    # --------------------------- AuthZ --------------------------------

    def ensure_owner(
        self, actor_id: UUID | None, owner_id: UUID, *, msg: str | None = None
    ) -> None:
        """
        Ensure the current actor is the resource owner.

        :param actor_id: Authenticated user id.
        :param owner_id: Expected owner id.
        :param msg: Optional custom error message.
        :raises ForbiddenError: If actor is not the owner.
        """
        if actor_id is None or not is_owner(actor_id=actor_id, owner_id=owner_id):
            raise ForbiddenError(msg or "You can only access your own resources.")
