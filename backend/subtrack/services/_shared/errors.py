"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and never import Flask or HTTP
helpers. They are the contract between stores and application services.

The translation to HTTP responses (RFC 7807) is done by
``BaseService.translate_exceptions()``, wired in ``subtrack/api/errors.py``.
"""

from __future__ import annotations

from dataclasses import dataclass


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - The API layer translates them to :class:`subtrack.core.errors.APIError`.
    """


@dataclass(slots=True)
class NotFoundError(ServiceError):
    """
    Raised when an entity is not found.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param key: Identifier or search key.
    :type key: str
    """

    entity: str
    key: str

    def __str__(self) -> str:
        return f"{self.entity} not found"


@dataclass(slots=True)
class ConflictError(ServiceError):
    """
    Raised when a unique constraint or business rule conflict occurs.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param detail: Short human-readable explanation.
    :type detail: str
    """

    entity: str
    detail: str

    def __str__(self) -> str:
        return f"Conflict on {self.entity}: {self.detail}"


class AuthenticationError(ServiceError):
    """Credentials were rejected. The message never says which part was wrong."""

    def __init__(self, message: str = "Invalid credentials") -> None:
        super().__init__(message)


class ForbiddenError(ServiceError):
    """The caller is authenticated but not allowed to perform the action."""

    def __init__(self, message: str = "Forbidden") -> None:
        super().__init__(message)


class MalformedRequestError(ServiceError):
    """The request body is missing, not JSON or not a JSON object."""


class ServiceUnavailableError(ServiceError):
    """A collaborator (identity provider, key set) failed; detail is logged, not returned."""

    def __init__(self, message: str = "Upstream service unavailable") -> None:
        super().__init__(message)
