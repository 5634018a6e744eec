"""
Exceptions raised by the authentication core.

These exceptions are **framework-agnostic**: nothing here imports Flask or
HTTP helpers. The translation to RFC 7807 responses happens in
``subtrack/auth/middleware.py`` and ``subtrack/core/errors.py``.

Messages are generic on purpose; callers must not attach token material or
plaintext secrets to them.
"""

from __future__ import annotations


class AuthError(Exception):
    """Base class for every error raised by :mod:`subtrack.auth`."""


# --------------------------------------------------------------------------- #
# Token validation (→ 401)
# --------------------------------------------------------------------------- #


class TokenValidationError(AuthError):
    """A presented token could not be accepted."""

    default_message = "Invalid token"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class BadSignatureError(TokenValidationError):
    """Signature mismatch, unknown signing key or undecodable token."""

    default_message = "Token signature is invalid"


class ExpiredTokenError(TokenValidationError):
    default_message = "Token expired"


class MalformedSubjectError(TokenValidationError):
    """The ``sub`` claim is empty or is not a UUID."""

    default_message = "Token subject is malformed"


class UnsupportedAlgorithmError(TokenValidationError):
    default_message = "Token signing algorithm is not allowed"


class IssuedInFutureError(TokenValidationError):
    default_message = "Token issued in the future"


class MissingClaimError(TokenValidationError):
    """A required claim is absent or has the wrong type.

    :param claim: Name of the offending claim.
    :type claim: str
    """

    default_message = "Token claims are invalid"

    def __init__(self, claim: str) -> None:
        super().__init__(f"Token claim '{claim}' is missing or invalid")
        self.claim = claim


# --------------------------------------------------------------------------- #
# Authorization header (→ 401)
# --------------------------------------------------------------------------- #


class BearerError(AuthError):
    """The ``Authorization`` header could not yield a bearer token."""


class MissingHeaderError(BearerError):
    def __init__(self) -> None:
        super().__init__("Authorization header is missing")


class MalformedHeaderError(BearerError):
    def __init__(self) -> None:
        super().__init__("Authorization header is malformed")


# --------------------------------------------------------------------------- #
# Issuance and credentials
# --------------------------------------------------------------------------- #


class InvalidTTLError(AuthError, ValueError):
    """Token lifetime must be strictly positive."""

    def __init__(self) -> None:
        super().__init__("Token lifetime must be greater than zero")


class InputTooLongError(AuthError, ValueError):
    """Plaintext exceeds the hashing algorithm's input bound.

    :param limit: Maximum accepted size in bytes.
    :type limit: int
    """

    def __init__(self, limit: int) -> None:
        super().__init__(f"Password must not exceed {limit} bytes")
        self.limit = limit


class WeakPasswordError(AuthError):
    """Password entropy is below the configured threshold."""

    def __init__(self, required_bits: float) -> None:
        super().__init__("Password is too weak; use a longer or more varied password")
        self.required_bits = required_bits


# --------------------------------------------------------------------------- #
# Infrastructure (→ 500)
# --------------------------------------------------------------------------- #


class KeySetFetchError(AuthError):
    """The provider's JSON Web Key Set could not be fetched or parsed."""


class IdentityNotSetError(AuthError, RuntimeError):
    """No authenticated identity was stored for the current request."""

    def __init__(self) -> None:
        super().__init__("No authenticated identity in the current request context")


__all__ = [
    "AuthError",
    "TokenValidationError",
    "BadSignatureError",
    "ExpiredTokenError",
    "MalformedSubjectError",
    "UnsupportedAlgorithmError",
    "IssuedInFutureError",
    "MissingClaimError",
    "BearerError",
    "MissingHeaderError",
    "MalformedHeaderError",
    "InvalidTTLError",
    "InputTooLongError",
    "WeakPasswordError",
    "KeySetFetchError",
    "IdentityNotSetError",
]
