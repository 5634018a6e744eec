"""Self-signed (HS256) session tokens and opaque refresh-token values.

Access tokens carry only ``iss``, ``iat``, ``nbf``, ``exp`` and ``sub`` (the
user UUID as a string). Refresh tokens are random hex strings, never JWTs.
"""

from __future__ import annotations

import secrets
from datetime import UTC, datetime, timedelta
from uuid import UUID

import jwt
from jwt.exceptions import InvalidSubjectError

from subtrack.auth.errors import (
    BadSignatureError,
    ExpiredTokenError,
    InvalidTTLError,
    MalformedSubjectError,
    TokenValidationError,
)

TOKEN_ISSUER = "service"
SIGNING_ALGORITHM = "HS256"
REFRESH_TOKEN_BYTES = 32


def mint_token(subject: UUID, secret: str, ttl: timedelta) -> str:
    """
    Sign a session token for ``subject``.

    :param subject: User identifier stored in ``sub``.
    :type subject: uuid.UUID
    :param secret: Shared HMAC secret.
    :type secret: str
    :param ttl: Token lifetime; must be strictly positive.
    :type ttl: datetime.timedelta
    :returns: Compact JWS string.
    :rtype: str
    :raises InvalidTTLError: If ``ttl <= 0``.
    """
    if ttl <= timedelta(0):
        raise InvalidTTLError()

    now = datetime.now(UTC)
    claims = {
        "iss": TOKEN_ISSUER,
        "iat": now,
        "nbf": now,
        "exp": now + ttl,
        "sub": str(subject),
    }
    return jwt.encode(claims, secret, algorithm=SIGNING_ALGORITHM)


def validate_token(token: str, secret: str) -> UUID:
    """
    Verify a session token and return its subject.

    The signature is checked before any claim, so a token signed with another
    secret reports :class:`BadSignatureError` even when it is also expired.

    :param token: Compact JWS string.
    :type token: str
    :param secret: Shared HMAC secret.
    :type secret: str
    :returns: Subject parsed as a UUID.
    :rtype: uuid.UUID
    :raises BadSignatureError: On signature mismatch or undecodable input.
    :raises ExpiredTokenError: When ``exp <= now``.
    :raises MalformedSubjectError: When ``sub`` is missing, empty or not a UUID.
    """
    try:
        claims = jwt.decode(
            token,
            secret,
            algorithms=[SIGNING_ALGORITHM],
            options={"require": ["exp", "iat"]},
        )
    except jwt.ExpiredSignatureError as exc:
        raise ExpiredTokenError() from exc
    except InvalidSubjectError as exc:
        raise MalformedSubjectError() from exc
    except jwt.DecodeError as exc:
        # InvalidSignatureError is a DecodeError subclass
        raise BadSignatureError() from exc
    except jwt.InvalidTokenError as exc:
        raise TokenValidationError() from exc

    return _parse_subject(claims.get("sub"))


def _parse_subject(value: object) -> UUID:
    if not isinstance(value, str) or not value:
        raise MalformedSubjectError()
    try:
        return UUID(value)
    except ValueError as exc:
        raise MalformedSubjectError() from exc


def make_refresh_token() -> str:
    """Return 256 bits from the OS CSPRNG as 64 hex characters."""
    return secrets.token_hex(REFRESH_TOKEN_BYTES)


class TokenIssuer:
    """
    Bind the HMAC secret and access-token lifetime for repeated use.

    :param secret: Shared HMAC secret.
    :type secret: str
    :param access_ttl: Lifetime of minted access tokens.
    :type access_ttl: datetime.timedelta
    """

    def __init__(self, secret: str, access_ttl: timedelta = timedelta(hours=1)) -> None:
        if not secret:
            raise ValueError("A signing secret is required.")
        self._secret = secret
        self.access_ttl = access_ttl

    def mint(self, subject: UUID, ttl: timedelta | None = None) -> str:
        return mint_token(subject, self._secret, self.access_ttl if ttl is None else ttl)

    def validate(self, token: str) -> UUID:
        return validate_token(token, self._secret)


__all__ = [
    "TOKEN_ISSUER",
    "SIGNING_ALGORITHM",
    "TokenIssuer",
    "make_refresh_token",
    "mint_token",
    "validate_token",
]
