"""Bearer token extraction from HTTP headers."""

from __future__ import annotations

from collections.abc import Mapping

from subtrack.auth.errors import MalformedHeaderError, MissingHeaderError

AUTHORIZATION_HEADER = "Authorization"
BEARER_SCHEME = "Bearer"


def extract_bearer_token(headers: Mapping[str, str]) -> str:
    """
    Return the raw token from an ``Authorization: Bearer <token>`` header.

    The scheme match is case-sensitive and the header must split into exactly
    two whitespace-separated fields.

    :param headers: Request headers (``werkzeug`` headers or a plain dict).
    :type headers: Mapping[str, str]
    :returns: Token string.
    :rtype: str
    :raises MissingHeaderError: If the header is absent or blank.
    :raises MalformedHeaderError: If the header is not ``Bearer <token>``.
    """
    value = headers.get(AUTHORIZATION_HEADER)
    if not value or not value.strip():
        raise MissingHeaderError()

    fields = value.split()
    if len(fields) != 2 or fields[0] != BEARER_SCHEME:
        raise MalformedHeaderError()
    return fields[1]


__all__ = ["AUTHORIZATION_HEADER", "BEARER_SCHEME", "extract_bearer_token"]
