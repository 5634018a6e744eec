"""Request-scoped access to the authenticated identity."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal
from uuid import UUID

from flask import g

from subtrack.auth.errors import IdentityNotSetError
from subtrack.auth.jwks import ExternalSession

AuthMode = Literal["local", "external"]

# Attribute name on ``flask.g``; only this module reads or writes it.
_IDENTITY_ATTR = "_subtrack_auth_identity"


@dataclass(frozen=True, slots=True)
class Identity:
    """
    Authenticated caller resolved by the configured :class:`AuthProvider`.

    :param user_id: Subject of the validated token.
    :type user_id: uuid.UUID
    :param mode: Trust mode that produced the identity.
    :type mode: str
    :param email: Email claim (external mode only).
    :type email: str | None
    :param session: Provider session (external mode only).
    :type session: ExternalSession | None
    """

    user_id: UUID
    mode: AuthMode
    email: str | None = None
    session: ExternalSession | None = None


def set_identity(identity: Identity) -> None:
    """Store ``identity`` for the remainder of the current request."""
    setattr(g, _IDENTITY_ATTR, identity)


def get_identity() -> Identity:
    """
    Return the identity stored by :func:`set_identity`.

    :raises IdentityNotSetError: If the request was not authenticated.
    """
    identity = g.get(_IDENTITY_ATTR)
    if not isinstance(identity, Identity):
        raise IdentityNotSetError()
    return identity


__all__ = ["AuthMode", "Identity", "get_identity", "set_identity"]
