# subtrack/services/auth/dto.py
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import timedelta
from typing import Any

from subtrack.services._shared.ports.auth_store import RefreshTokenRecord, UserRecord

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class RegisterIn:
    """
    Input DTO for registration.

    :param email: User email (normalized by the service).
    :type email: str
    :param password: Raw password (entropy-checked, then hashed).
    :type password: str
    """

    email: str
    password: str


@dataclass(frozen=True, slots=True)
class LoginIn:
    """
    Input DTO for login.

    :param email: User email.
    :type email: str
    :param password: Raw password (to be verified).
    :type password: str
    """

    email: str
    password: str


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class AccessTokenOut:
    access_token: str
    token_type: str = "bearer"


@dataclass(frozen=True, slots=True)
class LoginOut:
    """
    Output DTO for a successful local login.

    :param user: Authenticated user.
    :type user: UserRecord
    :param access_token: Newly minted HS256 session token.
    :type access_token: str
    :param refresh: Current refresh-token record of the user.
    :type refresh: RefreshTokenRecord
    """

    user: UserRecord
    access_token: str
    refresh: RefreshTokenRecord
    token_type: str = "bearer"

    @property
    def refresh_token(self) -> str:
        return self.refresh.token


# ------------------------------ Config DTO -------------------------------- #


@dataclass(frozen=True, slots=True)
class AuthTokenConfig:
    """
    Token emission configuration.

    :param access_expires: Access token lifetime.
    :type access_expires: timedelta
    :param refresh_expires: Refresh token lifetime.
    :type refresh_expires: timedelta
    :param rotate_inactive_on_login: Replace a revoked/expired refresh record
        at login instead of returning it unchanged.
    :type rotate_inactive_on_login: bool
    """

    access_expires: timedelta = timedelta(hours=1)
    refresh_expires: timedelta = timedelta(days=60)
    rotate_inactive_on_login: bool = False

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> AuthTokenConfig:
        return cls(
            access_expires=timedelta(seconds=int(config.get("ACCESS_TOKEN_TTL_SECONDS", 3600))),
            refresh_expires=timedelta(days=int(config.get("REFRESH_TOKEN_TTL_DAYS", 60))),
            rotate_inactive_on_login=bool(config.get("REFRESH_ROTATE_INACTIVE_ON_LOGIN", False)),
        )
