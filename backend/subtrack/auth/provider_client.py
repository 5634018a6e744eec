"""HTTP client for the external identity provider's token endpoint."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import requests

from subtrack.auth.errors import AuthError
from subtrack.auth.jwks import ensure_http_url

log = logging.getLogger(__name__)

TOKEN_PATH = "/auth/v1/token"


class ProviderAuthError(AuthError):
    """The provider rejected the supplied credentials or refresh token."""


class ProviderUnavailableError(AuthError):
    """The provider could not be reached or answered with a server error."""


@dataclass(frozen=True, slots=True)
class ProviderTokens:
    """Raw token pair returned by the provider."""

    access_token: str
    refresh_token: str


class IdentityProviderClient:
    """
    Minimal client for password sign-in and refresh-token exchange.

    :param base_url: Provider root URL.
    :type base_url: str
    :param api_key: Public API key sent in the ``apikey`` header.
    :type api_key: str
    :param timeout: HTTP timeout in seconds.
    :type timeout: float
    :param session: Optional ``requests`` session.
    :type session: requests.Session | None
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        timeout: float = 5.0,
        session: requests.Session | None = None,
    ) -> None:
        ensure_http_url(base_url)
        if not api_key:
            raise ValueError("An API key is required.")
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._http = session or requests.Session()
        self._http.headers.update({"apikey": api_key, "Accept": "application/json"})

    def sign_in_with_password(self, email: str, password: str) -> ProviderTokens:
        return self._token_grant("password", {"email": email, "password": password})

    def refresh_session(self, refresh_token: str) -> ProviderTokens:
        return self._token_grant("refresh_token", {"refresh_token": refresh_token})

    def _token_grant(self, grant_type: str, body: dict[str, Any]) -> ProviderTokens:
        url = f"{self.base_url}{TOKEN_PATH}"
        try:
            response = self._http.post(
                url,
                params={"grant_type": grant_type},
                json=body,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise ProviderUnavailableError("Identity provider is unreachable") from exc

        if response.status_code >= 500:
            log.error("provider.server_error status=%s", response.status_code)
            raise ProviderUnavailableError("Identity provider failed")
        if response.status_code >= 400:
            log.warning("provider.rejected grant=%s status=%s", grant_type, response.status_code)
            raise ProviderAuthError("Identity provider rejected the request")

        try:
            payload = response.json()
            return ProviderTokens(
                access_token=str(payload["access_token"]),
                refresh_token=str(payload["refresh_token"]),
            )
        except (ValueError, KeyError, TypeError) as exc:
            raise ProviderUnavailableError("Identity provider returned an invalid payload") from exc

    def close(self) -> None:
        self._http.close()


__all__ = [
    "IdentityProviderClient",
    "ProviderAuthError",
    "ProviderTokens",
    "ProviderUnavailableError",
]
