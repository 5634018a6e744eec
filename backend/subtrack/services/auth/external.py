# subtrack/services/auth/external.py
from __future__ import annotations

import logging
from collections.abc import Callable

from subtrack.auth.errors import KeySetFetchError
from subtrack.auth.jwks import ExternalIdentityValidator, ExternalSession
from subtrack.auth.provider_client import (
    IdentityProviderClient,
    ProviderAuthError,
    ProviderTokens,
    ProviderUnavailableError,
)
from subtrack.services._shared.base import BaseService
from subtrack.services._shared.errors import AuthenticationError, ServiceUnavailableError
from subtrack.services.auth.dto import LoginIn

log = logging.getLogger(__name__)


class ExternalAuthService(BaseService):
    """
    Sign-in and token exchange delegated to the external identity provider.

    Provider tokens are validated against the provider JWKS before they are
    returned, so the session always carries a verified ``email`` and ``user_id``.
    """

    def __init__(
        self,
        *,
        client: IdentityProviderClient,
        validator: ExternalIdentityValidator,
    ) -> None:
        super().__init__()
        self.client = client
        self.validator = validator

    def login(self, dto: LoginIn) -> ExternalSession:
        """
        Exchange email and password for a provider session.

        :raises AuthenticationError: The provider rejected the credentials.
        :raises ServiceUnavailableError: The provider or its key set is unreachable.
        """
        return self._session_from(
            lambda: self.client.sign_in_with_password(dto.email, dto.password)
        )

    def exchange_refresh_token(self, refresh_token: str) -> ExternalSession:
        """
        Exchange a provider refresh token for a new provider session.

        :raises AuthenticationError: The provider rejected the refresh token.
        :raises ServiceUnavailableError: The provider or its key set is unreachable.
        """
        return self._session_from(lambda: self.client.refresh_session(refresh_token))

    def _session_from(self, grant: Callable[[], ProviderTokens]) -> ExternalSession:
        try:
            tokens = grant()
        except ProviderAuthError as exc:
            raise AuthenticationError() from exc
        except ProviderUnavailableError as exc:
            log.error("auth.provider_unavailable", exc_info=True)
            raise ServiceUnavailableError() from exc

        try:
            return self.validator.validate(tokens.access_token, refresh_token=tokens.refresh_token)
        except KeySetFetchError as exc:
            log.error("auth.jwks_unavailable", exc_info=True)
            raise ServiceUnavailableError() from exc
