"""Validation of identity-provider tokens against a published JWKS.

The key set is fetched once when the validator is built. Validations read an
immutable ``{kid: PyJWK}`` snapshot; a refresh replaces the snapshot in one
assignment, so readers never wait on it.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from types import MappingProxyType
from typing import Any
from urllib.parse import urlsplit
from uuid import UUID

import jwt
import requests
from jwt import PyJWK, PyJWKError
from jwt.exceptions import InvalidKeyError, InvalidSubjectError

from subtrack.auth.errors import (
    BadSignatureError,
    ExpiredTokenError,
    IssuedInFutureError,
    KeySetFetchError,
    MissingClaimError,
    TokenValidationError,
    UnsupportedAlgorithmError,
)

log = logging.getLogger(__name__)

JWKS_PATH = "/auth/v1/.well-known/jwks.json"
DEFAULT_ALGORITHMS: tuple[str, ...] = ("ES256",)
DEFAULT_CLOCK_SKEW_SECONDS = 60


@dataclass(frozen=True, slots=True)
class ExternalSession:
    """
    Identity extracted from a provider-issued token.

    :param access_token: The provider access token as presented.
    :type access_token: str
    :param refresh_token: Provider refresh token, when known (sign-in / exchange).
    :type refresh_token: str | None
    :param email: ``email`` claim.
    :type email: str
    :param user_id: ``sub`` claim parsed as a UUID.
    :type user_id: uuid.UUID
    """

    access_token: str
    refresh_token: str | None
    email: str
    user_id: UUID


def ensure_http_url(url: str) -> None:
    """Raise ``ValueError`` unless ``url`` is an absolute http(s) URL."""
    parts = urlsplit(url or "")
    if parts.scheme not in {"http", "https"} or not parts.netloc:
        raise ValueError(f"Invalid URL: {url!r}")


def jwks_url_for(base_url: str) -> str:
    """
    Derive the well-known JWKS URL from the provider base URL.

    :param base_url: Provider root, e.g. ``https://project.example.co``.
    :type base_url: str
    :returns: ``{base_url}/auth/v1/.well-known/jwks.json``.
    :rtype: str
    :raises ValueError: If ``base_url`` is not an absolute http(s) URL.
    """
    ensure_http_url(base_url)
    return f"{base_url.rstrip('/')}{JWKS_PATH}"


def _numeric_claim(claims: Mapping[str, Any], name: str) -> float:
    value = claims.get(name)
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise MissingClaimError(name)
    return float(value)


class ExternalIdentityValidator:
    """
    Validate provider tokens signed with an allow-listed asymmetric algorithm.

    :param jwks_url: Absolute URL of the provider key set.
    :type jwks_url: str
    :param algorithms: Accepted ``alg`` header values.
    :type algorithms: Iterable[str]
    :param clock_skew: Tolerance in seconds for ``iat`` in the future.
    :type clock_skew: int
    :param timeout: HTTP timeout in seconds for key-set fetches.
    :type timeout: float
    :param refresh_min_interval: Minimum seconds between refreshes triggered
        by an unknown ``kid``.
    :type refresh_min_interval: float
    :param session: Optional ``requests`` session (pooling, test doubles).
    :type session: requests.Session | None
    :raises ValueError: If ``jwks_url`` is malformed.
    :raises KeySetFetchError: If the initial fetch fails.
    """

    def __init__(
        self,
        jwks_url: str,
        *,
        algorithms: Iterable[str] = DEFAULT_ALGORITHMS,
        clock_skew: int = DEFAULT_CLOCK_SKEW_SECONDS,
        timeout: float = 5.0,
        refresh_min_interval: float = 300.0,
        session: requests.Session | None = None,
    ) -> None:
        ensure_http_url(jwks_url)
        self.jwks_url = jwks_url
        self.algorithms = frozenset(algorithms)
        if not self.algorithms:
            raise ValueError("At least one signing algorithm must be allowed.")
        self.clock_skew = clock_skew
        self.timeout = timeout
        self.refresh_min_interval = refresh_min_interval

        self._http = session or requests.Session()
        self._keys: Mapping[str, PyJWK] = MappingProxyType({})
        self._refresh_lock = threading.Lock()
        self._last_refresh = 0.0

        self.refresh_keys()

    # ------------------------------------------------------------------ #
    # Key set
    # ------------------------------------------------------------------ #

    @property
    def key_ids(self) -> frozenset[str]:
        return frozenset(self._keys)

    def refresh_keys(self) -> None:
        """Fetch the key set and swap it in.

        :raises KeySetFetchError: When the endpoint is unreachable or the
            payload holds no usable key.
        """
        keys = self._fetch_keys()
        self._keys = MappingProxyType(keys)
        self._last_refresh = time.monotonic()
        log.info("jwks.refreshed", extra={"endpoint": self.jwks_url})

    def _fetch_keys(self) -> dict[str, PyJWK]:
        try:
            response = self._http.get(self.jwks_url, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError) as exc:
            raise KeySetFetchError(f"Unable to fetch key set from {self.jwks_url}") from exc

        entries = payload.get("keys") if isinstance(payload, dict) else None
        if not isinstance(entries, list):
            raise KeySetFetchError("Key set payload has no 'keys' array")

        keys: dict[str, PyJWK] = {}
        for entry in entries:
            try:
                jwk = PyJWK.from_dict(entry)
            except (PyJWKError, InvalidKeyError) as exc:
                log.warning("jwks.entry_skipped: %s", exc)
                continue
            if jwk.algorithm_name not in self.algorithms:
                log.warning("jwks.entry_skipped: algorithm %s not allowed", jwk.algorithm_name)
                continue
            keys[jwk.key_id or ""] = jwk

        if not keys:
            raise KeySetFetchError("Key set contains no usable keys")
        return keys

    def _maybe_refresh(self) -> None:
        if time.monotonic() - self._last_refresh < self.refresh_min_interval:
            return
        # Only one caller refreshes; everyone else keeps the current snapshot.
        if not self._refresh_lock.acquire(blocking=False):
            return
        try:
            self.refresh_keys()
        finally:
            self._refresh_lock.release()

    def _signing_key(self, kid: str | None) -> PyJWK:
        keys = self._keys
        if kid is None and len(keys) == 1:
            return next(iter(keys.values()))
        jwk = keys.get(kid or "")
        if jwk is None:
            self._maybe_refresh()
            jwk = self._keys.get(kid or "")
        if jwk is None:
            raise BadSignatureError("Token signed with an unknown key")
        return jwk

    # ------------------------------------------------------------------ #
    # Validation
    # ------------------------------------------------------------------ #

    def validate(self, token: str, *, refresh_token: str | None = None) -> ExternalSession:
        """
        Verify ``token`` and extract the session identity.

        :param token: Provider access token.
        :type token: str
        :param refresh_token: Provider refresh token to carry on the session.
        :type refresh_token: str | None
        :returns: Session built from the ``email`` and ``sub`` claims.
        :rtype: ExternalSession
        :raises UnsupportedAlgorithmError: ``alg`` outside the allowlist.
        :raises BadSignatureError: Undecodable token, unknown key or bad signature.
        :raises IssuedInFutureError: ``iat`` beyond the clock-skew tolerance.
        :raises ExpiredTokenError: ``exp <= now``.
        :raises MissingClaimError: ``iat``/``exp``/``email``/``sub`` absent or mistyped.
        :raises KeySetFetchError: A refresh for an unknown ``kid`` failed.
        """
        try:
            header = jwt.get_unverified_header(token)
        except jwt.DecodeError as exc:
            raise BadSignatureError() from exc

        algorithm = header.get("alg")
        if algorithm not in self.algorithms:
            raise UnsupportedAlgorithmError()

        jwk = self._signing_key(header.get("kid"))
        if jwk.algorithm_name != algorithm:
            raise BadSignatureError("Token algorithm does not match its key")
        try:
            claims = jwt.decode(
                token,
                jwk.key,
                algorithms=[algorithm],
                options={
                    "verify_exp": False,
                    "verify_iat": False,
                    "verify_nbf": False,
                    "verify_aud": False,
                },
            )
        except InvalidSubjectError as exc:
            raise MissingClaimError("sub") from exc
        except (jwt.DecodeError, InvalidKeyError, TypeError) as exc:
            # TypeError: key material of another family than the header alg
            raise BadSignatureError() from exc
        except jwt.InvalidTokenError as exc:
            raise TokenValidationError() from exc

        now = datetime.now(UTC).timestamp()
        issued_at = _numeric_claim(claims, "iat")
        expires_at = _numeric_claim(claims, "exp")
        if issued_at - self.clock_skew >= now:
            raise IssuedInFutureError()
        if expires_at <= now:
            raise ExpiredTokenError()

        email = claims.get("email")
        if not isinstance(email, str) or not email:
            raise MissingClaimError("email")
        subject = claims.get("sub")
        try:
            user_id = UUID(subject) if isinstance(subject, str) else None
        except ValueError:
            user_id = None
        if user_id is None:
            raise MissingClaimError("sub")

        return ExternalSession(
            access_token=token,
            refresh_token=refresh_token,
            email=email,
            user_id=user_id,
        )

    def close(self) -> None:
        """Release pooled HTTP connections."""
        self._http.close()


__all__ = [
    "DEFAULT_ALGORITHMS",
    "ExternalIdentityValidator",
    "ExternalSession",
    "jwks_url_for",
]
