"""Unit tests for trust-mode selection."""

from __future__ import annotations

from uuid import uuid4

import pytest
import responses

from subtrack.auth.errors import KeySetFetchError
from subtrack.auth.providers import ExternalOIDC, LocalSigned, build_provider
from tests.helpers.jwks import JWKS_URL, PROVIDER_URL, SigningKey, jwks_payload

SECRET = "providers-secret-with-at-least-32-bytes!"


def test_local_mode_builds_local_signed():
    provider = build_provider({"AUTH_MODE": "local", "JWT_SECRET": SECRET})

    assert isinstance(provider, LocalSigned)
    user_id = uuid4()
    identity = provider.validate(provider.issuer.mint(user_id))
    assert identity.user_id == user_id
    assert identity.mode == "local"


def test_local_mode_requires_secret():
    with pytest.raises(RuntimeError):
        build_provider({"AUTH_MODE": "local", "JWT_SECRET": ""})


def test_unknown_mode_is_refused():
    with pytest.raises(RuntimeError):
        build_provider({"AUTH_MODE": "both", "JWT_SECRET": SECRET})


def test_external_mode_requires_provider_settings():
    with pytest.raises(RuntimeError):
        build_provider({"AUTH_MODE": "external", "AUTH_PROVIDER_URL": PROVIDER_URL})


@responses.activate
def test_external_mode_validates_against_jwks():
    # Arrange
    key = SigningKey()
    responses.get(JWKS_URL, json=jwks_payload(key))
    provider = build_provider(
        {
            "AUTH_MODE": "external",
            "AUTH_PROVIDER_URL": PROVIDER_URL,
            "AUTH_PROVIDER_API_KEY": "anon-key",
        }
    )
    user_id = uuid4()

    # Act
    identity = provider.validate(key.sign(sub=user_id, email="ext@example.com"))

    # Assert
    assert isinstance(provider, ExternalOIDC)
    assert identity.user_id == user_id
    assert identity.email == "ext@example.com"
    assert identity.mode == "external"
    assert identity.session is not None


@responses.activate
def test_external_mode_fails_when_jwks_is_unreachable():
    responses.get(JWKS_URL, status=500)

    with pytest.raises(KeySetFetchError):
        build_provider(
            {
                "AUTH_MODE": "external",
                "AUTH_PROVIDER_URL": PROVIDER_URL,
                "AUTH_PROVIDER_API_KEY": "anon-key",
            }
        )
