"""Integration tests for the endpoints served when ``AUTH_MODE=external``."""

from __future__ import annotations

from uuid import uuid4

import pytest
import responses

from subtrack.auth.errors import KeySetFetchError
from subtrack.auth.providers import shutdown
from subtrack.core.config import TestingConfig
from subtrack.factory import create_app
from tests.helpers.auth import bearer
from tests.helpers.jwks import JWKS_URL, PROVIDER_URL, TOKEN_URL, SigningKey, jwks_payload

BASE = "/api/v1/auth"


class ExternalTestingConfig(TestingConfig):
    AUTH_MODE = "external"
    JWT_SECRET = None
    AUTH_PROVIDER_URL = PROVIDER_URL
    AUTH_PROVIDER_API_KEY = "anon-key"


@pytest.fixture()
def key() -> SigningKey:
    return SigningKey()


@pytest.fixture()
def mocked(key):
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        rsps.get(JWKS_URL, json=jwks_payload(key))
        yield rsps


@pytest.fixture()
def external_app(mocked):
    app = create_app(ExternalTestingConfig, instance_relative_config=False)
    yield app
    shutdown(app)


@pytest.fixture()
def external_client(external_app):
    return external_app.test_client()


def test_startup_fails_when_jwks_is_unreachable():
    with responses.RequestsMock() as rsps:
        rsps.get(JWKS_URL, status=503)

        with pytest.raises(KeySetFetchError):
            create_app(ExternalTestingConfig, instance_relative_config=False)


def test_whoami_with_provider_token(external_client, key) -> None:
    user_id = uuid4()
    token = key.sign(sub=user_id, email="ext@example.com")

    resp = external_client.get(f"{BASE}/whoami", headers=bearer(token))

    assert resp.status_code == 200
    assert resp.get_json()["data"] == {
        "user_id": str(user_id),
        "email": "ext@example.com",
        "mode": "external",
    }


def test_local_token_is_rejected_in_external_mode(external_client) -> None:
    from subtrack.auth.tokens import TokenIssuer

    local = TokenIssuer("local-secret-with-at-least-32-bytes!!!").mint(uuid4())

    resp = external_client.get(f"{BASE}/whoami", headers=bearer(local))

    assert resp.status_code == 401


def test_login_delegates_to_provider(external_client, mocked, key) -> None:
    # Arrange
    user_id = uuid4()
    mocked.post(
        TOKEN_URL,
        json={"access_token": key.sign(sub=user_id), "refresh_token": "provider-rt"},
    )

    # Act
    resp = external_client.post(
        f"{BASE}/login", json={"email": "ext@example.com", "password": "pw"}
    )

    # Assert
    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["user_id"] == str(user_id)
    assert data["refresh_token"] == "provider-rt"
    assert data["token_type"] == "bearer"


def test_login_rejected_by_provider_is_401(external_client, mocked) -> None:
    mocked.post(TOKEN_URL, status=400, json={"error": "invalid_grant"})

    resp = external_client.post(
        f"{BASE}/login", json={"email": "ext@example.com", "password": "bad"}
    )

    assert resp.status_code == 401


def test_provider_outage_is_500(external_client, mocked) -> None:
    mocked.post(TOKEN_URL, status=502)

    resp = external_client.post(f"{BASE}/token", json={"refresh_token": "provider-rt"})

    assert resp.status_code == 500
    assert resp.get_json()["code"] == "internal_server_error"


def test_token_exchange(external_client, mocked, key) -> None:
    user_id = uuid4()
    mocked.post(
        TOKEN_URL,
        json={"access_token": key.sign(sub=user_id), "refresh_token": "next-rt"},
    )

    resp = external_client.post(f"{BASE}/token", json={"refresh_token": "provider-rt"})

    assert resp.status_code == 200
    assert resp.get_json()["data"]["refresh_token"] == "next-rt"


@pytest.mark.parametrize("path", ["/register", "/refresh", "/revoke"])
def test_local_only_routes_are_404(external_client, path) -> None:
    resp = external_client.post(f"{BASE}{path}", json={})

    assert resp.status_code == 404
