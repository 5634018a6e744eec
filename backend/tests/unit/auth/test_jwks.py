"""Unit tests for provider-token validation against a JWKS."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from uuid import uuid4

import jwt
import pytest
import responses

from subtrack.auth.errors import (
    BadSignatureError,
    ExpiredTokenError,
    IssuedInFutureError,
    KeySetFetchError,
    MissingClaimError,
    UnsupportedAlgorithmError,
)
from subtrack.auth.jwks import ExternalIdentityValidator, jwks_url_for
from tests.helpers.jwks import JWKS_URL, PROVIDER_URL, SigningKey, jwks_payload, rsa_jwk


@pytest.fixture()
def key() -> SigningKey:
    return SigningKey()


@pytest.fixture()
def mocked():
    with responses.RequestsMock() as rsps:
        yield rsps


@pytest.fixture()
def validator(mocked, key) -> ExternalIdentityValidator:
    mocked.get(JWKS_URL, json=jwks_payload(key))
    return ExternalIdentityValidator(JWKS_URL, refresh_min_interval=0)


def test_jwks_url_is_derived_from_base_url():
    assert jwks_url_for(PROVIDER_URL + "/") == JWKS_URL


@pytest.mark.parametrize("url", ["", "project.provider.test", "ftp://host/x", "https://"])
def test_malformed_url_is_rejected(url):
    with pytest.raises(ValueError):
        jwks_url_for(url)


class TestConstruction:
    def test_fetches_keys_once(self, validator, key, mocked):
        assert validator.key_ids == frozenset({key.kid})
        assert len(mocked.calls) == 1

    def test_unreachable_endpoint_fails_fast(self, mocked):
        mocked.get(JWKS_URL, status=503)

        with pytest.raises(KeySetFetchError):
            ExternalIdentityValidator(JWKS_URL)

    def test_payload_without_keys_fails_fast(self, mocked):
        mocked.get(JWKS_URL, json={"unexpected": True})

        with pytest.raises(KeySetFetchError):
            ExternalIdentityValidator(JWKS_URL)

    def test_unusable_entries_are_skipped(self, mocked, key):
        payload = jwks_payload(key)
        payload["keys"].append({"kty": "EC", "kid": "broken"})
        mocked.get(JWKS_URL, json=payload)

        validator = ExternalIdentityValidator(JWKS_URL)

        assert validator.key_ids == frozenset({key.kid})

    def test_empty_algorithm_list_is_refused(self, mocked):
        with pytest.raises(ValueError):
            ExternalIdentityValidator(JWKS_URL, algorithms=())


class TestValidate:
    def test_valid_token_yields_session(self, validator, key):
        # Arrange
        user_id = uuid4()
        token = key.sign(sub=user_id, email="ext@example.com")

        # Act
        session = validator.validate(token, refresh_token="provider-rt")

        # Assert
        assert session.user_id == user_id
        assert session.email == "ext@example.com"
        assert session.access_token == token
        assert session.refresh_token == "provider-rt"

    def test_hs256_is_not_allowed(self, validator):
        now = datetime.now(UTC)
        token = jwt.encode(
            {"sub": str(uuid4()), "email": "a@b.co", "iat": now, "exp": now + timedelta(hours=1)},
            "shared-secret-that-is-long-enough-for-hs256",
            algorithm="HS256",
        )

        with pytest.raises(UnsupportedAlgorithmError):
            validator.validate(token)

    def test_foreign_key_signature_is_rejected(self, validator, key):
        impostor = SigningKey(kid=key.kid)

        with pytest.raises(BadSignatureError):
            validator.validate(impostor.sign(sub=uuid4()))

    def test_garbage_is_bad_signature(self, validator):
        with pytest.raises(BadSignatureError):
            validator.validate("garbage")

    def test_issued_in_future_beyond_skew(self, validator, key):
        token = key.sign(sub=uuid4(), issued_at=datetime.now(UTC) + timedelta(minutes=5))

        with pytest.raises(IssuedInFutureError):
            validator.validate(token)

    def test_issued_slightly_ahead_within_skew(self, validator, key):
        user_id = uuid4()
        token = key.sign(sub=user_id, issued_at=datetime.now(UTC) + timedelta(seconds=10))

        assert validator.validate(token).user_id == user_id

    def test_expired(self, validator, key):
        token = key.sign(
            sub=uuid4(), issued_at=datetime.now(UTC) - timedelta(hours=2), ttl=timedelta(hours=1)
        )

        with pytest.raises(ExpiredTokenError):
            validator.validate(token)

    def test_missing_email(self, validator, key):
        with pytest.raises(MissingClaimError) as info:
            validator.validate(key.sign(sub=uuid4(), email=None))

        assert info.value.claim == "email"

    @pytest.mark.parametrize("sub", [None, "not-a-uuid"])
    def test_bad_subject(self, validator, key, sub):
        with pytest.raises(MissingClaimError) as info:
            validator.validate(key.sign(sub=sub))

        assert info.value.claim == "sub"


class TestKeyRotation:
    def test_unknown_kid_triggers_refresh(self, validator, key, mocked):
        # Arrange: the provider rotates to a new key
        rotated = SigningKey()
        mocked.replace(responses.GET, JWKS_URL, json=jwks_payload(key, rotated))
        user_id = uuid4()

        # Act
        session = validator.validate(rotated.sign(sub=user_id))

        # Assert
        assert session.user_id == user_id
        assert rotated.kid in validator.key_ids
        assert len(mocked.calls) == 2

    def test_refresh_is_rate_limited(self, mocked, key):
        mocked.get(JWKS_URL, json=jwks_payload(key))
        validator = ExternalIdentityValidator(JWKS_URL, refresh_min_interval=3600)

        with pytest.raises(BadSignatureError):
            validator.validate(SigningKey().sign(sub=uuid4()))

        assert len(mocked.calls) == 1

    def test_failed_refresh_surfaces_fetch_error(self, validator, mocked):
        mocked.replace(responses.GET, JWKS_URL, status=500)

        with pytest.raises(KeySetFetchError):
            validator.validate(SigningKey().sign(sub=uuid4()))


class TestKeyFamilies:
    @pytest.fixture()
    def mixed_payload(self, key):
        payload = jwks_payload(key)
        payload["keys"].append(rsa_jwk("rsa-1"))
        return payload

    def test_keys_outside_allowlist_are_skipped(self, mocked, key, mixed_payload):
        mocked.get(JWKS_URL, json=mixed_payload)

        validator = ExternalIdentityValidator(JWKS_URL)

        assert validator.key_ids == frozenset({key.kid})

    def test_header_alg_must_match_key_family(self, mocked, key, mixed_payload):
        # Arrange: ES256 signature pointing at the RSA entry
        mocked.get(JWKS_URL, json=mixed_payload)
        validator = ExternalIdentityValidator(JWKS_URL, algorithms=("ES256", "RS256"))
        token = key.sign(sub=uuid4(), headers={"kid": "rsa-1"})

        # Act / Assert
        with pytest.raises(BadSignatureError):
            validator.validate(token)

    def test_skipped_kid_is_rejected_as_unknown(self, mocked, key, mixed_payload):
        mocked.get(JWKS_URL, json=mixed_payload)
        validator = ExternalIdentityValidator(JWKS_URL, refresh_min_interval=3600)

        with pytest.raises(BadSignatureError):
            validator.validate(key.sign(sub=uuid4(), headers={"kid": "rsa-1"}))
