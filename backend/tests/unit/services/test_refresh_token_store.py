"""Unit tests for the refresh-token lifecycle over the in-memory store."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest

from subtrack.services._shared.errors import NotFoundError
from subtrack.services._shared.ports.auth_store import InMemoryAuthStore
from subtrack.services.auth.refresh_tokens import RefreshTokenStore

T0 = datetime(2026, 3, 1, 9, 0, tzinfo=UTC)


class Clock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture()
def clock() -> Clock:
    return Clock(T0)


@pytest.fixture()
def store(clock) -> InMemoryAuthStore:
    return InMemoryAuthStore(now=clock)


@pytest.fixture()
def tokens(store, clock) -> RefreshTokenStore:
    return RefreshTokenStore(store, clock=clock)


@pytest.fixture()
def user_id(store):
    return store.create_user(email="rt@example.com", password_hash="x").id


def test_create_twice_keeps_the_token(tokens, store, user_id):
    # Act
    first = tokens.create_for_user(user_id)
    second = tokens.create_for_user(user_id)

    # Assert
    assert first.token == second.token
    assert store.get_refresh_token(user_id).token == first.token
    assert first.expires_at == T0 + timedelta(days=60)


def test_create_replaces_expired_token(tokens, clock, user_id):
    first = tokens.create_for_user(user_id, timedelta(days=1))

    clock.now = T0 + timedelta(days=2)
    second = tokens.create_for_user(user_id, timedelta(days=1))

    assert second.token != first.token
    assert second.expires_at == clock.now + timedelta(days=1)


def test_create_replaces_revoked_token(tokens, user_id):
    first = tokens.create_for_user(user_id)
    tokens.revoke(user_id)

    second = tokens.create_for_user(user_id)

    assert second.token != first.token
    assert second.revoked_at is None


def test_expiry_is_strict(tokens, clock, user_id):
    record = tokens.create_for_user(user_id, timedelta(hours=1))

    assert RefreshTokenStore.is_usable(record, record.expires_at)
    assert not RefreshTokenStore.is_usable(record, record.expires_at + timedelta(seconds=1))


def test_revoke_is_idempotent(tokens, clock, user_id):
    tokens.create_for_user(user_id)

    first = tokens.revoke(user_id)
    clock.now = T0 + timedelta(minutes=5)
    second = tokens.revoke(user_id)

    assert first.revoked_at == T0
    assert second.revoked_at == T0


def test_revoke_without_record(tokens):
    with pytest.raises(NotFoundError):
        tokens.revoke(uuid4())


def test_get_for_user_without_record(tokens):
    with pytest.raises(NotFoundError):
        tokens.get_for_user(uuid4())


def test_rotate_rejects_non_positive_lifetime(tokens, user_id):
    with pytest.raises(ValueError):
        tokens.rotate(user_id, timedelta(0))


def test_token_factory_is_injectable(store, clock, user_id):
    tokens = RefreshTokenStore(store, token_factory=lambda: "f" * 64, clock=clock)

    assert tokens.create_for_user(user_id).token == "f" * 64
