"""Unit tests for the RefreshToken model."""

import pytest
from sqlalchemy.exc import IntegrityError

from subtrack.models.refresh_token import RefreshToken
from tests.factories.refresh_token import RefreshTokenFactory
from tests.factories.user import UserFactory


def test_new_record_is_unrevoked_with_timestamps(session):
    token = RefreshTokenFactory()

    stored = session.get(RefreshToken, token.id)
    assert stored.revoked_at is None
    assert stored.created_at is not None
    assert len(stored.token) == 64


def test_one_record_per_user(session):
    existing = RefreshTokenFactory()

    with pytest.raises(IntegrityError):
        RefreshTokenFactory(user_id=existing.user_id)
    session.rollback()


def test_token_values_are_unique(session):
    existing = RefreshTokenFactory()

    with pytest.raises(IntegrityError):
        RefreshTokenFactory(user_id=UserFactory().id, token=existing.token)
    session.rollback()
