"""Unit tests for the User model."""

import pytest

from subtrack.models.user import User
from tests.factories.user import UserFactory


def test_email_is_normalized():
    user = User(email="  Carol@Example.COM ", password_hash="x")

    assert user.email == "carol@example.com"


@pytest.mark.parametrize("email", ["", "no-at-sign", "user@localhost"])
def test_invalid_email_is_rejected(email):
    with pytest.raises(ValueError):
        User(email=email, password_hash="x")


def test_timestamps_and_uuid_are_assigned(session):
    user = UserFactory()
    session.refresh(user)

    assert user.id is not None
    assert user.created_at is not None
    assert user.updated_at is not None
    assert repr(user) == f"<User id={user.id}>"
