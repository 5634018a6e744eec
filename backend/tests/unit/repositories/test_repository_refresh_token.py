"""Unit tests for RefreshTokenRepository."""

from datetime import UTC, datetime, timedelta

import pytest

from subtrack.models.base import as_utc
from subtrack.repositories.refresh_token import RefreshTokenRepository
from tests.factories.refresh_token import RefreshTokenFactory
from tests.factories.user import UserFactory


class TestRefreshTokenRepository:
    """Ensure ``RefreshTokenRepository`` keeps one record per user."""

    @pytest.fixture()
    def repo(self, session):
        return RefreshTokenRepository(session=session)

    def test_upsert_inserts_first_record(self, repo):
        user = UserFactory()
        expires = datetime.now(UTC) + timedelta(days=60)

        row = repo.upsert_for_user(user.id, token="a" * 64, expires_at=expires)

        assert row.user_id == user.id
        assert repo.get_by_user(user.id) is row

    def test_upsert_overwrites_and_clears_revocation(self, repo):
        existing = RefreshTokenFactory(revoked_at=datetime.now(UTC))
        expires = datetime.now(UTC) + timedelta(days=1)

        row = repo.upsert_for_user(existing.user_id, token="b" * 64, expires_at=expires)

        assert row.id == existing.id
        assert row.token == "b" * 64
        assert row.revoked_at is None
        assert as_utc(row.expires_at) == expires

    def test_get_by_user_missing(self, repo):
        assert repo.get_by_user(UserFactory().id) is None

    def test_delete_all(self, repo):
        RefreshTokenFactory()
        RefreshTokenFactory()

        assert repo.delete_all() == 2
