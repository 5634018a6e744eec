"""Factory Boy definition for :class:`subtrack.models.refresh_token.RefreshToken`."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import factory

from subtrack.auth.tokens import make_refresh_token
from subtrack.models.refresh_token import RefreshToken
from tests.factories import BaseFactory
from tests.factories.user import UserFactory


class RefreshTokenFactory(BaseFactory):
    """Active refresh token owned by a freshly created user."""

    class Meta:
        model = RefreshToken

    user_id = factory.LazyFunction(lambda: UserFactory().id)
    token = factory.LazyFunction(make_refresh_token)
    expires_at = factory.LazyFunction(lambda: datetime.now(UTC) + timedelta(days=60))
    revoked_at = None
