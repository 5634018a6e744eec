"""Integration tests for the ``flask auth`` command group."""

from __future__ import annotations

from subtrack.infra.db import SQLAlchemyAuthStore
from tests.factories.refresh_token import RefreshTokenFactory
from tests.helpers.auth import DEFAULT_PASSWORD


def test_check_password_accepts_strong(app) -> None:
    runner = app.test_cli_runner()

    result = runner.invoke(args=["auth", "check-password", "--password", DEFAULT_PASSWORD])

    assert result.exit_code == 0
    assert result.output.startswith("OK:")


def test_check_password_rejects_weak(app) -> None:
    result = app.test_cli_runner().invoke(args=["auth", "check-password", "--password", "password"])

    assert result.exit_code == 1
    assert "Too weak" in result.output


def test_reset_refresh_tokens(app) -> None:
    user_id = RefreshTokenFactory().user_id

    result = app.test_cli_runner().invoke(args=["auth", "reset-refresh-tokens", "--yes"])

    assert result.exit_code == 0
    assert "Deleted 1 refresh token(s)." in result.output
    assert SQLAlchemyAuthStore().get_refresh_token(user_id) is None
