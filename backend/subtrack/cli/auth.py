"""Flask CLI commands for operating the authentication subsystem."""

from __future__ import annotations

import logging

import click
from flask import current_app
from flask.cli import with_appcontext

from subtrack.auth.errors import WeakPasswordError
from subtrack.auth.password import PasswordPolicy, PasswordVerifier
from subtrack.infra.db import SQLAlchemyAuthStore

LOGGER = logging.getLogger(__name__)


def _ensure_non_production() -> None:
    """Abort destructive commands when running in production."""
    config = current_app.config
    is_debug = bool(config.get("DEBUG"))
    is_testing = bool(config.get("TESTING"))
    if not (is_debug or is_testing):
        raise click.UsageError(
            "The 'flask auth reset-refresh-tokens' command is restricted to "
            "non-production environments."
        )


@click.group("auth")
def auth_cli() -> None:
    """Authentication maintenance commands."""


@auth_cli.command("reset-refresh-tokens")
@click.option("--yes", is_flag=True, help="Skip the destructive confirmation prompt.")
@with_appcontext
def reset_refresh_tokens_command(yes: bool) -> None:
    """Delete every stored refresh token, forcing all users to sign in again."""
    _ensure_non_production()
    if not yes:
        click.confirm("This will sign out every user. Continue?", abort=True)
    deleted = SQLAlchemyAuthStore().delete_refresh_tokens()
    LOGGER.info("refresh_tokens.reset count=%s", deleted)
    click.echo(f"Deleted {deleted} refresh token(s).")


@auth_cli.command("check-password")
@click.password_option("--password", confirmation_prompt=False, help="Password to evaluate.")
@with_appcontext
def check_password_command(password: str) -> None:
    """Report the estimated entropy of a password against the configured policy."""
    verifier = PasswordVerifier(PasswordPolicy.from_config(current_app.config))
    required = verifier.policy.min_entropy_bits
    try:
        bits = verifier.check_strength(password)
    except WeakPasswordError as exc:
        raise click.ClickException(f"Too weak: {exc}") from exc
    click.echo(f"OK: {bits:.1f} bits (required {required:.1f}).")
