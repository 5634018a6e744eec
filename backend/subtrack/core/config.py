"""Application settings with environment-based simple classes."""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Any, Final

from dotenv import load_dotenv

# Selects the config class: 'development' | 'testing' | 'production'
ENV_VAR: Final[str] = "APP_ENV"

# Loads .env when present (no-op otherwise)
load_dotenv()


def env_bool(name: str, default: bool = False) -> bool:
    """Parse a boolean flag from an environment variable.

    Parameters
    ----------
    name: str
        Environment variable to inspect.
    default: bool, optional
        Value returned when the variable is unset. Defaults to ``False``.

    Returns
    -------
    bool
        ``True`` if the value resembles ``{"1", "true", "yes", "y", "on"}``
        ignoring case; otherwise ``False`` or ``default`` when missing.
    """
    val = os.getenv(name)
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "y", "on"}


def env_int(name: str, default: int) -> int:
    val = os.getenv(name)
    return default if val is None or not val.strip() else int(val)


def env_list(name: str, default: str) -> tuple[str, ...]:
    """Split a comma-separated variable into a tuple of trimmed items."""
    raw = os.getenv(name, default)
    return tuple(item.strip() for item in raw.split(",") if item.strip())


class BaseConfig:
    """Base configuration shared across environments.

    Attributes
    ----------
    API_BASE_PREFIX: str
        Root path for registering API blueprints.
    SQLALCHEMY_DATABASE_URI: str
        Database connection string (``DATABASE_URL``).
    AUTH_MODE: str
        Trust mode: ``local`` (HS256 tokens signed with ``JWT_SECRET``) or
        ``external`` (provider tokens validated against its JWKS).
    JWT_SECRET: str | None
        HMAC secret for session tokens; required in local mode.
    ACCESS_TOKEN_TTL_SECONDS: int
        Access-token lifetime (one hour by default).
    REFRESH_TOKEN_TTL_DAYS: int
        Refresh-token lifetime (60 days by default).
    REFRESH_ROTATE_INACTIVE_ON_LOGIN: bool
        When ``True`` login replaces a revoked or expired refresh record
        instead of returning it unchanged.
    PASSWORD_HASH_COST: int
        bcrypt work factor.
    PASSWORD_MIN_LENGTH, PASSWORD_ALPHABET_SIZE: int
        Inputs of the entropy threshold ``log2(alphabet ** length)``.
    AUTH_PROVIDER_URL, AUTH_PROVIDER_API_KEY: str | None
        Identity-provider root URL and API key; required in external mode.
    JWKS_ALGORITHMS: tuple[str, ...]
        Allow-listed ``alg`` values for provider tokens.
    JWKS_CLOCK_SKEW_SECONDS, JWKS_TIMEOUT_SECONDS,
    JWKS_REFRESH_MIN_INTERVAL_SECONDS: int | float
        Provider-token validation tuning.
    LOG_LEVEL: str
        Root logging verbosity (``INFO`` by default).

    Notes
    -----
    Values are read from environment variables once, at import time.
    """

    API_BASE_PREFIX = "/api"

    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")

    # DB
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)

    # Auth: trust mode and local signing
    AUTH_MODE = os.getenv("AUTH_MODE", "local").strip().lower()
    JWT_SECRET = os.getenv("JWT_SECRET")
    ACCESS_TOKEN_TTL_SECONDS = env_int("ACCESS_TOKEN_TTL_SECONDS", 3600)
    REFRESH_TOKEN_TTL_DAYS = env_int("REFRESH_TOKEN_TTL_DAYS", 60)
    REFRESH_ROTATE_INACTIVE_ON_LOGIN = env_bool("REFRESH_ROTATE_INACTIVE_ON_LOGIN", False)

    # Auth: password policy
    PASSWORD_HASH_COST = env_int("PASSWORD_HASH_COST", 12)
    PASSWORD_MIN_LENGTH = env_int("PASSWORD_MIN_LENGTH", 12)
    PASSWORD_ALPHABET_SIZE = env_int("PASSWORD_ALPHABET_SIZE", 89)

    # Auth: external provider
    AUTH_PROVIDER_URL = os.getenv("AUTH_PROVIDER_URL")
    AUTH_PROVIDER_API_KEY = os.getenv("AUTH_PROVIDER_API_KEY")
    JWKS_ALGORITHMS = env_list("JWKS_ALGORITHMS", "ES256")
    JWKS_CLOCK_SKEW_SECONDS = env_int("JWKS_CLOCK_SKEW_SECONDS", 60)
    JWKS_TIMEOUT_SECONDS = float(os.getenv("JWKS_TIMEOUT_SECONDS", "5"))
    JWKS_REFRESH_MIN_INTERVAL_SECONDS = env_int("JWKS_REFRESH_MIN_INTERVAL_SECONDS", 300)

    # Flask & JSON
    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Configuration tailored for local development."""

    DEBUG = env_bool("FLASK_DEBUG", True)


class TestingConfig(BaseConfig):
    """Configuration for automated test runs.

    Notes
    -----
    - Forces local trust mode with a fixed signing secret.
    - Uses the minimum bcrypt cost so hashing stays fast.
    - Uses an in-memory SQLite database unless ``TEST_DATABASE_URL`` is set.
    """

    TESTING = True
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    AUTH_MODE = "local"
    JWT_SECRET = "test-secret-with-at-least-thirty-two-bytes"
    PASSWORD_HASH_COST = 4
    PROPAGATE_EXCEPTIONS = True


class ProductionConfig(BaseConfig):
    """Configuration defaults for production deployments."""

    DEBUG = False
    SQLALCHEMY_ECHO = False
    PROPAGATE_EXCEPTIONS = False


CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Return the configuration class inferred from ``APP_ENV``.

    Falls back to :class:`DevelopmentConfig` when ``APP_ENV`` is unset or
    unknown.
    """
    name = os.getenv(ENV_VAR, "development").strip().lower()
    return CONFIG_MAP.get(name, DevelopmentConfig)


def validate_auth_settings(config: Mapping[str, Any]) -> None:
    """Fail fast when the selected trust mode lacks its settings.

    :param config: Loaded Flask config.
    :type config: Mapping[str, Any]
    :raises RuntimeError: On an unknown mode or missing secret/provider settings.
    """
    mode = str(config.get("AUTH_MODE", "")).strip().lower()
    if mode == "local":
        if not config.get("JWT_SECRET"):
            raise RuntimeError("JWT_SECRET environment variable is not set.")
    elif mode == "external":
        missing = [
            key for key in ("AUTH_PROVIDER_URL", "AUTH_PROVIDER_API_KEY") if not config.get(key)
        ]
        if missing:
            raise RuntimeError(f"Missing settings for external auth: {', '.join(missing)}.")
    else:
        raise RuntimeError(f"Unknown AUTH_MODE {mode!r}; expected 'local' or 'external'.")
    if int(config.get("ACCESS_TOKEN_TTL_SECONDS", 0)) <= 0:
        raise RuntimeError("ACCESS_TOKEN_TTL_SECONDS must be positive.")
