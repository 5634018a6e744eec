"""Application factory wiring Flask extensions, auth and blueprints."""

from __future__ import annotations

from flask import Flask

from subtrack.core.config import BaseConfig, get_config, validate_auth_settings
from subtrack.core.logger import configure_logging, init_app as init_logging


def create_app(
    config: str | type[BaseConfig] | object | None = None,
    *,
    instance_relative_config: bool = True,
    instance_config_filename: str = "config.py",
) -> Flask:
    """Build and configure the Flask application.

    The auth provider is built eagerly: a missing secret, an unknown
    ``AUTH_MODE`` or an unreachable JWKS endpoint aborts startup.
    """

    app = Flask(__name__, instance_relative_config=instance_relative_config)

    app.config.from_object(get_config() if config is None else config)
    if instance_relative_config and instance_config_filename:
        app.config.from_pyfile(instance_config_filename, silent=True)

    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    validate_auth_settings(app.config)

    from subtrack.core import extensions

    extensions.init_app(app)

    init_logging(app)

    from subtrack import auth

    auth.init_app(app)

    from subtrack.api import init_app as init_api

    init_api(app)

    from subtrack.core import errors

    errors.init_app(app)

    from subtrack.api.errors import register_service_error_handlers

    register_service_error_handlers(app)

    from subtrack import cli as app_cli

    app_cli.init_app(app)

    return app
