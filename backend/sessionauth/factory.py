"""Application factory wiring Flask extensions and blueprints."""

from __future__ import annotations

from flask import Flask

from sessionauth.core.config import BaseConfig, get_config, validate_config
from sessionauth.core.logger import configure_logging
from sessionauth.core.logger import init_app as init_logging
from sessionauth.services._shared.ports import AccountMailer, RefreshTokenStore


def create_app(
    config: str | type[BaseConfig] | object | None = None,
    *,
    refresh_store: RefreshTokenStore | None = None,
    mailer: AccountMailer | None = None,
    instance_relative_config: bool = True,
    instance_config_filename: str = "config.py",
) -> Flask:
    """Build and configure the Flask application.

    :param config: Config object, class or import path. Defaults to the
        class selected by ``APP_ENV``.
    :param refresh_store: Pre-built refresh store; built from ``REDIS_URL``
        when omitted.
    :param mailer: Account mailer; defaults to the logging mailer.
    :raises RuntimeError: On unsafe credential settings.
    """

    app = Flask(__name__, instance_relative_config=instance_relative_config)

    app.config.from_object(get_config() if config is None else config)
    if instance_relative_config and instance_config_filename:
        app.config.from_pyfile(instance_config_filename, silent=True)

    validate_config(app.config)
    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    from sessionauth.core import extensions

    extensions.init_app(app, refresh_store=refresh_store, mailer=mailer)

    init_logging(app)

    from sessionauth.core import cors

    cors.init_app(app)

    from sessionauth.api import init_app as init_api

    init_api(app)

    from sessionauth.core import errors

    errors.init_app(app)

    from sessionauth import cli as app_cli

    app_cli.init_app(app)

    return app
