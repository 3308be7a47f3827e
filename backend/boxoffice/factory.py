"""Application factory wiring Flask extensions and blueprints."""

from __future__ import annotations

from flask import Flask

from boxoffice.core.config import BaseConfig, get_config
from boxoffice.core.logger import configure_logging, init_app as init_logging


def create_app(
    config: str | type[BaseConfig] | object | None = None,
    *,
    instance_relative_config: bool = True,
    instance_config_filename: str = "config.py",
) -> Flask:
    """Build and configure the Flask application.

    :raises boxoffice.core.config.ConfigurationError: When the JWT secrets,
        token lifetimes or bcrypt work factor are missing or invalid.
    """

    app = Flask(__name__, instance_relative_config=instance_relative_config)

    app.config.from_object(get_config() if config is None else config)
    if instance_relative_config and instance_config_filename:
        app.config.from_pyfile(instance_config_filename, silent=True)

    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    # Fail fast on bad secrets before anything else is bound
    from boxoffice.core import security

    security.configure_jwt(app)

    from boxoffice.core import proxy

    proxy.init_app(app)

    from boxoffice.core import extensions

    extensions.init_app(app)

    init_logging(app)

    from boxoffice.core import cors

    cors.init_app(app)

    security.init_app(app)

    from boxoffice.api import init_app as init_api

    init_api(app)

    from boxoffice.core import errors

    errors.init_app(app)

    from boxoffice import cli as app_cli

    app_cli.init_app(app)

    return app
