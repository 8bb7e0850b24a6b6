"""Application factory wiring Flask extensions and blueprints."""

from __future__ import annotations

from flask import Flask

from authsvc.core.config import BaseConfig, get_config, validate_config
from authsvc.core.logger import configure_logging, init_app as init_logging


def create_app(
    config: str | type[BaseConfig] | object | None = None,
    *,
    instance_relative_config: bool = True,
    instance_config_filename: str = "config.py",
) -> Flask:
    """Build and configure the Flask application.

    :raises RuntimeError: If the loaded configuration is unusable (for
        example an empty ``JWT_SECRET_KEY``).
    """

    app = Flask(__name__, instance_relative_config=instance_relative_config)

    app.config.from_object(get_config() if config is None else config)
    if instance_relative_config and instance_config_filename:
        app.config.from_pyfile(instance_config_filename, silent=True)

    validate_config(app.config)

    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    # Proxy headers if running behind a reverse proxy (optional module)
    from authsvc.core import proxy

    proxy.init_app(app)

    from authsvc.core import extensions

    extensions.init_app(app)

    init_logging(app)

    from authsvc.core import cors

    cors.init_app(app)

    from authsvc.services.auth import wiring

    wiring.init_app(app)

    from authsvc.api import init_app as init_api

    init_api(app)

    from authsvc.core import errors

    errors.init_app(app)

    from authsvc import cli as app_cli

    app_cli.init_app(app)

    return app
