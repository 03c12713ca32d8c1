"""Application factory wiring Flask extensions and blueprints."""

from __future__ import annotations

from flask import Flask

from accounts_api.core.config import BaseConfig, get_config, validate_production_config
from accounts_api.core.logger import configure_logging
from accounts_api.core.logger import init_app as init_logging


def create_app(config: str | type[BaseConfig] | object | None = None) -> Flask:
    """Build and configure the Flask application.

    ``config`` may be a config class, an import path, or ``None`` to pick the
    class named by ``APP_ENV``. Service collaborators live in
    ``app.extensions`` and are looked up per request, so tests may replace them
    after the app is built.
    """

    app = Flask(__name__)
    app.config.from_object(get_config() if config is None else config)
    if app.config.get("APP_ENV") == "production":
        validate_production_config(app.config)

    configure_logging(app.config.get("LOG_LEVEL", "INFO"))
    init_logging(app)

    from accounts_api.core import extensions

    extensions.init_app(app)

    from accounts_api.core import cors

    cors.init_app(app)

    from accounts_api.api import init_app as init_api

    init_api(app)

    from accounts_api.core import errors

    errors.init_app(app)

    return app
