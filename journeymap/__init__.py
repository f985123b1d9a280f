"""
Journey Map Platform
Flask Application Factory.

Usage:
    from journeymap import create_app
    app = create_app()           # defaults to "development"
    app = create_app("testing")  # explicit config
"""

import logging
import os

from flask import Flask
from flask_cors import CORS

from journeymap.config import config
from journeymap.core.exceptions import NotFoundError, StorageError, ValidationError
from journeymap.middleware.logging_config import configure_logging
from journeymap.models import db
from journeymap.services.snapshot_store import build_snapshot_store
from journeymap.utils.errors import E, api_error

logger = logging.getLogger(__name__)


def _register_error_handlers(app):
    """Map the platform exception hierarchy to JSON error responses."""

    @app.errorhandler(NotFoundError)
    def _not_found(exc):
        return api_error(E.NOT_FOUND, str(exc))

    @app.errorhandler(ValidationError)
    def _invalid(exc):
        return api_error(E.VALIDATION_INVALID, str(exc), details=exc.details)

    @app.errorhandler(StorageError)
    def _storage(exc):
        logger.exception("Snapshot storage failure: %s", exc)
        return api_error(E.DATABASE, "Snapshot storage is unavailable. Please try again.")

    @app.errorhandler(500)
    def _server_error(exc):
        logger.error("500 error: %s", exc, exc_info=True)
        return api_error(E.INTERNAL, "Internal server error")


def create_app(config_name=None):
    """
    Create and configure the Flask application.

    Args:
        config_name: Configuration environment name.
                     One of: "development", "testing", "production".
                     Defaults to APP_ENV env var, or "development" if unset.

    Returns:
        Configured Flask application instance.
    """
    if config_name is None:
        config_name = os.getenv("APP_ENV", "development")

    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config[config_name]())

    # ── Structured logging (must be first) ───────────────────────────────
    configure_logging(app)

    # ── Extensions ───────────────────────────────────────────────────────
    db.init_app(app)
    cors_origins = app.config.get("CORS_ORIGINS", "*")
    if cors_origins and cors_origins != "*":
        CORS(app, origins=[o.strip() for o in cors_origins.split(",") if o.strip()])
    else:
        CORS(app)

    # ── Snapshot storage port ────────────────────────────────────────────
    from journeymap.models import snapshot as _snapshot_models  # noqa: F401

    app.extensions["snapshot_store"] = build_snapshot_store(app)

    os.makedirs(app.instance_path, exist_ok=True)
    with app.app_context():
        try:
            db.create_all()
        except Exception as e:
            app.logger.warning("db.create_all() failed: %s", e)

    _register_error_handlers(app)

    # ── Blueprints ───────────────────────────────────────────────────────
    from journeymap.blueprints.journey_map_bp import journey_map_bp
    from journeymap.blueprints.reporting_bp import reporting_bp
    from journeymap.blueprints.snapshot_bp import snapshot_bp

    app.register_blueprint(journey_map_bp)
    app.register_blueprint(reporting_bp)
    app.register_blueprint(snapshot_bp)

    logger.info(
        "Journey Map Platform started: env=%s storage=%s",
        config_name, app.config.get("STORAGE_BACKEND"),
    )
    return app
