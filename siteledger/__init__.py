"""
SiteLedger
Flask Application Factory.

Usage:
    from siteledger import create_app
    app = create_app()           # defaults to "development"
    app = create_app("testing")  # explicit config
"""

import logging
import os

from flask import Flask, request
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

from siteledger.config import config
from siteledger.middleware.logging_config import configure_logging
from siteledger.middleware.rate_limiter import init_rate_limits
from siteledger.middleware.timing import init_request_timing
from siteledger.models import store
from siteledger.services.file_store import FileStore

logger = logging.getLogger(__name__)

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[],                     # no global limit, applied per blueprint
    storage_uri=os.getenv("RATELIMIT_STORAGE_URI", "memory://"),
)


def create_app(config_name=None, **overrides):
    """
    Create and configure the Flask application.

    Args:
        config_name: Configuration environment name.
                     One of: "development", "testing", "production".
                     Defaults to APP_ENV env var, or "development" if unset.
        overrides:   Extra config keys applied after the config class
                     (tests pass DATA_DIR / PROGRESS_SOURCE this way).

    Returns:
        Configured Flask application instance.
    """
    if config_name is None:
        config_name = os.getenv("APP_ENV", "development")

    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config[config_name]())
    app.config.update(overrides)

    # ── Structured logging (must be first) ───────────────────────────────
    configure_logging(app)

    # ── Extensions ───────────────────────────────────────────────────────
    limiter.init_app(app)

    cors_origins = app.config.get("CORS_ORIGINS", "*")
    if cors_origins and cors_origins != "*":
        CORS(app, origins=[o.strip() for o in cors_origins.split(",") if o.strip()])
    else:
        CORS(app)

    # ── Storage ──────────────────────────────────────────────────────────
    data_dir = app.config["DATA_DIR"]
    os.makedirs(data_dir, exist_ok=True)
    store.init_app(app)
    app.extensions["siteledger_files"] = FileStore(data_dir)

    # ── Request timing middleware ────────────────────────────────────────
    init_request_timing(app)

    # ── Blueprints ───────────────────────────────────────────────────────
    from siteledger.blueprints.ai_bp import ai_bp
    from siteledger.blueprints.boq_bp import boq_bp
    from siteledger.blueprints.correspondence_bp import correspondence_bp
    from siteledger.blueprints.daily_report_bp import daily_report_bp
    from siteledger.blueprints.dashboard_bp import dashboard_bp
    from siteledger.blueprints.health_bp import health_bp
    from siteledger.blueprints.project_bp import project_bp
    from siteledger.blueprints.quality_bp import quality_bp
    from siteledger.blueprints.resource_bp import resource_bp
    from siteledger.blueprints.schedule_bp import schedule_bp

    app.register_blueprint(project_bp)
    app.register_blueprint(boq_bp)
    app.register_blueprint(schedule_bp)
    app.register_blueprint(daily_report_bp)
    app.register_blueprint(quality_bp)
    app.register_blueprint(resource_bp)
    app.register_blueprint(correspondence_bp)
    app.register_blueprint(dashboard_bp)
    app.register_blueprint(ai_bp)
    app.register_blueprint(health_bp)

    init_rate_limits(app, limiter)

    # ── Error handlers ───────────────────────────────────────────────────
    @app.errorhandler(404)
    def not_found(e):
        if request.path.startswith("/api/"):
            return {"error": "Not found", "path": request.path}, 404
        return {"error": "Not found"}, 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return {"error": "Method not allowed"}, 405

    @app.errorhandler(413)
    def too_large(e):
        return {"error": "Upload too large", "limit": app.config.get("MAX_CONTENT_LENGTH")}, 413

    @app.errorhandler(429)
    def rate_limited(e):
        return {"error": "Too many requests", "retry_after": e.description}, 429

    @app.errorhandler(500)
    def server_error(e):
        logger.error("500 error: %s", e, exc_info=True)
        return {"error": "Internal server error"}, 500

    logger.info("SiteLedger started (env=%s, progress_source=%s)", config_name, store.policy.value)
    return app
