# salarybench/__init__.py
import logging
import os

from flask import Flask, jsonify, request

from .config import config
from .extensions import cors, db


def _configure_logging(app):
    level = getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO)
    logging.basicConfig(level=level, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    logging.getLogger("salarybench").setLevel(level)


def create_app(config_name=None):
    config_name = config_name or os.getenv("APP_ENV", "default")
    app = Flask(__name__)
    app.config.from_object(config[config_name])
    app.url_map.strict_slashes = False  # no 308 redirects on trailing slashes

    _configure_logging(app)
    db.init_app(app)
    cors.init_app(app, resources={r"/api/*": {"origins": app.config["CORS_ORIGINS"]}})

    from .cli import register_commands
    from .routes.analytics import bp as analytics_bp
    from .routes.ingest import bp as ingest_bp
    from .routes.years import bp as years_bp

    app.register_blueprint(ingest_bp, url_prefix="/api/v1/ingest")
    app.register_blueprint(analytics_bp, url_prefix="/api/v1/analytics")
    app.register_blueprint(years_bp, url_prefix="/api/v1/years")
    register_commands(app)

    @app.get("/api/v1/health")
    def health():
        return {"status": "ok"}

    # /api/* errors are always JSON
    @app.errorhandler(404)
    def _404(e):
        if request.path.startswith("/api/"):
            return jsonify({"error": "not found", "path": request.path}), 404
        return e

    @app.errorhandler(405)
    def _405(e):
        if request.path.startswith("/api/"):
            return jsonify({"error": "method not allowed", "path": request.path}), 405
        return e

    @app.errorhandler(413)
    def _413(e):
        if request.path.startswith("/api/"):
            return jsonify({"success": False, "message": "payload too large"}), 413
        return e

    with app.app_context():
        db.create_all()
    return app
