import os
from flask import Flask, jsonify
from dotenv import load_dotenv
from werkzeug.exceptions import HTTPException, RequestEntityTooLarge

load_dotenv()


def create_app(config_name=None, config_overrides=None):
    flask_app = Flask(__name__)

    if config_name is None:
        config_name = os.environ.get("FLASK_ENV")
        if not config_name:
            # Default to production on managed platforms to avoid accidental
            # debug mode/weak defaults when env selection is omitted.
            if os.environ.get("RAILWAY_ENVIRONMENT") or os.environ.get("PORT"):
                config_name = "production"
            else:
                config_name = "development"

    from supportdesk.config import config_map

    config_cls = config_map.get(config_name, config_map["development"])
    flask_app.config.from_object(config_cls)
    if config_overrides:
        flask_app.config.update(config_overrides)

    if hasattr(config_cls, "init_app"):
        config_cls.init_app(flask_app)

    # Initialize extensions
    from supportdesk.extensions import db, migrate, cors, init_storage

    db.init_app(flask_app)
    migrate.init_app(flask_app, db)
    cors.init_app(flask_app, resources={r"/*": {"origins": flask_app.config["CORS_ORIGINS"]}})
    init_storage(flask_app)

    # Import models so Alembic sees them
    from supportdesk.models import User, Image, SupportRequest  # noqa: F401

    # Create missing tables; a DB outage is reported by /health instead
    with flask_app.app_context():
        try:
            db.create_all()
        except Exception:
            flask_app.logger.exception("Could not create database tables")

    # Register blueprints
    from supportdesk.blueprints.auth import auth_bp
    from supportdesk.blueprints.images import images_bp
    from supportdesk.blueprints.support import support_bp

    flask_app.register_blueprint(auth_bp)
    flask_app.register_blueprint(images_bp)
    flask_app.register_blueprint(support_bp)

    register_error_handlers(flask_app)

    # Register CLI commands
    from supportdesk.cli import register_cli

    register_cli(flask_app)

    # Health check
    @flask_app.route("/health")
    def health():
        checks = {"status": "ok"}
        try:
            db.session.execute(db.text("SELECT 1"))
            checks["db"] = "ok"
        except Exception:
            flask_app.logger.exception("Health check DB probe failed")
            checks["db"] = "error"
            checks["status"] = "degraded"
        status_code = 200 if checks["status"] == "ok" else 503
        return checks, status_code

    return flask_app


def register_error_handlers(flask_app):
    """Render every failure as JSON at the request boundary."""
    from supportdesk.errors import ApiError, FileTooLarge

    @flask_app.errorhandler(ApiError)
    def handle_api_error(e):
        if e.status_code >= 500:
            flask_app.logger.error("Request failed: %s", e.message)
        return jsonify(e.to_dict()), e.status_code

    @flask_app.errorhandler(RequestEntityTooLarge)
    def handle_too_large(e):
        return jsonify(success=False, message=FileTooLarge.message), 413

    @flask_app.errorhandler(HTTPException)
    def handle_http_error(e):
        return jsonify(success=False, message=e.description), e.code

    @flask_app.errorhandler(Exception)
    def handle_unexpected(e):
        if isinstance(e, HTTPException):
            return handle_http_error(e)
        flask_app.logger.exception("Unhandled error")
        body = {"success": False, "message": "Internal server error"}
        # Never leak internals in production
        if flask_app.config.get("EXPOSE_ERROR_DETAILS"):
            body["error"] = str(e)
        return jsonify(body), 500
