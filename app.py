"""Application factory."""

import logging
import os
import time
import uuid

from flask import Flask, g, jsonify, request
from flask_cors import CORS
from flask_jwt_extended import JWTManager
from flask_migrate import Migrate
from werkzeug.exceptions import HTTPException

from config import Config, get_config
from mail import init_mailer
from models import db
from routes.admin import admin_bp
from routes.auth import auth_bp
from routes.comments import comments_bp
from routes.posts import posts_bp
from utils.rate_limits import limiter
from utils.security import sanitize_error, validate_environment_security

migrate = Migrate()
jwt = JWTManager()


def create_app(config_class: type[Config] | None = None) -> Flask:
    """Create and configure the Flask application."""
    app = Flask(__name__)
    app.config.from_object(config_class or get_config())

    _configure_logging(app)

    # Core subsystems
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    init_mailer(app)

    # CORS
    CORS(
        app,
        resources={r"/api/*": {"origins": app.config.get("CORS_ORIGINS", "*")}},
        supports_credentials=True,
        methods=["GET", "PUT", "POST", "DELETE", "OPTIONS"],
        allow_headers=["Origin", "X-Requested-With", "Content-Type", "Accept", "Authorization"],
    )

    # Rate limiting
    limiter.init_app(app)

    # Blueprints
    app.register_blueprint(auth_bp, url_prefix="/api/auth")
    app.register_blueprint(posts_bp, url_prefix="/api/posts")
    app.register_blueprint(comments_bp, url_prefix="/api/comments")
    app.register_blueprint(admin_bp, url_prefix="/api/admin")

    # Health
    @app.route("/", methods=["GET"])
    def index():
        return jsonify({"success": True, "message": "API is running"})

    # Errors
    _register_error_handlers(app)
    _check_security_settings(app)

    return app


def _configure_logging(app: Flask) -> None:
    level = logging.DEBUG if app.config.get("APP_ENV") == "development" else logging.INFO
    app.logger.setLevel(level)


def _check_security_settings(app: Flask) -> None:
    result = validate_environment_security(app.config)
    for issue in result["issues"]:
        app.logger.warning("Security configuration issue: %s", issue)
    for warning in result["warnings"]:
        app.logger.warning("Security configuration warning: %s", warning)


def _error_response(status_code: int, message: str, **extra):
    request_id = g.get("request_id") or str(uuid.uuid4())
    payload = {"success": False, "message": message, "request_id": request_id}
    payload.update(extra)
    response = jsonify(payload)
    response.status_code = status_code
    response.headers.setdefault("X-Request-ID", request_id)
    return response


def _register_error_handlers(app: Flask) -> None:
    """Register JSON error handlers with request IDs."""

    @app.before_request
    def _assign_request_id():
        g.request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        g.request_started = time.perf_counter()

    @app.after_request
    def _add_request_id_header(response):
        request_id = g.get("request_id")
        if request_id:
            response.headers.setdefault("X-Request-ID", request_id)
        started = g.get("request_started")
        elapsed_ms = (time.perf_counter() - started) * 1000 if started else 0.0
        app.logger.info(
            "%s %s %s %.1fms request_id=%s",
            request.method,
            request.path,
            response.status_code,
            elapsed_ms,
            request_id,
        )
        return response

    @app.errorhandler(HTTPException)
    def _handle_http_exception(error: HTTPException):
        response = _error_response(error.code or 500, error.description or error.name)
        for header, value in error.get_headers():
            if header.lower() != "content-type":
                response.headers.setdefault(header, value)
        return response

    @app.errorhandler(Exception)
    def _handle_unexpected(error: Exception):
        db.session.rollback()
        app.logger.exception("Unhandled application error", exc_info=error)
        sanitized = sanitize_error(error, app.config.get("APP_ENV") == "production")
        extra = {"stack": sanitized["stack"]} if "stack" in sanitized else {}
        return _error_response(500, sanitized["message"], **extra)


if __name__ == "__main__":
    application = create_app()
    application.run(host="0.0.0.0", port=int(os.environ.get("PORT", application.config["PORT"])))
