"""
App factory: create_app()

- Loads config (env, flags, secrets)
- Trusts forwarded headers only for PROXY_HOPS configured proxies
- Sets up logging
- Wires DI container (completion client, generators, limiter)
- Registers middleware (request IDs, rate limits, timing)
- Registers blueprints from routes/*
- Installs global error handlers
"""

from __future__ import annotations
from typing import Any, Dict

from flask import Flask, jsonify
from werkzeug.middleware.proxy_fix import ProxyFix

from app.config import Settings, load_settings
from app.logging_setup import configure_logging
from app.container import Container
from app import middleware
from service import CompletionLike
from service import validators
from service.validators import ValidationError

MSG_MISSING_FIELDS = "لطفاً تمام فیلدهای ضروری را پر کنید"
MSG_INVALID_VALUE = "مقدار یک یا چند فیلد معتبر نیست"

# ValidationError.code -> user-facing message
VALIDATION_MESSAGES: Dict[str, str] = {
    validators.MISSING_FIELDS: MSG_MISSING_FIELDS,
    validators.INVALID_VALUE: MSG_INVALID_VALUE,
    validators.INVALID_DATE: "تاریخ واردشده معتبر نیست",
    validators.DATE_RANGE: "تاریخ پایان نمی‌تواند قبل از تاریخ شروع باشد",
}


def _register_blueprints(app: Flask) -> None:
    # Lazy imports to avoid circulars
    from routes.health_routes import bp as health_bp
    from routes.offer_routes import bp as offer_bp

    app.register_blueprint(health_bp)
    app.register_blueprint(offer_bp)


def _install_error_handlers(app: Flask) -> None:
    @app.errorhandler(ValidationError)
    def validation_failed(err: ValidationError):
        app.logger.info(f"validation failed: {err.message}")
        body = {
            "success": False,
            "error": VALIDATION_MESSAGES.get(err.code, MSG_INVALID_VALUE),
            "code": err.code,
            "details": err.message,
            "fields": err.fields,
        }
        return jsonify(body), 400

    @app.errorhandler(400)
    def bad_request(err):
        app.logger.warning(f"400: {err}")
        return jsonify({"success": False, "error": "bad_request"}), 400

    @app.errorhandler(404)
    def not_found(err):
        return jsonify({"success": False, "error": "not_found"}), 404

    @app.errorhandler(405)
    def method_not_allowed(err):
        return jsonify({"success": False, "error": "method_not_allowed"}), 405

    @app.errorhandler(429)
    def too_many(err):
        return jsonify({"success": False, "error": "rate_limited"}), 429

    @app.errorhandler(500)
    def server_error(err):
        app.logger.exception("Unhandled server error")
        return jsonify({"success": False, "error": "server_error"}), 500


def create_app(config_override: Dict[str, Any] | None = None, *, completions: CompletionLike | None = None) -> Flask:
    # Settings & logging
    settings: Settings = load_settings(config_override)
    configure_logging(settings)

    app = Flask(__name__, static_folder=None)
    app.config["SECRET_KEY"] = settings.SECRET_KEY
    app.json.ensure_ascii = False

    # Client addresses come from X-Forwarded-For only behind known proxies
    if settings.PROXY_HOPS > 0:
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=settings.PROXY_HOPS, x_proto=settings.PROXY_HOPS)  # type: ignore[method-assign]

    # Dependency container
    container = Container(settings, completions=completions)
    app.container = container  # type: ignore[attr-defined]

    # Middleware
    middleware.install_request_id(app)
    middleware.install_rate_limit(app, container.limiter)
    middleware.install_timing_log(app)

    # Blueprints
    _register_blueprints(app)

    # Error handlers
    _install_error_handlers(app)

    app.logger.info(f"App started MODEL={settings.OPENAI_MODEL} ENHANCE={settings.FF_ENHANCE_INPUTS}")

    @app.get("/")
    def root():
        return {"ok": True, "service": "yelstar"}

    return app
