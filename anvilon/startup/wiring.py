"""Application initialization / wiring.

Orchestrates: config validation, secret key, CSRF, Flask-Babel, local DB
init, route registration and template helpers.
"""
from __future__ import annotations

from typing import Any, Mapping, Optional

from flask import Flask
from flask_wtf.csrf import CSRFProtect, generate_csrf

from anvilon import config as app_config
from anvilon.db import init_engine_once
from anvilon.i18n import get_request_lang, init_babel
from anvilon.routes.inject import register_all as register_routes
from anvilon.ui import render_rich_text
from anvilon.utils.identity import get_current_user_id, is_admin_user
from anvilon.utils.logging import get_logger, log_env_status

LOG = get_logger("anvilon.startup")

csrf = CSRFProtect()


def _register_template_helpers(app: Any) -> None:
    if getattr(app, "_anvilon_template_helpers", False):
        return
    app.add_template_filter(render_rich_text, "rich_text")

    @app.context_processor
    def _inject_shell_context():
        return {
            "current_lang": get_request_lang(),
            "csrf_token_value": generate_csrf(),
            "is_signed_in": bool(get_current_user_id()),
            "is_admin": is_admin_user(),
            "app_meta": app_config.metadata(),
        }

    setattr(app, "_anvilon_template_helpers", True)


def init_app(app: Any) -> None:
    LOG.debug("init_app starting")
    app.config.setdefault("SECRET_KEY", app_config.secret_key())
    app.config.setdefault("SESSION_COOKIE_SAMESITE", "Lax")
    app.config.setdefault("SESSION_COOKIE_SECURE", app_config.is_production())
    if "csrf" not in app.extensions:
        csrf.init_app(app)
    init_babel(app)
    init_engine_once()
    LOG.debug("DB engine initialized")
    register_routes(app)
    _register_template_helpers(app)
    log_env_status()
    LOG.info("App startup wiring complete config=%s", app_config.summarize_runtime_config())


def create_app(config_overrides: Optional[Mapping[str, Any]] = None) -> Flask:
    """Build the Flask app; raises ``ConfigError`` on unusable production config."""
    app_config.validate_env_for_startup()
    app = Flask(
        "anvilon",
        template_folder="templates",
        static_folder="static",
    )
    if config_overrides:
        app.config.update(config_overrides)
    init_app(app)
    return app


__all__ = ["create_app", "init_app", "csrf"]
