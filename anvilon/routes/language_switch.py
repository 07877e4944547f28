"""Language switch endpoint for every visitor (cookie based)."""
from __future__ import annotations

from urllib.parse import urlparse

from flask import Blueprint, jsonify, make_response, redirect, request

from anvilon.i18n.preferences import LANG_COOKIE, LANG_COOKIE_MAX_AGE, normalize_lang
from anvilon.utils.logging import get_logger

LOG = get_logger("anvilon.language_switch")

bp = Blueprint("language_switch", __name__)


def safe_next(target: str | None, default: str = "/") -> str:
    """Only local absolute paths are allowed as redirect targets."""
    if not target or not isinstance(target, str):
        return default
    parsed = urlparse(target)
    if parsed.scheme or parsed.netloc or not target.startswith("/") or target.startswith("//"):
        return default
    # Browsers read "/\host" as "//host".
    if "\\" in target:
        return default
    return target


def _set_lang_cookie(response, lang: str):
    response.set_cookie(LANG_COOKIE, lang, max_age=LANG_COOKIE_MAX_AGE, path="/", samesite="Lax")
    return response


@bp.route("/api/lang", methods=["POST"])
def switch_language():
    payload = request.get_json(silent=True) or {}
    raw = payload.get("lang") if isinstance(payload, dict) else None
    lang = normalize_lang(raw)
    LOG.debug("language switched to %s", lang)
    return _set_lang_cookie(make_response(jsonify({"ok": True, "lang": lang})), lang)


@bp.route("/api/lang", methods=["GET"])
def switch_language_redirect():
    lang = normalize_lang(request.args.get("lang"))
    target = safe_next(request.args.get("next"))
    return _set_lang_cookie(redirect(target), lang)


def register_language_switch(app) -> None:
    if getattr(app, "_anvilon_language_switch", False):
        return
    app.register_blueprint(bp)
    setattr(app, "_anvilon_language_switch", True)
    LOG.debug("Language switch blueprint registered")


__all__ = ["register_language_switch", "safe_next", "bp"]
