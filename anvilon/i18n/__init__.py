"""Flask-Babel wiring: locale follows the ``lang`` cookie."""
from __future__ import annotations

from pathlib import Path

from flask import has_request_context, request
from flask_babel import Babel

from anvilon.i18n.catalogs import ensure_compiled
from anvilon.i18n.preferences import (
    DEFAULT_LANG,
    LANG_COOKIE,
    SUPPORTED_LANGUAGES,
    normalize_lang,
    pick_localized_text,
)
from anvilon.utils.logging import get_logger

LOG = get_logger("anvilon.i18n")

_TRANSLATIONS_DIR = Path(__file__).resolve().parents[1] / "translations"


def get_request_lang() -> str:
    if not has_request_context():
        return DEFAULT_LANG
    return normalize_lang(request.cookies.get(LANG_COOKIE))


def select_locale() -> str:
    return get_request_lang()


def init_babel(app) -> None:
    """Attach Flask-Babel once; translation root is ``anvilon/translations``."""
    if "babel" in app.extensions:
        return
    app.config.setdefault("BABEL_DEFAULT_LOCALE", DEFAULT_LANG)
    app.config.setdefault("BABEL_TRANSLATION_DIRECTORIES", str(_TRANSLATIONS_DIR))
    ensure_compiled(Path(app.config["BABEL_TRANSLATION_DIRECTORIES"]))
    Babel(app, locale_selector=select_locale)
    LOG.debug("Flask-Babel initialised (translations=%s)", app.config["BABEL_TRANSLATION_DIRECTORIES"])


__all__ = [
    "DEFAULT_LANG",
    "LANG_COOKIE",
    "SUPPORTED_LANGUAGES",
    "normalize_lang",
    "pick_localized_text",
    "get_request_lang",
    "select_locale",
    "init_babel",
]
