"""Shared language preference helpers for UI switching."""
from __future__ import annotations

from typing import Any, Optional

LANG_COOKIE = "lang"
LANG_COOKIE_MAX_AGE = 60 * 60 * 24 * 365
DEFAULT_LANG = "ru"
SUPPORTED_LANGUAGES = ("ru", "en")


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def normalize_lang(value: Optional[Any]) -> str:
    """Anything other than "en" means the default (Russian)."""
    return "en" if _text(value).lower() == "en" else DEFAULT_LANG


def pick_localized_text(
    ru: Optional[Any],
    en: Optional[Any],
    lang: str = DEFAULT_LANG,
    fallback: Optional[Any] = None,
) -> str:
    if lang == "en":
        en_value = _text(en)
        if en_value:
            return en_value
    ru_value = _text(ru)
    if ru_value:
        return ru_value
    return _text(fallback)


__all__ = [
    "LANG_COOKIE",
    "LANG_COOKIE_MAX_AGE",
    "DEFAULT_LANG",
    "SUPPORTED_LANGUAGES",
    "normalize_lang",
    "pick_localized_text",
]
