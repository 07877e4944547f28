"""Inline rich text: ``{{gold_b|text}}`` markup rendered as escaped HTML.

Known styles are ``<color>_<b|i|bi>`` for gold, blue, red, orange and green;
they map to ``rt-<style>`` CSS classes. Unknown styles fall back to
``rt-strong``. Everything outside the markup is escaped plain text.
"""
from __future__ import annotations

import re
from typing import Any

from markupsafe import Markup, escape

_COLORS = ("gold", "blue", "red", "orange", "green")
_WEIGHTS = ("b", "i", "bi")
KNOWN_STYLES = frozenset(f"{c}_{w}" for c in _COLORS for w in _WEIGHTS)
FALLBACK_CLASS = "rt-strong"

_MARKUP_RE = re.compile(r"\{\{([a-z_]+)\|(.*?)\}\}", re.DOTALL)


def style_class(style: str) -> str:
    return f"rt-{style}" if style in KNOWN_STYLES else FALLBACK_CLASS


def render_rich_text(value: Any) -> Markup:
    text = "" if value is None else str(value)
    parts = []
    last = 0
    for match in _MARKUP_RE.finditer(text):
        if match.start() > last:
            parts.append(escape(text[last:match.start()]))
        parts.append(
            Markup('<span class="{}">{}</span>').format(style_class(match.group(1)), match.group(2))
        )
        last = match.end()
    if last < len(text):
        parts.append(escape(text[last:]))
    return Markup("").join(parts)


__all__ = ["KNOWN_STYLES", "FALLBACK_CLASS", "style_class", "render_rich_text"]
