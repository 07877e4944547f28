"""Plain-text attachment responses (spell migration reports)."""
from __future__ import annotations

from urllib.parse import quote

from flask import Response

DEFAULT_FILENAME = "spell_migration.txt"


def content_disposition(filename: str) -> str:
    """ASCII ``filename`` plus the RFC 5987 ``filename*`` for non-latin names."""
    fallback = filename.encode("ascii", "ignore").decode("ascii").strip() or DEFAULT_FILENAME
    fallback = fallback.replace('"', "")
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename)}"


def text_attachment(text: str, filename: str) -> Response:
    response = Response(text or "", mimetype="text/plain")
    response.headers["Content-Type"] = "text/plain; charset=utf-8"
    response.headers["Content-Disposition"] = content_disposition(filename)
    return response


__all__ = ["content_disposition", "text_attachment"]
