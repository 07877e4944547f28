"""Small helpers shared by the data-access modules."""
from __future__ import annotations

import logging
from typing import Any, List, Optional

from anvilon.supabase import SupabaseError, get_client


def resolve_client(client=None):
    return client if client is not None else get_client()


def log_remote_error(log: logging.Logger, label: str, exc: SupabaseError) -> None:
    log.error(
        "%s error code=%s message=%s details=%s hint=%s",
        label,
        exc.code,
        exc.message,
        exc.details,
        exc.hint,
    )


def rows_of(data: Any) -> List[dict]:
    if not isinstance(data, list):
        return []
    return [row for row in data if isinstance(row, dict)]


def parse_tags(value: Any) -> List[str]:
    """Split a semicolon separated tag column ("a; b;;c") into clean tags."""
    if not value:
        return []
    return [part.strip() for part in str(value).split(";") if part.strip()]


def opt_str(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


def as_number(value: Any, default: float = 0) -> float:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return value
    if value is None or value == "":
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return int(number) if number.is_integer() else number


def as_bool(value: Any, default: bool = False) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return default
    return bool(value)


__all__ = [
    "resolve_client",
    "log_remote_error",
    "rows_of",
    "parse_tags",
    "opt_str",
    "as_number",
    "as_bool",
]
