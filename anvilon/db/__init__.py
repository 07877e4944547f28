"""Local database layer root (engine + scoped sessions)."""

from .engine import (
    init_engine_once,
    get_engine,
    get_session_factory,
    get_scoped_session,
    app_session,
)

__all__ = [
    "init_engine_once",
    "get_engine",
    "get_session_factory",
    "get_scoped_session",
    "app_session",
]
