"""Database engine & session management for the local run log.

The hosted backend owns all lore data; this SQLite file only keeps
application-side records (spell migration runs).
"""
from __future__ import annotations

import os
import threading
try:  # POSIX file locking for gunicorn multi-worker safety
    import fcntl  # type: ignore
except ImportError:  # pragma: no cover - non-POSIX platforms
    fcntl = None  # type: ignore
from contextlib import contextmanager
from typing import Optional, Iterator, Callable

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker, scoped_session, Session as SASession

from anvilon.utils.logging import get_logger
from anvilon.db.models import Base
from anvilon import config as app_config

_engine: Optional[Engine] = None
_SessionFactory: Optional[Callable[[], SASession]] = None
_scoped: Optional[scoped_session] = None
_LOCK = threading.Lock()

LOG = get_logger("anvilon.db")

_MEMORY = ":memory:"


def init_engine_once() -> None:
    global _engine, _SessionFactory, _scoped
    if _engine is not None:
        return
    with _LOCK:
        if _engine is not None:
            return
        db_path = app_config.get_db_path()
        LOG.info("Initializing local database engine at %s", db_path)
        if db_path == _MEMORY:
            _engine = create_engine("sqlite://", future=True)
            parent_dir = None
        else:
            parent_dir = os.path.dirname(os.path.abspath(db_path)) or "."
            os.makedirs(parent_dir, exist_ok=True)
            if not os.access(parent_dir, os.W_OK):
                raise RuntimeError(f"Local DB directory not writable: {parent_dir}")
            _engine = create_engine(f"sqlite:///{db_path}", future=True)
        _SessionFactory = sessionmaker(bind=_engine, expire_on_commit=False, class_=SASession)
        _scoped = scoped_session(_SessionFactory)
        # Several gunicorn workers may start together; serialize DDL across processes.
        if parent_dir is not None and fcntl is not None:
            lock_path = os.path.join(parent_dir, ".anvilon_schema.lock")
            with open(lock_path, "w") as lf:
                fcntl.flock(lf, fcntl.LOCK_EX)
                try:
                    _safe_create_schema()
                finally:
                    fcntl.flock(lf, fcntl.LOCK_UN)
        else:
            _safe_create_schema()
        LOG.debug("local schema ready")


def _safe_create_schema() -> None:
    """Run metadata.create_all, tolerating the 'already exists' start-up race."""
    if _engine is None:
        return
    try:
        Base.metadata.create_all(_engine)
    except OperationalError as e:  # pragma: no cover - concurrency edge
        if "already exists" in str(e).lower():
            LOG.warning("Schema create encountered existing tables (benign race)")
        else:
            raise


def get_engine() -> Engine:
    if _engine is None:
        init_engine_once()
    return _engine  # type: ignore[return-value]


def get_session_factory() -> Callable[[], SASession]:
    if _SessionFactory is None:
        init_engine_once()
    return _SessionFactory  # type: ignore[return-value]


def get_scoped_session() -> scoped_session:
    if _scoped is None:
        init_engine_once()
    if _scoped is None:
        raise RuntimeError("Scoped session could not be initialized.")
    return _scoped


@contextmanager
def app_session() -> Iterator[SASession]:
    scoped = get_scoped_session()
    sess = scoped()
    try:
        yield sess
        sess.commit()
    except Exception:
        sess.rollback()
        raise
    finally:
        sess.close()


def reset_for_tests(drop: bool = False) -> None:
    global _engine, _SessionFactory, _scoped
    with _LOCK:
        if _engine is not None and drop:
            try:
                Base.metadata.drop_all(_engine)
            except Exception:
                LOG.warning("Failed dropping tables during reset", exc_info=True)
        if _scoped is not None:
            _scoped.remove()
        if _engine is not None:
            _engine.dispose()
        _engine = None
        _SessionFactory = None
        _scoped = None


__all__ = [
    "init_engine_once",
    "get_engine",
    "get_session_factory",
    "get_scoped_session",
    "app_session",
    "reset_for_tests",
]
