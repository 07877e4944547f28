"""Application logging helpers.

Implements a lightweight singleton logger. Honors the log level from
`anvilon.config.log_level_name()`.
"""
from __future__ import annotations

import logging
import threading
from typing import Optional

from anvilon import config as app_config

_LOCK = threading.Lock()
_PRIMARY: Optional[logging.Logger] = None
_ENV_STATUS_LOGGED = False


def get_logger(name: str = "anvilon") -> logging.Logger:
    global _PRIMARY
    if name == "anvilon" and _PRIMARY is not None:
        return _PRIMARY
    with _LOCK:
        if name == "anvilon" and _PRIMARY is not None:
            return _PRIMARY
        logger = logging.getLogger(name)
        level_name = app_config.log_level_name()
        level = getattr(logging, level_name, logging.INFO)
        logger.setLevel(level)
        if not any(isinstance(h, logging.StreamHandler) for h in logger.handlers):
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter("[anvilon] %(asctime)s %(levelname)s %(name)s %(message)s"))
            logger.addHandler(handler)
        logger.propagate = False
        if name == "anvilon":
            _PRIMARY = logger
        return logger


def log_env_status() -> None:
    """Log which backend client mode is active (once per process)."""
    global _ENV_STATUS_LOGGED
    if _ENV_STATUS_LOGGED:
        return
    _ENV_STATUS_LOGGED = True
    log = get_logger("anvilon.env")
    if app_config.should_use_mock_client():
        if app_config.use_mock_supabase():
            log.info("USE_MOCK_SUPABASE=true - using mock Supabase client")
        else:
            log.warning("Supabase not configured - using mock client (empty data)")
    else:
        log.info("Supabase configured and ready")


__all__ = ["get_logger", "log_env_status"]
