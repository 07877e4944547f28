"""Application configuration accessors.

Centralizes environment variable parsing & defaults. The hosted backend
variables also accept the ``NEXT_PUBLIC_*`` names used by older deployments
so operators do not need to rename them.
"""
from __future__ import annotations

import os
from functools import lru_cache
from typing import List, Optional

APP_NAME = "anvilon"
APP_VERSION = "0.4.0"
APP_DESCRIPTION = "Anvilon lore library, account entry and spell builder"

DEFAULT_DB_PATH = "anvilon.db"
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_HTTP_TIMEOUT = 15.0
DEV_SECRET_KEY = "anvilon-dev-secret"
_TRUE = {"1", "true", "yes", "on"}
_ENV_MODES = ("production", "development", "test")


class ConfigError(RuntimeError):
    """Raised when the runtime configuration cannot start the app."""


def _raw_env(name: str, default: str | None = None) -> str | None:
    val = os.getenv(name)
    return val if val is not None else default


def _clean_env(*names: str) -> Optional[str]:
    for name in names:
        value = os.getenv(name)
        if value is None:
            continue
        value = value.strip()
        if value:
            return value
    return None


def env_bool(name: str, default: bool = False) -> bool:
    raw = _raw_env(name, str(default).lower())
    if raw is None:
        return default
    return raw.strip().lower() in _TRUE


def env_mode() -> str:
    raw = (_raw_env("ANVILON_ENV", "") or "").strip().lower()
    return raw if raw in _ENV_MODES else "development"


def is_production() -> bool:
    return env_mode() == "production"


def supabase_url() -> Optional[str]:
    return _clean_env("SUPABASE_URL", "NEXT_PUBLIC_SUPABASE_URL")


def supabase_anon_key() -> Optional[str]:
    return _clean_env("SUPABASE_ANON_KEY", "NEXT_PUBLIC_SUPABASE_ANON_KEY")


def use_mock_supabase() -> bool:
    return env_bool("USE_MOCK_SUPABASE", default=False)


def is_supabase_configured() -> bool:
    return bool(supabase_url() and supabase_anon_key())


def should_use_mock_client() -> bool:
    """Mock client is used when requested explicitly or when config is missing."""
    return use_mock_supabase() or not is_supabase_configured()


def secret_key() -> str:
    return _clean_env("ANVILON_SECRET_KEY") or DEV_SECRET_KEY


def get_db_path() -> str:
    return _raw_env("ANVILON_DB_PATH", DEFAULT_DB_PATH)  # type: ignore[return-value]


def log_level_name() -> str:
    return (_raw_env("ANVILON_LOG_LEVEL", DEFAULT_LOG_LEVEL) or DEFAULT_LOG_LEVEL).upper()


def http_timeout() -> float:
    raw = _raw_env("ANVILON_HTTP_TIMEOUT")
    if not raw:
        return DEFAULT_HTTP_TIMEOUT
    try:
        value = float(raw)
    except ValueError:
        return DEFAULT_HTTP_TIMEOUT
    return value if value > 0 else DEFAULT_HTTP_TIMEOUT


def admin_emails() -> List[str]:
    """Lower-cased e-mails allowed to write spells (ANVILON_ADMIN_EMAILS)."""
    raw = _raw_env("ANVILON_ADMIN_EMAILS", "") or ""
    return [part.strip().lower() for part in raw.split(",") if part.strip()]


def validate_env_for_startup() -> None:
    """Fail early in production when the hosted backend is not configured.

    Development and test runs fall back to the mock client instead.
    """
    if not is_production():
        return
    if not is_supabase_configured() and not use_mock_supabase():
        raise ConfigError(
            "Missing required environment variables for production:\n"
            "  - SUPABASE_URL\n"
            "  - SUPABASE_ANON_KEY\n\n"
            "Either provide these variables or set USE_MOCK_SUPABASE=true to run without database."
        )
    if secret_key() == DEV_SECRET_KEY:
        raise ConfigError("ANVILON_SECRET_KEY must be set in production.")


@lru_cache(maxsize=1)
def metadata() -> dict:
    return {
        "name": APP_NAME,
        "version": APP_VERSION,
        "description": APP_DESCRIPTION,
    }


def summarize_runtime_config() -> dict:
    return {
        "env": env_mode(),
        "db_path": get_db_path(),
        "log_level": log_level_name(),
        "supabase_configured": is_supabase_configured(),
        "mock_client": should_use_mock_client(),
    }


__all__ = [
    "APP_NAME",
    "APP_VERSION",
    "APP_DESCRIPTION",
    "ConfigError",
    "env_bool",
    "env_mode",
    "is_production",
    "supabase_url",
    "supabase_anon_key",
    "use_mock_supabase",
    "is_supabase_configured",
    "should_use_mock_client",
    "secret_key",
    "get_db_path",
    "log_level_name",
    "http_timeout",
    "admin_emails",
    "validate_env_for_startup",
    "metadata",
    "summarize_runtime_config",
]
