"""Hosted backend access: REST/auth client, mock client and factory."""
from __future__ import annotations

import threading
from typing import Optional, Union

from anvilon import config as app_config
from anvilon.supabase.client import (
    APIResponse,
    AuthError,
    AuthSession,
    AuthUser,
    MULTIPLE_ROWS_CODE,
    SignUpResult,
    SupabaseClient,
    SupabaseError,
)
from anvilon.supabase.mock_client import MockSupabaseClient
from anvilon.supabase.public_url import get_public_storage_url
from anvilon.utils.logging import get_logger, log_env_status

LOG = get_logger("anvilon.supabase")

AnyClient = Union[SupabaseClient, MockSupabaseClient]

_client: Optional[AnyClient] = None
_LOCK = threading.Lock()


def _build_client() -> AnyClient:
    log_env_status()
    if app_config.should_use_mock_client():
        return MockSupabaseClient()
    return SupabaseClient(
        app_config.supabase_url(),  # type: ignore[arg-type]
        app_config.supabase_anon_key(),  # type: ignore[arg-type]
        timeout=app_config.http_timeout(),
    )


def get_client() -> AnyClient:
    """Process-wide client: mock when requested or unconfigured, real otherwise."""
    global _client
    if _client is not None:
        return _client
    with _LOCK:
        if _client is None:
            _client = _build_client()
        return _client


def get_server_client() -> AnyClient:
    """Like `get_client` but refuses to silently fall back to the mock."""
    if not app_config.is_supabase_configured() and not app_config.use_mock_supabase():
        raise app_config.ConfigError(
            "Supabase env is missing. Set SUPABASE_URL and SUPABASE_ANON_KEY "
            "(or NEXT_PUBLIC_SUPABASE_URL / NEXT_PUBLIC_SUPABASE_ANON_KEY)."
        )
    return get_client()


def reset_client() -> None:
    global _client
    with _LOCK:
        _client = None


__all__ = [
    "APIResponse",
    "AuthError",
    "AuthSession",
    "AuthUser",
    "MULTIPLE_ROWS_CODE",
    "SignUpResult",
    "SupabaseClient",
    "SupabaseError",
    "MockSupabaseClient",
    "get_public_storage_url",
    "get_client",
    "get_server_client",
    "reset_client",
]
