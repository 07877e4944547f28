"""``account.user_login``: username <-> e-mail mapping for password login.

Errors propagate (`SupabaseError`); the auth service turns them into
user-facing messages.
"""
from __future__ import annotations

from typing import Any, Dict, Optional

from anvilon.data._common import resolve_client

ACCOUNT_SCHEMA = "account"
TABLE = "user_login"


def find_login_email(username: str, client=None) -> Optional[str]:
    res = (
        resolve_client(client)
        .table(TABLE, schema=ACCOUNT_SCHEMA)
        .select("email")
        .eq("username", username)
        .maybe_single()
        .execute()
    )
    row = res.data if isinstance(res.data, dict) else None
    email = (row or {}).get("email")
    return str(email) if email else None


def upsert_user_login(*, user_id: str, username: str, email: str, client=None) -> None:
    (
        resolve_client(client)
        .table(TABLE, schema=ACCOUNT_SCHEMA)
        .upsert({"user_id": user_id, "username": username, "email": email}, on_conflict="user_id")
        .execute()
    )


def get_user_login(user_id: str, client=None) -> Optional[Dict[str, Any]]:
    res = (
        resolve_client(client)
        .table(TABLE, schema=ACCOUNT_SCHEMA)
        .select("user_id, username, email")
        .eq("user_id", user_id)
        .maybe_single()
        .execute()
    )
    return res.data if isinstance(res.data, dict) else None


__all__ = ["find_login_email", "upsert_user_login", "get_user_login"]
