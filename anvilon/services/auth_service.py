"""Password login / registration against the hosted auth API.

Login accepts an e-mail or a username; usernames are resolved to e-mails
through ``account.user_login``. Registration creates the auth user, then
upserts and reads back the ``user_login`` row so the username is usable for
the next login.
"""
from __future__ import annotations

import re
from typing import Any, Dict, Optional

from anvilon.data import user_login as user_login_data
from anvilon.supabase import AuthError, AuthSession, AuthUser, SupabaseError, get_client
from anvilon.utils.logging import get_logger

LOG = get_logger("anvilon.auth_service")

EMAIL_REGEX = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]{2,}$")


def _client(client=None):
    return client if client is not None else get_client()


def is_valid_email(value: str) -> bool:
    return bool(EMAIL_REGEX.match(value or ""))


def resolve_login_email(identifier: str, client=None) -> str:
    """E-mail for a login identifier; identifiers with "@" are used as-is."""
    if "@" in identifier:
        return identifier
    try:
        email = user_login_data.find_login_email(identifier, client=_client(client))
    except SupabaseError as exc:
        LOG.warning("user_login lookup failed username=%s code=%s message=%s", identifier, exc.code, exc.message)
        raise AuthError("user_not_found", exc.message) from exc
    if not email:
        raise AuthError("user_not_found")
    return email


def login(identifier: str, password: str, client=None) -> AuthSession:
    identifier = (identifier or "").strip()
    password = (password or "").strip()
    if not identifier or not password:
        raise AuthError("required")
    cl = _client(client)
    email = resolve_login_email(identifier, client=cl)
    session = cl.auth.sign_in_with_password(email, password)
    LOG.info("login ok user_id=%s", session.user.id)
    return session


def register(email: str, username: str, password: str, client=None) -> AuthUser:
    email = (email or "").strip().lower()
    username = (username or "").strip()
    password = (password or "").strip()
    if not email or not username or not password:
        raise AuthError("required")
    if not is_valid_email(email):
        raise AuthError("invalid_email")

    cl = _client(client)
    signed_up = cl.auth.sign_up(email, password)
    user = signed_up.user
    # The login row is written as the new user when the backend hands out a session.
    writer = cl.for_user(signed_up.access_token)
    try:
        user_login_data.upsert_user_login(user_id=user.id, username=username, email=email, client=writer)
        row = user_login_data.get_user_login(user.id, client=writer)
    except SupabaseError as exc:
        LOG.error("user_login upsert failed user_id=%s code=%s message=%s", user.id, exc.code, exc.message)
        raise AuthError("profile_failed", exc.message) from exc
    if not row or not row.get("user_id"):
        raise AuthError("profile_failed")
    LOG.info("registered user_id=%s", user.id)
    return user


def account_display_name(user: Optional[AuthUser], login_row: Optional[Dict[str, Any]], lang: str) -> str:
    candidates = [
        (login_row or {}).get("username"),
        (user.user_metadata.get("username") if user else None),
        ((user.email or "").split("@")[0] if user else None),
    ]
    for candidate in candidates:
        if isinstance(candidate, str) and candidate.strip():
            return candidate.strip()
    return "Player" if lang == "en" else "Игрок"


def load_account(access_token: Optional[str], lang: str, client=None) -> Optional[Dict[str, Any]]:
    """Account view data, or None when the token is missing or rejected."""
    cl = _client(client)
    user = cl.auth.get_user(access_token)
    if user is None:
        return None
    login_row: Optional[Dict[str, Any]] = None
    try:
        login_row = user_login_data.get_user_login(user.id, client=cl.for_user(access_token))
    except SupabaseError as exc:
        LOG.warning("user_login read failed user_id=%s code=%s message=%s", user.id, exc.code, exc.message)
    return {
        "user": user,
        "login_row": login_row,
        "display_name": account_display_name(user, login_row, lang),
    }


__all__ = [
    "EMAIL_REGEX",
    "is_valid_email",
    "resolve_login_email",
    "login",
    "register",
    "account_display_name",
    "load_account",
]
