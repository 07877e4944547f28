"""Identity & permission helpers backed by the Flask session."""
from __future__ import annotations

from typing import Any, Optional

from flask import session

from anvilon import config as app_config

SESSION_USER_ID_KEY = "user_id"
SESSION_EMAIL_KEY = "email"
SESSION_TOKEN_KEY = "access_token"


def normalize_email(raw: Any) -> Optional[str]:
    if not isinstance(raw, str):
        return None
    cleaned = raw.strip().lower()
    return cleaned or None


def set_identity_session(*, user_id: str, email: Optional[str], access_token: Optional[str]) -> None:
    session[SESSION_USER_ID_KEY] = str(user_id)
    session[SESSION_EMAIL_KEY] = normalize_email(email)
    session[SESSION_TOKEN_KEY] = access_token
    session.modified = True


def clear_identity_session() -> None:
    for key in (SESSION_USER_ID_KEY, SESSION_EMAIL_KEY, SESSION_TOKEN_KEY):
        session.pop(key, None)
    session.modified = True


def get_current_user_id() -> Optional[str]:
    uid = session.get(SESSION_USER_ID_KEY)
    if uid is None:
        return None
    uid = str(uid).strip()
    return uid or None


def get_current_user_email() -> Optional[str]:
    return normalize_email(session.get(SESSION_EMAIL_KEY))


def get_access_token() -> Optional[str]:
    token = session.get(SESSION_TOKEN_KEY)
    return token if isinstance(token, str) and token else None


def is_admin_user() -> bool:
    email = get_current_user_email()
    if not email or not get_current_user_id():
        return False
    return email in app_config.admin_emails()


class PermissionError(Exception):
    pass


def ensure_admin() -> None:
    if not is_admin_user():
        raise PermissionError("Admin privileges required")


__all__ = [
    "SESSION_USER_ID_KEY",
    "SESSION_EMAIL_KEY",
    "SESSION_TOKEN_KEY",
    "normalize_email",
    "set_identity_session",
    "clear_identity_session",
    "get_current_user_id",
    "get_current_user_email",
    "get_access_token",
    "is_admin_user",
    "ensure_admin",
    "PermissionError",
]
