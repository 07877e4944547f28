"""Utility helpers (identity, logging)."""
from .identity import (
    normalize_email,
    get_current_user_email,
    get_current_user_id,
    get_access_token,
    is_admin_user,
    ensure_admin,
    PermissionError,
)

__all__ = [
    "normalize_email",
    "get_current_user_email",
    "get_current_user_id",
    "get_access_token",
    "is_admin_user",
    "ensure_admin",
    "PermissionError",
]
