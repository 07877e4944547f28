"""Route registration.

Called from startup to register every blueprint. Each ``register_*`` helper
is idempotent so tests may call it on a bare Flask app.
"""
from __future__ import annotations

from typing import Any

from .admin_migrations import register_admin_migrations
from .auth import register_auth
from .health import register_health
from .language_switch import register_language_switch
from .pages import register_pages
from .spell_builder import register_spell_builder


def register_all(app: Any) -> None:
    register_health(app)
    register_language_switch(app)
    register_pages(app)
    register_auth(app)
    register_spell_builder(app)
    register_admin_migrations(app)


__all__ = ["register_all"]
