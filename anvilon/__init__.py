"""Anvilon lore library.

Server-rendered Flask application over the hosted Anvilon backend: the
knowledge library pages, account entry and the spell builder.
"""

__all__ = [
]
