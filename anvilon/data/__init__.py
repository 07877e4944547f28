"""One-shot query functions per hosted table.

Every reader accepts an optional ``client``; by default the process-wide
client from `anvilon.supabase.get_client` is used.
"""
from ._common import parse_tags  # noqa: F401

__all__ = ["parse_tags"]
