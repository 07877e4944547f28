"""Race history: chapter heads with their entries."""
from __future__ import annotations

from typing import Any, Dict, List

from anvilon.data._common import log_remote_error, resolve_client, rows_of
from anvilon.supabase import SupabaseError
from anvilon.utils.logging import get_logger

LOG = get_logger("anvilon.data.race_history")


def get_race_history_by_slug(race_slug: str, client=None) -> List[Dict[str, Any]]:
    """[{"head": {...}, "entries": [...]}, ...] ordered by head index; [] on error."""
    cl = resolve_client(client)
    try:
        heads_res = cl.table("history_head").select("*").eq("slug", race_slug).order("index").execute()
    except SupabaseError as exc:
        log_remote_error(LOG, "get_race_history_by_slug / history_head", exc)
        return []
    heads = rows_of(heads_res.data)
    if not heads:
        return []

    head_slugs = [h.get("slug_head") for h in heads if h.get("slug_head")]
    try:
        entries_res = (
            cl.table("history").select("*").eq("slug", race_slug).in_("slug_head", head_slugs).execute()
        )
    except SupabaseError as exc:
        log_remote_error(LOG, "get_race_history_by_slug / history", exc)
        return []
    entries = rows_of(entries_res.data)

    return [
        {"head": head, "entries": [e for e in entries if e.get("slug_head") == head.get("slug_head")]}
        for head in heads
    ]


__all__ = ["get_race_history_by_slug"]
