"""Per-page background art (``page_art`` table)."""
from __future__ import annotations

from anvilon.data._common import log_remote_error, resolve_client
from anvilon.supabase import SupabaseError
from anvilon.utils.logging import get_logger

LOG = get_logger("anvilon.data.page_art")


def get_page_art_url(page: str, client=None) -> str:
    """Public URL for a page's art, or "" when missing or on any backend error."""
    cl = resolve_client(client)
    try:
        res = (
            cl.table("page_art")
            .select("page, art_bucket, art_page")
            .eq("page", page)
            .maybe_single()
            .execute()
        )
    except SupabaseError as exc:
        log_remote_error(LOG, "get_page_art_url", exc)
        return ""
    row = res.data if isinstance(res.data, dict) else {}
    return cl.storage_public_url(row.get("art_bucket"), row.get("art_page"))


__all__ = ["get_page_art_url"]
