"""Talents reference table (public read; errors propagate to the caller)."""
from __future__ import annotations

from typing import List

from anvilon.data._common import resolve_client, rows_of

TALENT_COLUMNS = "id,created_at,name,description,id_stat,bucket,art_path"


def get_talents(client=None) -> List[dict]:
    res = resolve_client(client).table("talents").select(TALENT_COLUMNS).order("created_at").execute()
    return rows_of(res.data)


__all__ = ["get_talents", "TALENT_COLUMNS"]
