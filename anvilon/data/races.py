"""Races and their per-race tables (``race`` schema).

`get_races`, `get_race_by_slug`, `get_race_map_by_slug` and
`get_race_skills_by_slug` raise `SupabaseError`; the race page decides how to
degrade. `get_race_info_by_slug` fails soft to None.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from anvilon.data._common import log_remote_error, resolve_client, rows_of
from anvilon.supabase import SupabaseError
from anvilon.utils.logging import get_logger

LOG = get_logger("anvilon.data.races")

RACE_SCHEMA = "race"
RACE_COLUMNS = "id, slug, name, art_bucket, art_path, initiative, created_at"
RACE_INFO_COLUMNS = (
    "id, created_at, slug, tags, description, peculiarities, physiology, origin_tags, origin, "
    "sociality, archetype_tags, archetype, relationships_tags, relationships, names, surname, "
    "name_features, character"
)


def _with_art(cl, row: Dict[str, Any]) -> Dict[str, Any]:
    item = dict(row)
    item["art_url"] = cl.storage_public_url(row.get("art_bucket"), row.get("art_path"))
    return item


def get_races(client=None) -> List[Dict[str, Any]]:
    cl = resolve_client(client)
    res = cl.table("races").select(RACE_COLUMNS).order("created_at").execute()
    return [_with_art(cl, row) for row in rows_of(res.data)]


def get_race_by_slug(slug: str, client=None) -> Optional[Dict[str, Any]]:
    cl = resolve_client(client)
    res = cl.table("races").select(RACE_COLUMNS).eq("slug", slug).maybe_single().execute()
    if not isinstance(res.data, dict):
        return None
    return _with_art(cl, res.data)


def get_race_info_by_slug(slug: str, client=None) -> Optional[Dict[str, Any]]:
    cl = resolve_client(client)
    try:
        res = (
            cl.table("race_info", schema=RACE_SCHEMA)
            .select(RACE_INFO_COLUMNS)
            .eq("slug", slug)
            .maybe_single()
            .execute()
        )
    except SupabaseError as exc:
        log_remote_error(LOG, "get_race_info_by_slug", exc)
        return None
    return res.data if isinstance(res.data, dict) else None


def get_race_map_by_slug(slug: str, client=None) -> Optional[Dict[str, str]]:
    """{"slug", "map_url"} or None when there is no row or no map path."""
    cl = resolve_client(client)
    res = (
        cl.table("race_map", schema=RACE_SCHEMA)
        .select("slug, bucket, map_path")
        .eq("slug", slug)
        .maybe_single()
        .execute()
    )
    row = res.data if isinstance(res.data, dict) else None
    if not row or not row.get("map_path"):
        return None
    return {
        "slug": row.get("slug") or slug,
        "map_url": cl.storage_public_url(row.get("bucket"), row.get("map_path")),
    }


def get_race_skills_by_slug(race_slug: str, client=None) -> List[Dict[str, Any]]:
    cl = resolve_client(client)
    res = (
        cl.table("race_skill", schema=RACE_SCHEMA)
        .select("slug, skill_num, name_skill, description_skill, art_path, bucket")
        .eq("slug", race_slug)
        .order("skill_num")
        .execute()
    )
    return [
        {
            "slug": row.get("slug"),
            "skill_num": row.get("skill_num") or 0,
            "name": row.get("name_skill") or "",
            "description": row.get("description_skill") or "",
            "art_url": cl.storage_public_url(row.get("bucket"), row.get("art_path")),
        }
        for row in rows_of(res.data)
    ]


__all__ = [
    "RACE_SCHEMA",
    "get_races",
    "get_race_by_slug",
    "get_race_info_by_slug",
    "get_race_map_by_slug",
    "get_race_skills_by_slug",
]
