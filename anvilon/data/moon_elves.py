"""Moon elf families and legendary squads (``race`` schema).

The family slug column has been renamed over time, so rows are read with
``*`` and the slug is taken from the first present variant. The squad table
may be missing entirely; squads are then derived from their members.
"""
from __future__ import annotations

import re
from collections import OrderedDict, defaultdict
from typing import Any, Dict, List, Optional

from anvilon.data._common import resolve_client, rows_of
from anvilon.supabase import SupabaseError
from anvilon.utils.logging import get_logger

LOG = get_logger("anvilon.data.moon_elves")

RACE_SCHEMA = "race"
DEFAULT_ART_BUCKET = "art"
MISSING_TABLE_CODES = ("PGRST205", "42P01")
_SLUG_SEPARATORS = re.compile(r"[-_]+")


def _family_slug(row: Dict[str, Any]) -> str:
    for key in ("slug_moon_fam", "slug_moon_fan", "slug"):
        if row.get(key) is not None:
            return str(row[key])
    return ""


def _opt_url(cl, bucket: str, path: Optional[str]) -> Optional[str]:
    if not path:
        return None
    return cl.storage_public_url(bucket, path)


def get_moon_elf_families(client=None) -> List[Dict[str, Any]]:
    cl = resolve_client(client)
    res = cl.table("moon_elf_fam", schema=RACE_SCHEMA).select("*").order("created_at").execute()
    out: List[Dict[str, Any]] = []
    for row in rows_of(res.data):
        bucket = str(row.get("bucket") or DEFAULT_ART_BUCKET)
        out.append(
            {
                "id": row.get("id"),
                "slug_moon_fam": _family_slug(row),
                "name": row.get("name"),
                "art_url": _opt_url(cl, bucket, row.get("art_path")),
                "description": row.get("description"),
                "bonus_art_url": _opt_url(cl, bucket, row.get("bonus_art_path")),
                "bonus": row.get("bonus"),
                "story": row.get("story"),
                "tradition": row.get("tradition"),
            }
        )
    return out


def _key_slug(value: Any) -> str:
    return str(value or "").strip()


def get_moon_squad_persons(client=None) -> List[Dict[str, Any]]:
    cl = resolve_client(client)
    res = (
        cl.table("moon_squad_pers", schema=RACE_SCHEMA)
        .select("id, created_at, slug_squad, name, bucket, art_path, description, character")
        .order("created_at")
        .execute()
    )
    return [
        dict(row, art_url=cl.storage_public_url(row.get("bucket"), row.get("art_path")))
        for row in rows_of(res.data)
    ]


def _derive_squads(persons: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    derived: "OrderedDict[str, Dict[str, Any]]" = OrderedDict()
    for p in persons:
        slug = _key_slug(p.get("slug_squad"))
        if not slug or slug in derived:
            continue
        derived[slug] = {
            "id": f"derived-{slug}",
            "created_at": p.get("created_at") or "",
            "slug_squad": slug,
            "name": _SLUG_SEPARATORS.sub(" ", slug),
            "bucket": p.get("bucket"),
            "art_path": p.get("art_path"),
            "description": "",
            "art_url": p.get("art_url") or "",
        }
    return list(derived.values())


def get_moon_squads(client=None) -> List[Dict[str, Any]]:
    cl = resolve_client(client)
    try:
        res = (
            cl.table("moon_elf_squad", schema=RACE_SCHEMA)
            .select("id, created_at, slug_squad, name, bucket, art_path, description")
            .order("created_at")
            .execute()
        )
    except SupabaseError as exc:
        if exc.code in MISSING_TABLE_CODES:
            LOG.info("moon_elf_squad missing (code=%s); deriving squads from members", exc.code)
            return _derive_squads(get_moon_squad_persons(cl))
        raise
    return [
        dict(row, art_url=cl.storage_public_url(row.get("bucket"), row.get("art_path")))
        for row in rows_of(res.data)
    ]


def get_moon_squads_with_persons(client=None) -> List[Dict[str, Any]]:
    cl = resolve_client(client)
    squads = get_moon_squads(cl)
    persons = get_moon_squad_persons(cl)

    by_slug: Dict[str, List[Dict[str, Any]]] = defaultdict(list)
    for p in persons:
        slug = _key_slug(p.get("slug_squad"))
        if slug:
            by_slug[slug].append(p)

    out: List[Dict[str, Any]] = []
    for s in squads:
        slug = _key_slug(s.get("slug_squad"))
        out.append(dict(s, persons=list(by_slug.get(slug, [])) if slug else []))
    return out


__all__ = [
    "MISSING_TABLE_CODES",
    "get_moon_elf_families",
    "get_moon_squad_persons",
    "get_moon_squads",
    "get_moon_squads_with_persons",
]
