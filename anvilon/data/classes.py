"""Race classes with their skill cards.

Every class is shown with exactly four skill cards. Real skills come first
(at most four); the rest are copies of the ``unidentified`` template row or,
without a template, a built-in stub.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from anvilon.data._common import log_remote_error, resolve_client, rows_of
from anvilon.supabase import SupabaseError
from anvilon.utils.logging import get_logger

LOG = get_logger("anvilon.data.classes")

SKILLS_PER_CLASS = 4
PLACEHOLDER_CLASS = "unidentified"
SKILL_COLUMNS = "id, created_at, slug_class, name_skill, description, art_path, bucket"
STUB_NAME = "Скоро"
STUB_DESCRIPTION = "Этот навык пока пустой — заполним позже."


def _skill_card(cl, row: Dict[str, Any], slug_class: Optional[str] = None) -> Dict[str, Any]:
    return {
        "id": row.get("id"),
        "created_at": row.get("created_at"),
        "slug_class": slug_class if slug_class is not None else row.get("slug_class"),
        "name_skill": row.get("name_skill") or "",
        "description": row.get("description") or "",
        "art_url": cl.storage_public_url(row.get("bucket"), row.get("art_path")),
    }


def pad_class_skills(slug_class: str, real: List[Dict[str, Any]], template: Optional[Dict[str, Any]]) -> List[Dict[str, Any]]:
    out = list(real[:SKILLS_PER_CLASS])
    while len(out) < SKILLS_PER_CLASS:
        placeholder_id = f"placeholder-{slug_class}-{len(out)}"
        if template is not None:
            out.append(dict(template, id=placeholder_id, slug_class=slug_class))
        else:
            out.append(
                {
                    "id": placeholder_id,
                    "created_at": "",
                    "slug_class": slug_class,
                    "name_skill": STUB_NAME,
                    "description": STUB_DESCRIPTION,
                    "art_url": "",
                }
            )
    return out


def get_race_classes_with_skills(race_slug: str, client=None) -> List[Dict[str, Any]]:
    cl = resolve_client(client)
    try:
        res = cl.table("class").select("*").eq("slug", race_slug).order("created_at").execute()
    except SupabaseError as exc:
        log_remote_error(LOG, "get_race_classes_with_skills / class", exc)
        return []

    classes = [
        c for c in rows_of(res.data) if c.get("slug_class") and c.get("slug_class") != PLACEHOLDER_CLASS
    ]
    if not classes:
        return []
    class_keys = [str(c["slug_class"]) for c in classes]

    real_rows: List[dict] = []
    try:
        real_res = (
            cl.table("class_skill")
            .select(SKILL_COLUMNS)
            .in_("slug_class", class_keys)
            .order("created_at")
            .execute()
        )
        real_rows = rows_of(real_res.data)
    except SupabaseError as exc:
        log_remote_error(LOG, "get_race_classes_with_skills / class_skill (real)", exc)

    template: Optional[Dict[str, Any]] = None
    try:
        tpl_res = (
            cl.table("class_skill")
            .select(SKILL_COLUMNS)
            .eq("slug_class", PLACEHOLDER_CLASS)
            .order("created_at")
            .limit(1)
            .execute()
        )
        tpl_rows = rows_of(tpl_res.data)
        if tpl_rows:
            template = _skill_card(cl, tpl_rows[0], slug_class=PLACEHOLDER_CLASS)
    except SupabaseError as exc:
        log_remote_error(LOG, "get_race_classes_with_skills / class_skill (unidentified)", exc)

    real_cards = [_skill_card(cl, row) for row in real_rows]
    out: List[Dict[str, Any]] = []
    for c in classes:
        slug_class = str(c["slug_class"])
        mine = [s for s in real_cards if s["slug_class"] == slug_class]
        item = dict(c)
        item["art_url"] = cl.storage_public_url(c.get("bucket"), c.get("art_path"))
        item["skills"] = pad_class_skills(slug_class, mine, template)
        out.append(item)
    return out


__all__ = [
    "SKILLS_PER_CLASS",
    "PLACEHOLDER_CLASS",
    "pad_class_skills",
    "get_race_classes_with_skills",
]
