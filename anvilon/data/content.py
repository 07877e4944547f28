"""Structured content documents (document -> revision -> sections -> blocks).

Expected tables:

* ``content_documents`` (entity_type, entity_slug, published_revision_id, ...)
* ``content_revisions`` (document_id, version)
* ``content_sections`` (revision_id, slug, title, sort)
* ``content_blocks`` (revision_id, section_id, type, sort, payload)

The tables may not exist on every deployment, so the reader fails soft and
returns None; callers then fall back to legacy columns or "coming soon".
"""
from __future__ import annotations

from collections import defaultdict
from typing import Any, Dict, List, Optional

from anvilon.data._common import parse_tags, resolve_client, rows_of
from anvilon.supabase import SupabaseError
from anvilon.utils.logging import get_logger

LOG = get_logger("anvilon.data.content")


def _sort_key(value: Any) -> float:
    return value if isinstance(value, (int, float)) and not isinstance(value, bool) else 0


def _pick_revision_id(cl, document: Dict[str, Any]) -> Optional[str]:
    published = document.get("published_revision_id")
    if published:
        return str(published)
    res = (
        cl.table("content_revisions")
        .select("id, document_id, version")
        .eq("document_id", document.get("id"))
        .order("version", ascending=False)
        .limit(1)
        .maybe_single()
        .execute()
    )
    rev = res.data if isinstance(res.data, dict) else None
    return str(rev["id"]) if rev and rev.get("id") else None


def get_content_sections_for_entity(entity_type: str, entity_slug: str, client=None) -> Optional[List[Dict[str, Any]]]:
    cl = resolve_client(client)
    try:
        doc_res = (
            cl.table("content_documents")
            .select("id, entity_type, entity_slug, title, status, published_revision_id")
            .eq("entity_type", entity_type)
            .eq("entity_slug", entity_slug)
            .maybe_single()
            .execute()
        )
        document = doc_res.data if isinstance(doc_res.data, dict) else None
        if not document:
            return None

        revision_id = _pick_revision_id(cl, document)
        if not revision_id:
            return None

        sec_res = (
            cl.table("content_sections")
            .select("id, slug, title, sort")
            .eq("revision_id", revision_id)
            .order("sort")
            .execute()
        )
        sections = [
            {
                "id": s.get("id"),
                "slug": s.get("slug"),
                "title": s.get("title"),
                "sort": _sort_key(s.get("sort")),
                "blocks": [],
            }
            for s in rows_of(sec_res.data)
        ]
        if not sections:
            return []

        blk_res = (
            cl.table("content_blocks")
            .select("id, section_id, type, sort, payload")
            .eq("revision_id", revision_id)
            .order("sort")
            .execute()
        )
    except SupabaseError as exc:
        LOG.warning(
            "get_content_sections_for_entity %s/%s failed: %s", entity_type, entity_slug, exc.message
        )
        return None

    by_section: Dict[Any, List[Dict[str, Any]]] = defaultdict(list)
    for b in rows_of(blk_res.data):
        by_section[b.get("section_id")].append(
            {
                "id": b.get("id"),
                "type": b.get("type"),
                "sort": _sort_key(b.get("sort")),
                "payload": b.get("payload") or {},
            }
        )
    for section in sections:
        section["blocks"] = list(by_section.get(section["id"], []))
    return sections


def _present(value: Any) -> bool:
    return bool(value) and bool(str(value).strip())


def _blocks(items: List[Optional[Dict[str, Any]]]) -> List[Dict[str, Any]]:
    kept = [item for item in items if item]
    return [
        {"id": f"legacy:{item['type']}:{i}", "sort": (i + 1) * 10, "type": item["type"], "payload": item["payload"]}
        for i, item in enumerate(kept)
    ]


def _chips(tags: List[str]) -> Optional[Dict[str, Any]]:
    return {"type": "chips", "payload": {"items": tags}} if tags else None


def _paragraph(text: Any) -> Optional[Dict[str, Any]]:
    return {"type": "paragraph", "payload": {"text": text}} if _present(text) else None


def _heading(text: str, when: Any = True) -> Optional[Dict[str, Any]]:
    return {"type": "heading", "payload": {"level": 2, "text": text}} if when else None


def _tags(info: Dict[str, Any], key: str) -> List[str]:
    value = info.get(key)
    if isinstance(value, list):
        return [str(v).strip() for v in value if str(v).strip()]
    return parse_tags(value)


def legacy_race_info_to_sections(info: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Turn legacy ``race_info`` columns into the five section layout."""
    desc = _blocks([
        _chips(_tags(info, "tags")),
        _paragraph(info.get("description")),
        _heading("Особенности", _present(info.get("peculiarities"))),
        _paragraph(info.get("peculiarities")),
    ])
    phys = _blocks([
        _heading("Физиология", _present(info.get("physiology"))),
        _paragraph(info.get("physiology")),
        _heading("Происхождение"),
        _chips(_tags(info, "origin_tags")),
        _paragraph(info.get("origin")),
        _heading("Социальность", _present(info.get("sociality"))),
        _paragraph(info.get("sociality")),
    ])
    arch = _blocks([
        _chips(_tags(info, "archetype_tags")),
        _paragraph(info.get("archetype")),
        _heading("Характер", _present(info.get("character"))),
        _paragraph(info.get("character")),
    ])
    relations = _blocks([
        _chips(_tags(info, "relationships_tags")),
        _paragraph(info.get("relationships")),
    ])
    names = _blocks([
        _paragraph(info.get("names")),
        _heading("Фамилии", _present(info.get("surname"))),
        _paragraph(info.get("surname")),
        _heading("Особенности", _present(info.get("name_features"))),
        _paragraph(info.get("name_features")),
    ])

    def section(slug: str, title: str, blocks: List[Dict[str, Any]], sort: int) -> Dict[str, Any]:
        return {"id": f"legacy:{slug}", "slug": slug, "title": title, "sort": sort, "blocks": blocks}

    return [
        section("desc", "Описание расы", desc, 10),
        section("phys", "Физиология", phys, 20),
        section("arch", "Архетипы и характер", arch, 30),
        section("relations", "Друзья и враги", relations, 40),
        section("names", "Имена", names, 50),
    ]


__all__ = ["get_content_sections_for_entity", "legacy_race_info_to_sections"]
