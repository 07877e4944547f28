"""Assemble everything the race page needs.

Only the race row itself is allowed to fail the page (error panel); every
other block degrades to an empty value so one broken table never hides the
rest of the lore.
"""
from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, TypeVar

from anvilon.data import classes as classes_data
from anvilon.data import content as content_data
from anvilon.data import great_houses as houses_data
from anvilon.data import moon_elves as moon_data
from anvilon.data import race_history as history_data
from anvilon.data import races as races_data
from anvilon.data._common import parse_tags
from anvilon.races.sections import get_race_sections_for_slug, resolve_active_section
from anvilon.supabase import SupabaseError, get_client
from anvilon.ui import prepare_sections
from anvilon.utils.logging import get_logger

LOG = get_logger("anvilon.race_detail")

T = TypeVar("T")

HIGH_ELF = "high-elf"
MOON_ELF = "moon-elf"


def _soft(label: str, fn: Callable[[], T], default: T) -> T:
    try:
        return fn()
    except SupabaseError as exc:
        LOG.warning("%s failed code=%s message=%s", label, exc.code, exc.message)
        return default


def _about_sections(slug: str, info: Optional[Dict[str, Any]], cl) -> List[Dict[str, Any]]:
    sections = content_data.get_content_sections_for_entity("race", slug, client=cl)
    if sections:
        return sections
    if info:
        return content_data.legacy_race_info_to_sections(info)
    return []


def history_chapters(history: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Chapter heads in index order, each with its ``section`` heads nested."""
    def index_of(block: Dict[str, Any]) -> float:
        value = block["head"].get("index")
        return value if isinstance(value, (int, float)) else 0

    chapters = sorted((b for b in history if b["head"].get("type") == "chapter"), key=index_of)
    sections = sorted((b for b in history if b["head"].get("type") == "section"), key=index_of)
    return [
        dict(
            chapter,
            sections=[s for s in sections if s["head"].get("chapter_index") == chapter["head"].get("index")],
        )
        for chapter in chapters
    ]


def build_race_detail(slug: str, *, section: Optional[str] = None, about_tab: Optional[str] = None,
                      client=None) -> Dict[str, Any]:
    """Context dict with ``state`` in {"ok", "error", "not_found"}."""
    cl = client if client is not None else get_client()
    try:
        race = races_data.get_race_by_slug(slug, client=cl)
    except SupabaseError as exc:
        LOG.error("race load failed slug=%s code=%s message=%s", slug, exc.code, exc.message)
        return {"state": "error", "slug": slug, "error": exc.message}
    if race is None:
        return {"state": "not_found", "slug": slug}

    sections = get_race_sections_for_slug(slug)
    active = resolve_active_section(sections, section)

    info = races_data.get_race_info_by_slug(slug, client=cl)
    about = prepare_sections(_about_sections(slug, info, cl), cl.storage_public_url)
    about_keys = [s.get("slug") for s in about]
    active_about = about_tab if about_tab in about_keys else (about_keys[0] if about_keys else None)

    race_map = _soft("race map", lambda: races_data.get_race_map_by_slug(slug, client=cl), None)

    return {
        "state": "ok",
        "slug": slug,
        "race": race,
        "initiative": race.get("initiative") or 0,
        "tags": parse_tags((info or {}).get("tags")),
        "sections": sections,
        "active_section": active,
        "about_sections": about,
        "active_about": active_about,
        "race_skills": _soft("race skills", lambda: races_data.get_race_skills_by_slug(slug, client=cl), []),
        "race_classes": classes_data.get_race_classes_with_skills(slug, client=cl),
        "history": history_chapters(history_data.get_race_history_by_slug(slug, client=cl)),
        "map_url": (race_map or {}).get("map_url", ""),
        "great_houses": (
            _soft("great houses", lambda: houses_data.get_great_houses(client=cl), []) if slug == HIGH_ELF else []
        ),
        "moon_families": (
            _soft("moon families", lambda: moon_data.get_moon_elf_families(client=cl), []) if slug == MOON_ELF else []
        ),
        "moon_squads": (
            _soft("moon squads", lambda: moon_data.get_moon_squads_with_persons(client=cl), []) if slug == MOON_ELF else []
        ),
    }


__all__ = ["build_race_detail", "history_chapters"]
