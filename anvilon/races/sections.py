"""Race page section rules.

Universal sections exist for every race; some races get extra sections
inserted after an anchor key. Insertions apply in declaration order, go to
the end when the anchor is missing, and never duplicate a key.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple


@dataclass(frozen=True)
class RaceSection:
    key: str
    label_ru: str
    label_en: str
    coming_soon: bool = False

    def label(self, lang: str) -> str:
        return self.label_en if lang == "en" else self.label_ru


UNIVERSAL_SECTIONS: Tuple[RaceSection, ...] = (
    RaceSection("about", "О РАСЕ", "ABOUT THE RACE"),
    RaceSection("skills", "РАСОВЫЕ НАВЫКИ", "RACIAL SKILLS"),
    RaceSection("map", "КАРТА ВЛАДЕНИЙ", "DOMAIN MAP"),
    RaceSection("history", "ИСТОРИЯ РАСЫ", "RACE HISTORY", coming_soon=True),
    RaceSection("religion", "РЕЛИГИЯ", "RELIGION", coming_soon=True),
)

# slug -> [(anchor key, section)]
INSERTIONS: Dict[str, Sequence[Tuple[str, RaceSection]]] = {
    "high-elf": (
        ("skills", RaceSection("houses", "ВЕЛИКИЕ ДОМА", "GREAT HOUSES")),
    ),
    "moon-elf": (
        ("skills", RaceSection("moon-clans", "РОДА ЛУННЫХ ЭЛЬФОВ", "MOON ELF CLANS", coming_soon=True)),
        ("moon-clans", RaceSection("legendary-squads", "ЛЕГЕНДАРНЫЕ ОТРЯДЫ", "LEGENDARY SQUADS", coming_soon=True)),
    ),
    "wood-elf": (
        ("skills", RaceSection("institutions", "ВАЖНЫЕ СОЦИАЛЬНЫЕ ИНСТИТУТЫ", "SOCIAL INSTITUTIONS", coming_soon=True)),
    ),
}


def apply_insertions(base: Sequence[RaceSection], insertions: Sequence[Tuple[str, RaceSection]]) -> List[RaceSection]:
    result = list(base)
    for anchor, section in insertions:
        if any(s.key == section.key for s in result):
            continue
        idx = next((i for i, s in enumerate(result) if s.key == anchor), None)
        if idx is None:
            result.append(section)
        else:
            result.insert(idx + 1, section)
    return result


def get_race_sections_for_slug(slug: str) -> List[RaceSection]:
    return apply_insertions(UNIVERSAL_SECTIONS, INSERTIONS.get(slug, ()))


DEFAULT_SECTION = "map"


def resolve_active_section(sections: Sequence[RaceSection], requested: str | None) -> RaceSection:
    """Requested section when it exists and is open, else the map (or the first one)."""
    open_sections = [s for s in sections if not s.coming_soon]
    for key in (requested, DEFAULT_SECTION):
        for s in open_sections:
            if s.key == key:
                return s
    return (open_sections or list(sections))[0]


__all__ = [
    "RaceSection",
    "UNIVERSAL_SECTIONS",
    "INSERTIONS",
    "DEFAULT_SECTION",
    "apply_insertions",
    "get_race_sections_for_slug",
    "resolve_active_section",
]
