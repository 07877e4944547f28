from .sections import (  # noqa: F401
    RaceSection,
    get_race_sections_for_slug,
    resolve_active_section,
)

__all__ = ["RaceSection", "get_race_sections_for_slug", "resolve_active_section"]
