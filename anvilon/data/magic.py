"""Magic reference tables: schools, paths, spells and their dependent rows.

All readers fail soft (log + empty list) so the magic book and the spell
builder keep rendering when one table is unavailable. Spell rows are
coerced to stable shapes: ids as strings, numbers with a 0 default,
booleans with a False default.
"""
from __future__ import annotations

from typing import Any, Dict, List

from anvilon.data._common import as_bool, as_number, log_remote_error, opt_str, resolve_client, rows_of
from anvilon.supabase import SupabaseError
from anvilon.utils.logging import get_logger

LOG = get_logger("anvilon.data.magic")

_EFFECT_NUMBERS = (
    "num_eff",
    "attack_distance",
    "target_value_prim",
    "target_value_sec",
    "covering_attack_high",
    "impact_value",
    "impact_duration",
    "effect_value",
    "effect_duration",
    "move_type_value",
)
_EFFECT_TEXT = (
    "id_spell_skill",
    "description",
    "attack_category",
    "type_target",
    "attack_focus",
    "attack_type",
    "direction_attack",
    "impact",
    "potency_resist",
    "effect",
    "move_type",
    "concentration",
    "dep_talent",
    "replace_imp_eff",
    "add_imp_eff",
)


def _fetch(client, label: str, table: str, columns: str = "*", order_by: str = "created_at") -> List[dict]:
    query = resolve_client(client).table(table).select(columns)
    if order_by:
        query = query.order(order_by)
    try:
        res = query.execute()
    except SupabaseError as exc:
        log_remote_error(LOG, label, exc)
        return []
    return rows_of(res.data)


def get_magic_schools(client=None) -> List[dict]:
    return _fetch(client, "get_magic_schools", "magic_school")


def get_magic_paths(client=None) -> List[dict]:
    return _fetch(client, "get_magic_paths", "magic_path")


def paths_for_school(paths: List[dict], school_id: Any) -> List[dict]:
    if not school_id:
        return []
    return [p for p in paths if str(p.get("id_magic_school") or "") == str(school_id)]


def get_magic_spells(client=None) -> List[Dict[str, Any]]:
    rows = _fetch(client, "get_magic_spells", "spells")
    return [
        {
            "id": str(row.get("id") or ""),
            "created_at": opt_str(row.get("created_at")),
            "id_path": opt_str(row.get("id_path")),
            "name": opt_str(row.get("name")),
            "description": opt_str(row.get("description")),
            "lvl": as_number(row.get("lvl")),
            "bucket": opt_str(row.get("bucket")),
            "art_path": opt_str(row.get("art_path")),
            "target_value_prim": as_number(row.get("target_value_prim")),
            "target_value_sec": as_number(row.get("target_value_sec")),
            "duration": as_number(row.get("duration")),
        }
        for row in rows
    ]


def get_spell_resources(client=None) -> List[Dict[str, Any]]:
    rows = _fetch(
        client,
        "get_spell_resources",
        "spell_skill_resource",
        "id_spell_skill, resource_type, resource_value, type",
        order_by="",
    )
    return [
        {
            "id_spell_skill": opt_str(row.get("id_spell_skill")),
            "resource_type": opt_str(row.get("resource_type")),
            "resource_value": as_number(row.get("resource_value")),
            "type": opt_str(row.get("type")),
        }
        for row in rows
    ]


def get_spell_conditions(client=None) -> List[Dict[str, Any]]:
    rows = _fetch(client, "get_spell_conditions", "conditions", "id, id_eff, condition, description, type", order_by="")
    return [
        {
            "id": str(row.get("id") or ""),
            "id_eff": opt_str(row.get("id_eff")),
            "condition": opt_str(row.get("condition")),
            "description": opt_str(row.get("description")),
            "type": opt_str(row.get("type")),
        }
        for row in rows
    ]


def get_spell_effects(client=None) -> List[Dict[str, Any]]:
    rows = _fetch(client, "get_spell_effects", "skill_spell_attack", order_by="num_eff")
    out: List[Dict[str, Any]] = []
    for row in rows:
        item: Dict[str, Any] = {"id": str(row.get("id") or "")}
        for key in _EFFECT_TEXT:
            item[key] = opt_str(row.get(key))
        for key in _EFFECT_NUMBERS:
            item[key] = as_number(row.get(key))
        item["crit_check"] = as_bool(row.get("crit_check"))
        item["covering_attack"] = as_bool(row.get("covering_attack"))
        out.append(item)
    return out


__all__ = [
    "get_magic_schools",
    "get_magic_paths",
    "paths_for_school",
    "get_magic_spells",
    "get_spell_resources",
    "get_spell_conditions",
    "get_spell_effects",
]
