"""Spell builder state -> migration rows + human-readable text report.

Nothing here touches the database: the payload is built with generated ids,
validated, and rendered as a plain-text report that operators can download
before (or instead of) submitting.
"""
from __future__ import annotations

import math
import re
import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional

from anvilon.migration.resource_costs import normalize_spell_name, parse_number, resolve_resource_value

SPECIAL_CONDITION_LABELS = ("Специальные условия", "special_condit")
NO_CONDITION_LABELS = ("Нет условий", "no_conditions")

_UNSAFE_FILENAME = re.compile(r"[^0-9a-zA-Zа-яА-Я_-]+")


@dataclass
class ConditionInput:
    condition_id: str = ""
    description: str = ""


@dataclass
class EffectInput:
    id: str = ""
    is_critical: bool = False

    attack_distance_kind: str = ""
    target_type: str = ""
    target_kind: str = ""
    attack_distance_value: str = ""
    attack_type: str = ""
    attack_direction: str = ""
    covering_attack: bool = False
    covering_attack_high: str = ""

    impact_type: str = ""
    impact_duration: str = ""
    impact_value: str = ""
    potency_resist: str = ""

    effect_type: str = ""
    effect_duration: str = ""
    effect_value: str = ""

    dep_talent: str = ""
    move_type: str = ""
    move_value: str = ""
    concentration: str = ""

    replace_impact_or_effect: str = ""

    conditions: List[ConditionInput] = field(default_factory=list)


@dataclass
class ResourceInput:
    id: str = ""
    resource_type_id: str = ""
    resource_cost_id: str = ""
    resource_cost_custom: str = ""


@dataclass
class SpellBuilderState:
    spell_name: str = ""
    spell_description: str = ""
    spell_level: int = 1
    selected_path_id: str = ""
    talent_exception_id: str = ""
    spell_resources: List[ResourceInput] = field(default_factory=list)
    effects: List[EffectInput] = field(default_factory=list)
    catalog_label_by_id: Dict[str, str] = field(default_factory=dict)


@dataclass
class MigrationPayload:
    spells: Dict[str, Any]
    spell_skill_resource: List[Dict[str, Any]]
    skill_spell_attack: List[Dict[str, Any]]
    conditions: List[Dict[str, Any]]
    errors: List[str]

    @property
    def ok(self) -> bool:
        return not self.errors

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


# -- parsing -----------------------------------------------------------------

def _s(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _level(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    number = parse_number(_s(value))
    if number is None or not number.is_integer():
        return 0
    return int(number)


def _list_of_dicts(value: Any) -> List[Mapping[str, Any]]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, Mapping)]


def _parse_effect(raw: Mapping[str, Any]) -> EffectInput:
    kwargs: Dict[str, Any] = {}
    for name in EffectInput.__dataclass_fields__:
        if name in ("is_critical", "covering_attack"):
            kwargs[name] = bool(raw.get(name))
        elif name == "conditions":
            kwargs[name] = [
                ConditionInput(condition_id=_s(c.get("condition_id")), description=_s(c.get("description")))
                for c in _list_of_dicts(raw.get("conditions"))
            ]
        else:
            kwargs[name] = _s(raw.get(name))
    return EffectInput(**kwargs)


def parse_builder_state(payload: Mapping[str, Any], catalog_label_by_id: Optional[Mapping[str, str]] = None) -> SpellBuilderState:
    """Build a state from the JSON body posted by the builder page.

    Labels always come from `catalog_label_by_id` (server-side catalogs), never
    from the request body.
    """
    resources = [
        ResourceInput(
            id=_s(r.get("id")),
            resource_type_id=_s(r.get("resource_type_id")),
            resource_cost_id=_s(r.get("resource_cost_id")),
            resource_cost_custom=_s(r.get("resource_cost_custom")),
        )
        for r in _list_of_dicts(payload.get("spell_resources"))
    ]
    return SpellBuilderState(
        spell_name=_s(payload.get("spell_name")),
        spell_description=_s(payload.get("spell_description")),
        spell_level=_level(payload.get("spell_level", 1)),
        selected_path_id=_s(payload.get("selected_path_id")).strip(),
        talent_exception_id=_s(payload.get("talent_exception_id")).strip(),
        spell_resources=resources,
        effects=[_parse_effect(e) for e in _list_of_dicts(payload.get("effects"))],
        catalog_label_by_id=dict(catalog_label_by_id or {}),
    )


# -- payload -----------------------------------------------------------------

def _finite(value: str) -> Optional[float]:
    return parse_number(_s(value))


def to_int_or_zero(value: Any) -> int:
    number = _finite(value)
    if number is None:
        return 0
    return math.trunc(number)


def to_numeric_or_none(value: Any) -> Optional[float]:
    return _finite(value)


def _nullable_id(value: str) -> Optional[str]:
    text = _s(value).strip()
    return text or None


def _label(labels: Mapping[str, str], catalog_id: str) -> str:
    return labels.get(_s(catalog_id), _s(catalog_id))


def _label_or_none(labels: Mapping[str, str], catalog_id: str) -> Optional[str]:
    text = _s(catalog_id).strip()
    if not text:
        return None
    return labels.get(text, text)


def _default_id() -> str:
    return str(uuid.uuid4())


def build_migration_payload(state: SpellBuilderState, id_factory: Callable[[], str] = _default_id) -> MigrationPayload:
    errors: List[str] = []
    labels = state.catalog_label_by_id

    spell_id = id_factory()
    spells_row: Dict[str, Any] = {
        "id": spell_id,
        "name": normalize_spell_name(state.spell_name.strip()),
        "description": state.spell_description or "",
        "lvl": state.spell_level,
        "id_path": state.selected_path_id,
        "exc_talent": state.talent_exception_id or None,
    }
    if not spells_row["name"]:
        errors.append("[spells] Не заполнено: Название заклинания")
    if not spells_row["id_path"]:
        errors.append("[spells] Не заполнено: Путь магии")
    if not 1 <= state.spell_level <= 5:
        errors.append("[spells] Некорректный уровень (1-5)")

    resource_rows: List[Dict[str, Any]] = []
    for r in state.spell_resources:
        type_name = _label(labels, r.resource_type_id)
        res = resolve_resource_value(type_name, r.resource_cost_id, state.spell_level, r.resource_cost_custom)
        if not res.ok:
            errors.append(f"[spell_skill_resource] {type_name}: {res.error}")
            continue
        resource_rows.append(
            {
                "id": id_factory(),
                "id_spell_skill": spell_id,
                "resource_type": type_name,
                "resource_value": res.value,
            }
        )
    if not resource_rows:
        errors.append("[spell_skill_resource] Должна быть минимум 1 строка ресурса")

    # Effect ids are allocated up front so replacements can point at later effects.
    effect_ids = [id_factory() for _ in state.effects]
    id_by_ui_id = {e.id: eff_id for e, eff_id in zip(state.effects, effect_ids) if e.id}

    effect_rows: List[Dict[str, Any]] = []
    condition_rows: List[Dict[str, Any]] = []
    for idx, (e, eff_id) in enumerate(zip(state.effects, effect_ids), start=1):
        replacement = _nullable_id(e.replace_impact_or_effect)
        if replacement is not None:
            replacement = id_by_ui_id.get(replacement, replacement)

        effect_rows.append(
            {
                "id": eff_id,
                "id_spell_skill": spell_id,
                "num_eff": idx,
                "crit_check": bool(e.is_critical),
                "attack_category": _label(labels, e.attack_distance_kind),
                "type_target": _label(labels, e.target_type),
                "attack_focus": _label(labels, e.target_kind),
                "attack_distance": to_int_or_zero(e.attack_distance_value),
                "attack_type": _label_or_none(labels, e.attack_type),
                "direction_attack": _label_or_none(labels, e.attack_direction),
                "covering_attack": bool(e.covering_attack),
                "covering_attack_high": to_int_or_zero(e.covering_attack_high) if e.covering_attack else None,
                "impact": _label(labels, e.impact_type),
                "impact_value": to_numeric_or_none(e.impact_value),
                "impact_duration": to_int_or_zero(e.impact_duration),
                "potency_resist": _label_or_none(labels, e.potency_resist),
                "effect": _label_or_none(labels, e.effect_type),
                "effect_value": to_numeric_or_none(e.effect_value),
                "effect_duration": to_int_or_zero(e.effect_duration),
                "move_type": _label_or_none(labels, e.move_type),
                "move_type_value": to_int_or_zero(e.move_value),
                "concentration": _label_or_none(labels, e.concentration),
                "dep_talent": _nullable_id(e.dep_talent),
                "replace_imp_eff": replacement,
            }
        )

        if not e.attack_distance_kind:
            errors.append(f'[skill_spell_attack] Эффект {idx}: не заполнено "Дистанция атаки"')
        if not e.target_type:
            errors.append(f'[skill_spell_attack] Эффект {idx}: не заполнено "Тип цели"')
        if not e.target_kind:
            errors.append(f'[skill_spell_attack] Эффект {idx}: не заполнено "Вид цели"')
        if not e.impact_type:
            errors.append(f'[skill_spell_attack] Эффект {idx}: не заполнено "Тип воздействия"')

        if not e.conditions:
            errors.append(f"[conditions] Эффект {idx}: нет ни одного условия (ожидается минимум 1)")
        for c in e.conditions:
            label = _label(labels, c.condition_id)
            description: Optional[str] = None
            if label in SPECIAL_CONDITION_LABELS:
                description = c.description.strip() or None
                if description is None:
                    errors.append(f'[conditions] Эффект {idx}: "Специальные условия" требуют описание')
            condition_rows.append(
                {
                    "id": id_factory(),
                    "id_eff": eff_id,
                    "condition": label,
                    "description": description,
                }
            )

    if not effect_rows:
        errors.append("[skill_spell_attack] Должен быть минимум 1 эффект")

    return MigrationPayload(
        spells=spells_row,
        spell_skill_resource=resource_rows,
        skill_spell_attack=effect_rows,
        conditions=condition_rows,
        errors=errors,
    )


# -- report ------------------------------------------------------------------

def _iso(now: datetime) -> str:
    if now.tzinfo is not None:
        now = now.astimezone(timezone.utc).replace(tzinfo=None)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


def _fmt(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _format_row(title: str, row: Mapping[str, Any]) -> str:
    lines = [title]
    for key, value in row.items():
        lines.append(f"  - {key}: {_fmt(value)}")
    return "\n".join(lines)


def build_migration_report(
    state: SpellBuilderState,
    now: Optional[datetime] = None,
    payload: Optional[MigrationPayload] = None,
) -> str:
    if payload is None:
        payload = build_migration_payload(state)
    now = now or datetime.now(timezone.utc)

    header = "\n".join(
        [
            "SPELL MIGRATION REPORT",
            f"generated_at: {_iso(now)}",
            "----------------------------------------",
        ]
    )

    sections: List[str] = [_format_row("[spells]", payload.spells)]

    sections.append("\n[spell_skill_resource]")
    for i, row in enumerate(payload.spell_skill_resource, start=1):
        sections.append(_format_row(f"  row #{i}", row))

    sections.append("\n[skill_spell_attack]")
    for i, row in enumerate(payload.skill_spell_attack, start=1):
        sections.append(_format_row(f"  effect #{i}", row))

    sections.append("\n[conditions]")
    for i, row in enumerate(payload.conditions, start=1):
        sections.append(_format_row(f"  condition #{i}", row))

    sections.append("\n[validation]")
    if payload.errors:
        sections.append("  status: FAIL")
        sections.extend(f"  - {err}" for err in payload.errors)
    else:
        sections.append("  status: OK")

    return "\n".join([header, *sections]) + "\n"


def report_filename(spell_name: Optional[str], now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    safe = normalize_spell_name(spell_name or "spell") or "spell"
    safe = _UNSAFE_FILENAME.sub("_", safe)
    stamp = _iso(now).replace(":", "-").replace(".", "-")
    return f"spell_migration__{safe}__{stamp}.txt"


__all__ = [
    "ConditionInput",
    "EffectInput",
    "ResourceInput",
    "SpellBuilderState",
    "MigrationPayload",
    "parse_builder_state",
    "build_migration_payload",
    "build_migration_report",
    "report_filename",
    "to_int_or_zero",
    "to_numeric_or_none",
]
