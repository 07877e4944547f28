"""Resource cost dictionary for the spell builder.

Maps the cost labels shown in the form to numeric ``resource_value`` for a
given spell level (1..5). Three rule shapes exist:

* a constant (token costs),
* a 5-level list,
* a dual mana/health pair of 5-level lists, picked by the resource type name.
"""
from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

NO_COST = "Без затрат"

LevelValues = Tuple[int, int, int, int, int]


@dataclass(frozen=True)
class DualManaHealth:
    mana: LevelValues
    health: LevelValues


Rule = Union[int, LevelValues, DualManaHealth]

RESOURCE_COST_RULES: Dict[str, Rule] = {
    NO_COST: (0, 0, 0, 0, 0),
    "Заклинание ученика": (8, 11, 14, 17, 20),
    "Заклинание мастера": (24, 28, 32, 36, 40),
    "Заклинание грандмастера": (50, 55, 60, 65, 70),
    "Заклинание эксперта": (80, 85, 90, 95, 100),
    "Концентрация навыка": (10, 20, 30, 40, 50),
    "Затраты жизни навыка": (10, 20, 30, 40, 50),
    "Заклинание ученика двойные затраты": DualManaHealth(
        mana=(4, 6, 7, 9, 10), health=(4, 5, 7, 8, 10)
    ),
    "Заклинание мастера двойные затраты": DualManaHealth(
        mana=(12, 14, 16, 18, 20), health=(12, 14, 16, 18, 20)
    ),
    "Заклинание грандмастера двойные затраты": DualManaHealth(
        mana=(25, 28, 30, 33, 35), health=(25, 27, 30, 32, 35)
    ),
    "Заклинание эксперта двойные затраты": DualManaHealth(
        mana=(40, 43, 45, 48, 50), health=(40, 42, 45, 47, 50)
    ),
    "Длительность стойки": (2, 3, 4, 5, 6),
    "Время восстановления навыка": (1, 2, 3, 4, 5),
    "Половинные затраты жетонов": 1,
    "Полные затраты жетонов": 2,
    "Сверхзатраты жетонов": 3,
}

# Display order of the cost select.
RESOURCE_COST_LABELS: Tuple[str, ...] = (
    NO_COST,
    "Заклинание ученика",
    "Заклинание мастера",
    "Заклинание грандмастера",
    "Заклинание эксперта",
    "Концентрация навыка",
    "Затраты жизни навыка",
    "Заклинание ученика двойные затраты",
    "Заклинание мастера двойные затраты",
    "Заклинание грандмастера двойные затраты",
    "Заклинание эксперта двойные затраты",
    "Длительность стойки",
    "Время восстановления навыка",
    "Половинные затраты жетонов",
    "Полные затраты жетонов",
    "Сверхзатраты жетонов",
)

_MANA_TIERS = (
    "Заклинание ученика",
    "Заклинание мастера",
    "Заклинание грандмастера",
    "Заклинание эксперта",
    "Концентрация навыка",
)
_DUAL_TIERS = (
    "Заклинание ученика двойные затраты",
    "Заклинание мастера двойные затраты",
    "Заклинание грандмастера двойные затраты",
    "Заклинание эксперта двойные затраты",
)
_TOKEN_COSTS = (
    "Половинные затраты жетонов",
    "Полные затраты жетонов",
    "Сверхзатраты жетонов",
)

_MANA_RE = re.compile(r"ман", re.IGNORECASE)
_HEALTH_RE = re.compile(r"здоров|хп", re.IGNORECASE)
_DECIMAL_RE = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$", re.ASCII)
_RADIX_RE = re.compile(r"^0([xX][0-9a-fA-F]+|[oO][0-7]+|[bB][01]+)$")


@dataclass(frozen=True)
class ResourceResolution:
    ok: bool
    value: Optional[int] = None
    error: Optional[str] = None


def is_mana_type(resource_type_name: str) -> bool:
    return bool(_MANA_RE.search(resource_type_name or "")) and not re.search(
        r"здоров", resource_type_name or "", re.IGNORECASE
    )


def is_health_type(resource_type_name: str) -> bool:
    return bool(_HEALTH_RE.search(resource_type_name or ""))


def allowed_cost_labels(resource_type_name: Optional[str]) -> List[str]:
    """Cost labels offered for a resource type name (falls back to all labels)."""
    name = (resource_type_name or "").lower()

    if "всегда" in name:
        return [NO_COST]

    allow: List[str] = []
    is_mana = "затраты маны" in name
    is_health = "затраты здоровья" in name or "затраты жизни" in name
    if is_mana:
        allow.extend(_MANA_TIERS)
    if is_health:
        allow.append("Затраты жизни навыка")
    if "/" in name or is_mana or is_health:
        allow.extend(_DUAL_TIERS)
    if "время восстановления" in name:
        allow.extend(("Длительность стойки", "Время восстановления навыка"))
    if "затраты свободных действий" in name or "жетонов нетерпимости" in name:
        allow.extend(_TOKEN_COSTS)

    if not allow:
        return list(RESOURCE_COST_LABELS)
    return allow


def parse_number(text: str) -> Optional[float]:
    """Finite number written in ASCII decimal, exponent or 0x/0o/0b form, else None."""
    text = (text or "").strip()
    if _RADIX_RE.match(text):
        try:
            return float(int(text, 0))
        except OverflowError:
            return None
    if not _DECIMAL_RE.match(text):
        return None
    number = float(text)
    return number if math.isfinite(number) else None


def _parse_custom_int(raw: str) -> Optional[int]:
    number = parse_number(raw)
    if number is None or not number.is_integer():
        return None
    return int(number)


def _pick(values: Sequence[int], level: int) -> int:
    return values[level - 1]


def resolve_resource_value(
    resource_type_name: str,
    cost_label: str,
    level: Any,
    custom_value: Optional[str] = None,
) -> ResourceResolution:
    """Resolve ``resource_value``; a non-blank custom value overrides the list."""
    raw_custom = (custom_value or "").strip()
    if raw_custom:
        parsed = _parse_custom_int(raw_custom)
        if parsed is None:
            return ResourceResolution(False, error=f'Некорректное число в ручном вводе: "{raw_custom}"')
        return ResourceResolution(True, value=parsed)

    if isinstance(level, bool) or not isinstance(level, int) or not 1 <= level <= 5:
        return ResourceResolution(False, error=f"Некорректный уровень (должен быть 1-5): {level}")

    rule = RESOURCE_COST_RULES.get(cost_label)
    if rule is None:
        return ResourceResolution(False, error=f'Неизвестный вариант затрат ресурса: "{cost_label}"')

    if isinstance(rule, int):
        return ResourceResolution(True, value=rule)
    if isinstance(rule, tuple):
        return ResourceResolution(True, value=_pick(rule, level))

    if is_mana_type(resource_type_name):
        return ResourceResolution(True, value=_pick(rule.mana, level))
    if is_health_type(resource_type_name):
        return ResourceResolution(True, value=_pick(rule.health, level))
    return ResourceResolution(
        False,
        error=(
            'Двойные затраты поддерживают только типы "Затраты маны" или "Затраты здоровья". '
            f'Сейчас выбран тип: "{resource_type_name}"'
        ),
    )


def normalize_spell_name(value: Any) -> str:
    """Upper-case the first character only."""
    text = "" if value is None else str(value)
    if not text:
        return text
    return text[0].upper() + text[1:]


__all__ = [
    "NO_COST",
    "DualManaHealth",
    "RESOURCE_COST_RULES",
    "RESOURCE_COST_LABELS",
    "ResourceResolution",
    "is_mana_type",
    "is_health_type",
    "allowed_cost_labels",
    "parse_number",
    "resolve_resource_value",
    "normalize_spell_name",
]
