from __future__ import annotations

import itertools

import pytest


@pytest.fixture
def id_factory():
    counter = itertools.count(1)
    return lambda: f"id-{next(counter)}"


@pytest.fixture
def labels():
    return {
        "cat-mana": "Затраты маны",
        "cat-range": "Дальняя",
        "cat-enemy": "Враг",
        "cat-single": "Одиночная",
        "cat-fire": "Огонь",
        "cat-none": "Нет условий",
        "cat-special": "Специальные условия",
    }


@pytest.fixture
def builder_body():
    return {
        "spell_name": "огненная стрела",
        "spell_description": "Стрела из пламени",
        "spell_level": 2,
        "selected_path_id": "path-1",
        "talent_exception_id": "",
        "spell_resources": [
            {"id": "r1", "resource_type_id": "cat-mana", "resource_cost_id": "Заклинание ученика"},
        ],
        "effects": [
            {
                "id": "ui-e1",
                "attack_distance_kind": "cat-range",
                "target_type": "cat-enemy",
                "target_kind": "cat-single",
                "attack_distance_value": "12",
                "impact_type": "cat-fire",
                "impact_value": "3.5",
                "impact_duration": "",
                "conditions": [{"condition_id": "cat-none"}],
            }
        ],
    }
