"""Builder state parsing, migration payload and text report."""
from __future__ import annotations

from datetime import datetime, timezone

from anvilon.migration.report import (
    build_migration_payload,
    build_migration_report,
    parse_builder_state,
    report_filename,
    to_int_or_zero,
    to_numeric_or_none,
)

NOW = datetime(2024, 5, 1, 12, 30, 45, 123000, tzinfo=timezone.utc)


def test_payload_rows_for_valid_state(builder_body, labels, id_factory):
    state = parse_builder_state(builder_body, labels)
    payload = build_migration_payload(state, id_factory)

    assert payload.ok, payload.errors
    assert payload.spells == {
        "id": "id-1",
        "name": "Огненная стрела",
        "description": "Стрела из пламени",
        "lvl": 2,
        "id_path": "path-1",
        "exc_talent": None,
    }
    assert payload.spell_skill_resource == [
        {"id": "id-2", "id_spell_skill": "id-1", "resource_type": "Затраты маны", "resource_value": 11}
    ]
    effect = payload.skill_spell_attack[0]
    assert effect["id"] == "id-3"
    assert effect["num_eff"] == 1
    assert effect["attack_category"] == "Дальняя"
    assert effect["attack_distance"] == 12
    assert effect["impact"] == "Огонь"
    assert effect["impact_value"] == 3.5
    assert effect["impact_duration"] == 0
    assert effect["attack_type"] is None
    assert effect["covering_attack_high"] is None
    assert payload.conditions == [
        {"id": "id-4", "id_eff": "id-3", "condition": "Нет условий", "description": None}
    ]


def test_labels_come_from_catalog_not_body(builder_body, id_factory):
    state = parse_builder_state(builder_body, {})
    payload = build_migration_payload(state, id_factory)
    # Unknown ids fall back to the raw id.
    assert payload.skill_spell_attack[0]["attack_category"] == "cat-range"


def test_missing_required_fields_are_reported(id_factory):
    state = parse_builder_state({"spell_level": 9, "effects": [{}]}, {})
    errors = build_migration_payload(state, id_factory).errors

    assert "[spells] Не заполнено: Название заклинания" in errors
    assert "[spells] Не заполнено: Путь магии" in errors
    assert "[spells] Некорректный уровень (1-5)" in errors
    assert "[spell_skill_resource] Должна быть минимум 1 строка ресурса" in errors
    assert '[skill_spell_attack] Эффект 1: не заполнено "Тип воздействия"' in errors
    assert "[conditions] Эффект 1: нет ни одного условия (ожидается минимум 1)" in errors


def test_no_effects_is_an_error(builder_body, labels, id_factory):
    builder_body["effects"] = []
    payload = build_migration_payload(parse_builder_state(builder_body, labels), id_factory)
    assert "[skill_spell_attack] Должен быть минимум 1 эффект" in payload.errors


def test_special_condition_requires_description(builder_body, labels, id_factory):
    builder_body["effects"][0]["conditions"] = [{"condition_id": "cat-special", "description": "  "}]
    payload = build_migration_payload(parse_builder_state(builder_body, labels), id_factory)
    assert any("Специальные условия" in e for e in payload.errors)

    builder_body["effects"][0]["conditions"] = [{"condition_id": "cat-special", "description": " ночью "}]
    payload = build_migration_payload(parse_builder_state(builder_body, labels), id_factory)
    assert payload.ok
    assert payload.conditions[0]["description"] == "ночью"


def test_replacement_points_at_generated_effect_id(builder_body, labels, id_factory):
    second = dict(builder_body["effects"][0], id="ui-e2", replace_impact_or_effect="ui-e1")
    builder_body["effects"].append(second)
    payload = build_migration_payload(parse_builder_state(builder_body, labels), id_factory)

    first_id = payload.skill_spell_attack[0]["id"]
    assert payload.skill_spell_attack[1]["replace_imp_eff"] == first_id
    assert payload.skill_spell_attack[1]["num_eff"] == 2


def test_resource_errors_skip_the_row(builder_body, labels, id_factory):
    builder_body["spell_resources"][0]["resource_cost_custom"] = "abc"
    payload = build_migration_payload(parse_builder_state(builder_body, labels), id_factory)
    assert payload.spell_skill_resource == []
    assert any(e.startswith("[spell_skill_resource] Затраты маны:") for e in payload.errors)


def test_covering_height_only_when_covering(builder_body, labels, id_factory):
    builder_body["effects"][0].update(covering_attack=True, covering_attack_high="4")
    payload = build_migration_payload(parse_builder_state(builder_body, labels), id_factory)
    assert payload.skill_spell_attack[0]["covering_attack"] is True
    assert payload.skill_spell_attack[0]["covering_attack_high"] == 4


def test_parse_ignores_garbage_shapes():
    state = parse_builder_state({"spell_resources": "nope", "effects": [1, None, {"is_critical": 1}], "spell_level": "x"})
    assert state.spell_resources == []
    assert len(state.effects) == 1
    assert state.effects[0].is_critical is True
    assert state.spell_level == 0


def test_report_text(builder_body, labels, id_factory):
    state = parse_builder_state(builder_body, labels)
    payload = build_migration_payload(state, id_factory)
    text = build_migration_report(state, now=NOW, payload=payload)

    assert text.startswith("SPELL MIGRATION REPORT\ngenerated_at: 2024-05-01T12:30:45.123Z\n")
    assert "[spells]\n  - id: id-1\n  - name: Огненная стрела" in text
    assert "  row #1" in text
    assert "  effect #1" in text
    assert "  - crit_check: false" in text
    assert "  - exc_talent: null" in text
    assert "[validation]\n  status: OK" in text
    assert text.endswith("\n")


def test_report_lists_failures(id_factory):
    state = parse_builder_state({}, {})
    text = build_migration_report(state, now=NOW, payload=build_migration_payload(state, id_factory))
    assert "  status: FAIL" in text
    assert "  - [spells] Не заполнено: Название заклинания" in text


def test_report_filename_is_safe():
    assert report_filename("огненная стрела!", NOW) == "spell_migration__Огненная_стрела___2024-05-01T12-30-45-123Z.txt"
    assert report_filename("", NOW).startswith("spell_migration__spell__")


def test_numeric_fields_parse_like_form_numbers():
    assert to_int_or_zero("1e2") == 100
    assert to_int_or_zero("-2.7") == -2
    assert to_int_or_zero("1_000") == 0
    assert to_int_or_zero("١٢") == 0
    assert to_int_or_zero(None) == 0
    assert to_numeric_or_none("2.5") == 2.5
    assert to_numeric_or_none("Infinity") is None
    assert to_numeric_or_none("  ") is None
