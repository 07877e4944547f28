from __future__ import annotations

from datetime import datetime, timezone

import pytest

from anvilon.services import migration_runs_service, spell_builder_service

NOW = datetime(2024, 5, 1, 9, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def catalog_sb(fake_sb):
    fake_sb.tables["magic_school"] = [{"id": 1, "name": "Огонь"}, {"name": "без id"}]
    fake_sb.tables["magic_path"] = [{"id": 10, "name": "Пламя", "id_magic_school": 1}]
    fake_sb.tables["talents"] = [{"id": "t1", "name": " Ловкость "}, {"id": "t2", "name": ""}]
    fake_sb.tables["catalogs_book"] = [
        {"id": "rt-mana", "group": "resource_type", "name": "Затраты маны"},
        {"id": "rt-always", "group": "resource_type", "name": "Всегда активно"},
        {"id": "ac-1", "group": "attack_category", "name": "Дальняя"},
        {"id": "tt-1", "group": "type_target", "name": "Враг"},
        {"id": "af-1", "group": "attack_focus", "name": "Одиночная"},
        {"id": "im-1", "group": "impact", "name": "Огонь"},
        {"id": "cn-special", "group": "conditions", "name": "Специальные условия"},
        {"id": "cn-none", "group": "conditions", "name": "Нет условий"},
        {"id": "broken", "group": "", "name": "Без группы"},
    ]
    return fake_sb


def _body(**overrides):
    body = {
        "spell_name": "искра",
        "spell_level": 1,
        "selected_path_id": "10",
        "spell_resources": [{"id": "r1", "resource_type_id": "rt-mana", "resource_cost_id": "Заклинание ученика"}],
        "effects": [
            {
                "id": "e1",
                "attack_distance_kind": "ac-1",
                "target_type": "tt-1",
                "target_kind": "af-1",
                "impact_type": "im-1",
                "conditions": [{"condition_id": "cn-none"}],
            }
        ],
    }
    body.update(overrides)
    return body


def test_reference_data(catalog_sb):
    ref = spell_builder_service.load_reference_data(client=catalog_sb)

    assert ref["schools"] == [{"value": "1", "label": "Огонь"}]
    assert ref["paths"] == [{"value": "10", "label": "Пламя", "school": "1"}]
    assert ref["talents"] == [{"value": "t1", "label": "Ловкость"}]
    assert ref["no_conditions_id"] == "cn-none"
    assert ref["special_conditions_id"] == "cn-special"
    assert "broken" not in ref["catalog_label_by_id"]
    assert ref["catalog_label_by_id"]["im-1"] == "Огонь"
    assert ref["cost_labels_by_type"]["rt-always"] == ["Без затрат"]
    assert "Заклинание ученика" in ref["cost_labels_by_type"]["rt-mana"]
    assert ref["required_groups"][0] == "attack_category"


def test_reference_data_survives_talent_errors(catalog_sb):
    catalog_sb.fail("talents")
    assert spell_builder_service.load_reference_data(client=catalog_sb)["talents"] == []


def test_validate_uses_server_labels(catalog_sb):
    _state, payload = spell_builder_service.validate(_body(), client=catalog_sb)
    assert payload.ok, payload.errors
    assert payload.spells["name"] == "Искра"
    assert payload.spell_skill_resource[0]["resource_type"] == "Затраты маны"
    assert payload.spell_skill_resource[0]["resource_value"] == 8
    assert payload.conditions[0]["condition"] == "Нет условий"


def test_preview_report_logs_run(catalog_sb):
    preview = spell_builder_service.preview_report(_body(), actor_email="mage@example.com", client=catalog_sb, now=NOW)

    assert preview["filename"] == "spell_migration__Искра__2024-05-01T09-00-00-000Z.txt"
    assert "status: OK" in preview["text"]
    run = migration_runs_service.get_run(preview["run_id"])
    assert run.status == "preview"
    assert run.actor_email == "mage@example.com"
    assert run.report_text == preview["text"]


def test_preview_report_with_errors(catalog_sb):
    preview = spell_builder_service.preview_report(_body(spell_name=""), client=catalog_sb, now=NOW)
    assert "status: FAIL" in preview["text"]
    assert migration_runs_service.get_run(preview["run_id"]).status == "validation_failed"


def test_submit_validation_failure_writes_nothing(catalog_sb):
    payload, result = spell_builder_service.submit(_body(effects=[]), client=catalog_sb, now=NOW)
    assert result is None
    assert not payload.ok
    assert "spells" not in catalog_sb.tables
    assert migration_runs_service.recent_runs()[0]["status"] == "validation_failed"


def test_submit_commits(catalog_sb):
    payload, result = spell_builder_service.submit(_body(), actor_email="mage@example.com", client=catalog_sb, now=NOW)
    assert result.ok
    assert catalog_sb.tables["spells"][0]["id"] == payload.spells["id"]
    run = migration_runs_service.recent_runs()[0]
    assert run["status"] == "committed"
    assert run["spell_id"] == payload.spells["id"]


def test_submit_rollback_is_logged(catalog_sb):
    catalog_sb.fail("conditions", op="insert", message="rls denied")
    payload, result = spell_builder_service.submit(_body(), client=catalog_sb, now=NOW)

    assert not result.ok
    assert result.status == "rolled_back"
    assert catalog_sb.tables["spells"] == []
    run = migration_runs_service.recent_runs()[0]
    assert run["status"] == "rolled_back"
    assert run["failed_step"] == "conditions"
    assert run["errors"] and "rls denied" in run["errors"][0]
