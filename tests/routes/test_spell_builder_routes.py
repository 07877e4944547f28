from __future__ import annotations

import pytest

from anvilon.routes.spell_builder import BUILDER_PREFIX
from anvilon.services import migration_runs_service

API = BUILDER_PREFIX + "/api"


@pytest.fixture
def catalog(fake_sb):
    fake_sb.tables["magic_path"] = [{"id": 10, "name": "Пламя", "id_magic_school": 1}]
    fake_sb.tables["catalogs_book"] = [
        {"id": "rt-mana", "group": "resource_type", "name": "Затраты маны"},
        {"id": "ac-1", "group": "attack_category", "name": "Дальняя"},
        {"id": "tt-1", "group": "type_target", "name": "Враг"},
        {"id": "af-1", "group": "attack_focus", "name": "Одиночная"},
        {"id": "im-1", "group": "impact", "name": "Огонь"},
        {"id": "cn-none", "group": "conditions", "name": "Нет условий"},
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


def test_builder_page_renders(client, catalog):
    resp = client.get(BUILDER_PREFIX)
    assert resp.status_code == 200
    html = resp.get_data(as_text=True)
    assert "rt-mana" in html
    assert API in html


def test_validate_ok(client, catalog):
    resp = client.post(API + "/validate", json=_body())
    data = resp.get_json()
    assert resp.status_code == 200
    assert data["ok"] is True
    assert data["errors"] == []
    assert data["payload"]["spells"]["name"] == "Искра"


def test_validate_reports_errors(client, catalog):
    data = client.post(API + "/validate", json=_body(selected_path_id="")).get_json()
    assert data["ok"] is False
    assert "[spells] Не заполнено: Путь магии" in data["errors"]


def test_validate_rejects_non_object(client):
    resp = client.post(API + "/validate", json=[1, 2])
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "invalid_json"


def test_report_download(client, catalog):
    resp = client.post(API + "/report", json=_body())
    assert resp.status_code == 200
    assert resp.headers["Content-Type"] == "text/plain; charset=utf-8"
    disposition = resp.headers["Content-Disposition"]
    assert disposition.startswith("attachment;")
    assert "filename*=UTF-8''spell_migration__" in disposition
    assert resp.get_data(as_text=True).startswith("SPELL MIGRATION REPORT")
    assert migration_runs_service.recent_runs()[0]["status"] == "preview"


def test_submit_requires_admin(client, catalog, sign_in):
    assert client.post(API + "/submit", json=_body()).status_code == 403
    sign_in()
    resp = client.post(API + "/submit", json=_body())
    assert resp.status_code == 403
    assert resp.get_json()["error"] == "permission_denied"
    assert "spells" not in catalog.tables


def test_submit_validation_failed(client, catalog, sign_in_admin):
    sign_in_admin()
    resp = client.post(API + "/submit", json=_body(effects=[]))
    assert resp.status_code == 422
    assert resp.get_json()["details"]["errors"]


def test_submit_commits_with_user_token(client, catalog, sign_in_admin):
    sign_in_admin()
    resp = client.post(API + "/submit", json=_body())

    assert resp.status_code == 201
    data = resp.get_json()
    assert data["status"] == "committed"
    assert catalog.tables["spells"][0]["id"] == data["spell_id"]
    assert "jwt" in catalog.tokens


def test_submit_failure_returns_502(client, catalog, sign_in_admin):
    catalog.fail("skill_spell_attack", op="insert")
    sign_in_admin()
    resp = client.post(API + "/submit", json=_body())

    assert resp.status_code == 502
    data = resp.get_json()
    assert data["error_code"] == "submit_failed"
    assert data["status"] == "rolled_back"
    assert data["failed_step"] == "skill_spell_attack"
