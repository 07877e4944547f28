"""Spell migration submission with rollback."""
from __future__ import annotations

import pytest

from anvilon.migration.report import build_migration_payload, parse_builder_state
from anvilon.migration.submit import (
    STATUS_COMMITTED,
    STATUS_ROLLBACK_INCOMPLETE,
    STATUS_ROLLED_BACK,
    MigrationValidationError,
    submit_spell_migration,
)
from anvilon.supabase import SupabaseError


class FakeQuery:
    def __init__(self, db, table):
        self.db = db
        self.table = table
        self.op = None
        self.rows = None
        self.ids = None

    def insert(self, rows):
        self.op, self.rows = "insert", rows
        return self

    def delete(self):
        self.op = "delete"
        return self

    def in_(self, column, values):
        self.ids = list(values)
        return self

    def execute(self):
        self.db.calls.append((self.op, self.table))
        if (self.op, self.table) in self.db.fail:
            raise SupabaseError("boom", code="23505", details="duplicate", status=409)
        if self.op == "insert":
            self.db.tables.setdefault(self.table, []).extend(self.rows)
        else:
            kept = [r for r in self.db.tables.get(self.table, []) if r["id"] not in self.ids]
            self.db.tables[self.table] = kept
        return None


class FakeClient:
    def __init__(self, fail=()):
        self.fail = set(fail)
        self.calls = []
        self.tables = {}

    def table(self, name):
        return FakeQuery(self, name)


@pytest.fixture
def payload(builder_body, labels, id_factory):
    return build_migration_payload(parse_builder_state(builder_body, labels), id_factory)


def test_commits_all_tables_in_order(payload):
    client = FakeClient()
    result = submit_spell_migration(client, payload)

    assert result.ok
    assert result.status == STATUS_COMMITTED
    assert [c for c in client.calls] == [
        ("insert", "spells"),
        ("insert", "spell_skill_resource"),
        ("insert", "skill_spell_attack"),
        ("insert", "conditions"),
    ]
    assert result.inserted == {"spells": 1, "spell_skill_resource": 1, "skill_spell_attack": 1, "conditions": 1}
    assert client.tables["spells"][0]["name"] == "Огненная стрела"


def test_invalid_payload_is_not_written(payload):
    payload.errors.append("broken")
    client = FakeClient()
    with pytest.raises(MigrationValidationError) as excinfo:
        submit_spell_migration(client, payload)
    assert excinfo.value.errors == ["broken"]
    assert client.calls == []


def test_failure_rolls_back_in_reverse_order(payload):
    client = FakeClient(fail={("insert", "skill_spell_attack")})
    result = submit_spell_migration(client, payload)

    assert not result.ok
    assert result.status == STATUS_ROLLED_BACK
    assert result.failed_step == "skill_spell_attack"
    assert "boom" in result.error and "code=23505" in result.error
    assert result.rolled_back_steps == ["spell_skill_resource", "spells"]
    assert client.calls[-2:] == [("delete", "spell_skill_resource"), ("delete", "spells")]
    assert client.tables["spells"] == []
    assert client.tables["spell_skill_resource"] == []


def test_rollback_keeps_going_past_delete_errors(payload):
    client = FakeClient(fail={("insert", "conditions"), ("delete", "skill_spell_attack")})
    result = submit_spell_migration(client, payload)

    assert result.status == STATUS_ROLLBACK_INCOMPLETE
    assert result.rolled_back_steps == ["spell_skill_resource", "spells"]
    assert len(result.rollback_errors) == 1
    assert result.rollback_errors[0].startswith("skill_spell_attack: boom")
    assert result.as_dict()["rollback_errors"] == result.rollback_errors
