"""Tests for migration_runs_repo helpers using in-memory SQLite."""
from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from anvilon.db import app_session
from anvilon.db.models import SpellMigrationRun
from anvilon.db.repositories import migration_runs_repo


def _count_runs() -> int:
    with app_session() as session:
        return session.query(SpellMigrationRun).count()


def test_record_and_fetch_run():
    row = migration_runs_repo.record_run(
        spell_name="  Огненная стрела ",
        status="preview",
        report_text="SPELL MIGRATION REPORT",
        spell_id="spell-1",
        actor_email="mage@example.com",
        errors=["ошибка"],
    )
    assert row.id is not None

    fetched = migration_runs_repo.get_run(row.id)
    assert fetched is not None
    assert fetched.spell_name == "Огненная стрела"
    assert fetched.errors_list() == ["ошибка"]
    data = fetched.as_dict(include_report=True)
    assert data["report_text"] == "SPELL MIGRATION REPORT"
    assert data["status"] == "preview"
    assert "report_text" not in fetched.as_dict()


def test_invalid_status_is_rejected():
    with pytest.raises(ValueError):
        migration_runs_repo.record_run(spell_name="x", status="done", report_text="")
    assert _count_runs() == 0


def test_list_runs_newest_first_with_limit():
    for name in ("one", "two", "three"):
        migration_runs_repo.record_run(spell_name=name, status="committed", report_text="")

    runs = migration_runs_repo.list_runs(2)
    assert [r.spell_name for r in runs] == ["three", "two"]
    assert len(migration_runs_repo.list_runs(-5)) == 3


def test_missing_run_returns_none():
    assert migration_runs_repo.get_run(999) is None


def test_purge_runs_removes_only_old_rows():
    old = migration_runs_repo.record_run(spell_name="old", status="rolled_back", report_text="")
    migration_runs_repo.record_run(spell_name="new", status="committed", report_text="")
    with app_session() as session:
        row = session.get(SpellMigrationRun, old.id)
        row.created_at = datetime.utcnow() - timedelta(days=40)

    assert migration_runs_repo.purge_runs(older_than_days=30) == 1
    assert _count_runs() == 1
    with pytest.raises(ValueError):
        migration_runs_repo.purge_runs(older_than_days=0)
