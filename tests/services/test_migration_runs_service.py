from __future__ import annotations

import pytest

from anvilon.db.repositories import migration_runs_repo
from anvilon.services import migration_runs_service


def test_record_returns_id_and_lists_runs():
    run_id = migration_runs_service.record(spell_name="Искра", status="committed", report_text="r", errors=[])
    assert isinstance(run_id, int)
    runs = migration_runs_service.recent_runs()
    assert runs[0]["id"] == run_id
    assert runs[0]["spell_name"] == "Искра"
    assert migration_runs_service.get_run(run_id).report_text == "r"


def test_record_is_best_effort(monkeypatch):
    def broken(**_kwargs):
        raise RuntimeError("disk full")

    monkeypatch.setattr(migration_runs_repo, "record_run", broken)
    assert migration_runs_service.record(spell_name="x", status="committed", report_text="") is None


def test_record_still_rejects_bad_status():
    with pytest.raises(ValueError):
        migration_runs_service.record(spell_name="x", status="whatever", report_text="")


def test_purge_with_nothing_to_remove():
    migration_runs_service.record(spell_name="x", status="preview", report_text="")
    assert migration_runs_service.purge(7) == 0
