"""Spell migration run log (local SQLite).

Recording is best effort: a failing local DB must not turn a successful
remote submission into an error response.
"""
from __future__ import annotations

from typing import Iterable, List, Optional

from anvilon.db.models import SpellMigrationRun
from anvilon.db.repositories import migration_runs_repo
from anvilon.utils.logging import get_logger

LOG = get_logger("anvilon.migration_runs")


def record(
    *,
    spell_name: str,
    status: str,
    report_text: str,
    spell_id: Optional[str] = None,
    actor_email: Optional[str] = None,
    failed_step: Optional[str] = None,
    errors: Optional[Iterable[str]] = None,
) -> Optional[int]:
    try:
        row = migration_runs_repo.record_run(
            spell_name=spell_name,
            status=status,
            report_text=report_text,
            spell_id=spell_id,
            actor_email=actor_email,
            failed_step=failed_step,
            errors=errors,
        )
    except ValueError:
        raise
    except Exception:
        LOG.warning("Failed recording spell migration run status=%s spell=%s", status, spell_name, exc_info=True)
        return None
    return row.id


def recent_runs(limit: int = 50) -> List[dict]:
    return [run.as_dict() for run in migration_runs_repo.list_runs(limit)]


def get_run(run_id: int) -> Optional[SpellMigrationRun]:
    return migration_runs_repo.get_run(run_id)


def purge(older_than_days: int) -> int:
    removed = migration_runs_repo.purge_runs(older_than_days=older_than_days)
    LOG.info("Purged %s spell migration runs older than %s days", removed, older_than_days)
    return removed


__all__ = ["record", "recent_runs", "get_run", "purge"]
