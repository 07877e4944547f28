"""Repository helpers for spell migration run records."""
from __future__ import annotations

import json
from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from sqlalchemy import delete, select

from anvilon.db import app_session
from anvilon.db.models import SpellMigrationRun
from anvilon.utils.logging import get_logger

LOG = get_logger("anvilon.migration_runs_repo")
_DEFAULT_LIMIT = 50
_MAX_LIMIT = 500


def _validate_status(status: str) -> str:
    if status not in SpellMigrationRun.STATUSES:
        raise ValueError("invalid_status")
    return status


def record_run(
    *,
    spell_name: str,
    status: str,
    report_text: str,
    spell_id: Optional[str] = None,
    actor_email: Optional[str] = None,
    failed_step: Optional[str] = None,
    errors: Optional[Iterable[str]] = None,
) -> SpellMigrationRun:
    """Insert a run row and return it (detached, attributes loaded)."""
    _validate_status(status)
    with app_session() as session:
        row = SpellMigrationRun(
            spell_id=spell_id,
            spell_name=(spell_name or "").strip()[:255],
            status=status,
            actor_email=actor_email,
            failed_step=failed_step,
            errors_json=json.dumps(list(errors or []), ensure_ascii=False),
            report_text=report_text or "",
            created_at=datetime.utcnow(),
        )
        session.add(row)
        session.flush()
        LOG.debug("recorded spell migration run id=%s status=%s", row.id, status)
        return row


def list_runs(limit: int = _DEFAULT_LIMIT) -> List[SpellMigrationRun]:
    safe_limit = limit if isinstance(limit, int) and limit > 0 else _DEFAULT_LIMIT
    safe_limit = min(safe_limit, _MAX_LIMIT)
    with app_session() as session:
        return list(
            session.execute(
                select(SpellMigrationRun)
                .order_by(SpellMigrationRun.created_at.desc(), SpellMigrationRun.id.desc())
                .limit(safe_limit)
            )
            .scalars()
            .all()
        )


def get_run(run_id: int) -> Optional[SpellMigrationRun]:
    with app_session() as session:
        return session.get(SpellMigrationRun, run_id)


def purge_runs(*, older_than_days: int) -> int:
    """Delete runs created before the retention window; returns the count."""
    if older_than_days <= 0:
        raise ValueError("older_than_days_positive")
    cutoff = datetime.utcnow() - timedelta(days=older_than_days)
    with app_session() as session:
        res = session.execute(delete(SpellMigrationRun).where(SpellMigrationRun.created_at < cutoff))
        return int(res.rowcount or 0)


__all__ = [
    "record_run",
    "list_runs",
    "get_run",
    "purge_runs",
]
