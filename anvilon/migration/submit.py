"""Write a validated migration payload to the hosted tables.

Inserts run in dependency order (spell, resources, effects, conditions).
When a step fails, every row inserted so far is deleted again in reverse
order. Rollback keeps going past individual delete failures and reports them,
so operators know which ids may be left behind.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from anvilon.migration.report import MigrationPayload
from anvilon.supabase import SupabaseError
from anvilon.utils.logging import get_logger

LOG = get_logger("anvilon.migration.submit")

STATUS_COMMITTED = "committed"
STATUS_ROLLED_BACK = "rolled_back"
STATUS_ROLLBACK_INCOMPLETE = "rollback_incomplete"

# Table names (== payload attributes), in insert order.
INSERT_STEPS: Tuple[str, ...] = (
    "spells",
    "spell_skill_resource",
    "skill_spell_attack",
    "conditions",
)


class MigrationValidationError(ValueError):
    def __init__(self, errors: List[str]):
        super().__init__("migration_payload_invalid")
        self.errors = list(errors)


@dataclass
class MigrationResult:
    ok: bool
    spell_id: str
    status: str
    failed_step: Optional[str] = None
    error: Optional[str] = None
    inserted: Dict[str, int] = field(default_factory=dict)
    rolled_back_steps: List[str] = field(default_factory=list)
    rollback_errors: List[str] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "ok": self.ok,
            "spell_id": self.spell_id,
            "status": self.status,
            "failed_step": self.failed_step,
            "error": self.error,
            "inserted": dict(self.inserted),
            "rolled_back_steps": list(self.rolled_back_steps),
            "rollback_errors": list(self.rollback_errors),
        }


def _rows_for(payload: MigrationPayload, step: str) -> List[Dict[str, Any]]:
    if step == "spells":
        return [payload.spells]
    return list(getattr(payload, step))


def _describe(exc: Exception) -> str:
    if isinstance(exc, SupabaseError):
        parts = [exc.message]
        if exc.code:
            parts.append(f"code={exc.code}")
        if exc.details:
            parts.append(f"details={exc.details}")
        if exc.hint:
            parts.append(f"hint={exc.hint}")
        return " ".join(parts)
    return str(exc)


def _rollback(client, inserted: List[Tuple[str, List[str]]], result: MigrationResult) -> None:
    for step, ids in reversed(inserted):
        if not ids:
            continue
        try:
            client.table(step).delete().in_("id", ids).execute()
        except (SupabaseError, ValueError) as exc:
            msg = f"{step}: {_describe(exc)}"
            LOG.error("rollback delete failed spell_id=%s %s", result.spell_id, msg)
            result.rollback_errors.append(msg)
            continue
        result.rolled_back_steps.append(step)


def submit_spell_migration(client, payload: MigrationPayload) -> MigrationResult:
    """Insert the payload rows; undo partial writes on failure."""
    if payload.errors:
        raise MigrationValidationError(payload.errors)

    spell_id = str(payload.spells.get("id") or "")
    result = MigrationResult(ok=False, spell_id=spell_id, status=STATUS_COMMITTED)
    inserted: List[Tuple[str, List[str]]] = []

    for step in INSERT_STEPS:
        rows = _rows_for(payload, step)
        if not rows:
            continue
        try:
            client.table(step).insert(rows).execute()
        except SupabaseError as exc:
            result.failed_step = step
            result.error = _describe(exc)
            LOG.error("spell migration insert failed spell_id=%s step=%s %s", spell_id, step, result.error)
            _rollback(client, inserted, result)
            result.status = STATUS_ROLLBACK_INCOMPLETE if result.rollback_errors else STATUS_ROLLED_BACK
            return result
        inserted.append((step, [str(row["id"]) for row in rows]))
        result.inserted[step] = len(rows)

    result.ok = True
    LOG.info("spell migration committed spell_id=%s rows=%s", spell_id, result.inserted)
    return result


__all__ = [
    "STATUS_COMMITTED",
    "STATUS_ROLLED_BACK",
    "STATUS_ROLLBACK_INCOMPLETE",
    "INSERT_STEPS",
    "MigrationValidationError",
    "MigrationResult",
    "submit_spell_migration",
]
