"""Spell builder: reference data, validation, report preview and submission.

Catalog labels are always rebuilt from the catalog tables on the server; the
browser only sends ids.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Tuple

from anvilon.data import catalogs as catalogs_data
from anvilon.data import magic as magic_data
from anvilon.data import talents as talents_data
from anvilon.migration import (
    MigrationPayload,
    MigrationResult,
    SpellBuilderState,
    allowed_cost_labels,
    build_migration_payload,
    build_migration_report,
    parse_builder_state,
    report_filename,
    submit_spell_migration,
)
from anvilon.migration.report import NO_CONDITION_LABELS, SPECIAL_CONDITION_LABELS
from anvilon.migration.resource_costs import RESOURCE_COST_LABELS
from anvilon.services import migration_runs_service
from anvilon.supabase import SupabaseError, get_client
from anvilon.utils.logging import get_logger

LOG = get_logger("anvilon.spell_builder")

# Effect selects that must always hold a value (defaulted to the first option).
REQUIRED_EFFECT_GROUPS = ("attack_category", "type_target", "attack_focus", "attack_type", "impact")
OPTIONAL_EFFECT_GROUPS = ("direction_attack", "potency_resist", "effect", "move_type", "concentration")
CONDITIONS_GROUP = "conditions"


def _normalized_catalog(books: List[dict]) -> List[Dict[str, str]]:
    out: List[Dict[str, str]] = []
    for row in books:
        item = {
            "id": str(row.get("id") or ""),
            "group": str(row.get("group") or ""),
            "name": str(row.get("name") or ""),
        }
        if item["id"] and item["group"] and item["name"]:
            out.append(item)
    return out


def _find_condition_id(catalog: List[Dict[str, str]], labels: Tuple[str, ...]) -> str:
    for row in catalog:
        if row["group"] == CONDITIONS_GROUP and row["name"] in labels:
            return row["id"]
    return ""


def load_reference_data(client=None) -> Dict[str, Any]:
    cl = client if client is not None else get_client()
    schools = magic_data.get_magic_schools(client=cl)
    paths = magic_data.get_magic_paths(client=cl)
    try:
        talents = talents_data.get_talents(client=cl)
    except SupabaseError as exc:
        LOG.warning("talents unavailable for spell builder code=%s message=%s", exc.code, exc.message)
        talents = []
    catalog = _normalized_catalog(catalogs_data.get_catalog_books(client=cl))

    options_by_group: Dict[str, List[Dict[str, str]]] = {}
    for row in catalog:
        options_by_group.setdefault(row["group"], []).append({"value": row["id"], "label": row["name"]})
    labels = catalogs_data.catalog_label_map(catalog)

    conditions = options_by_group.get(CONDITIONS_GROUP, [])
    no_conditions_id = _find_condition_id(catalog, NO_CONDITION_LABELS) or (conditions[0]["value"] if conditions else "")
    special_conditions_id = _find_condition_id(catalog, SPECIAL_CONDITION_LABELS)

    resource_types = options_by_group.get(catalogs_data.RESOURCE_TYPE_GROUP, [])
    cost_labels_by_type = {rt["value"]: allowed_cost_labels(rt["label"]) for rt in resource_types}

    return {
        "schools": [{"value": str(s.get("id")), "label": str(s.get("name") or "—")} for s in schools if s.get("id")],
        "paths": [
            {"value": str(p.get("id")), "label": str(p.get("name") or "—"), "school": str(p.get("id_magic_school") or "")}
            for p in paths
            if p.get("id")
        ],
        "talents": [
            {"value": str(t.get("id")), "label": str(t.get("name")).strip()}
            for t in talents
            if t.get("id") and str(t.get("name") or "").strip()
        ],
        "options_by_group": options_by_group,
        "catalog_label_by_id": labels,
        "no_conditions_id": no_conditions_id,
        "special_conditions_id": special_conditions_id,
        "resource_types": resource_types,
        "cost_labels_by_type": cost_labels_by_type,
        "all_cost_labels": list(RESOURCE_COST_LABELS),
        "required_groups": list(REQUIRED_EFFECT_GROUPS),
        "optional_groups": list(OPTIONAL_EFFECT_GROUPS),
    }


def build_state(body: Mapping[str, Any], reference: Mapping[str, Any]) -> SpellBuilderState:
    return parse_builder_state(body, reference.get("catalog_label_by_id") or {})


def validate(body: Mapping[str, Any], client=None) -> Tuple[SpellBuilderState, MigrationPayload]:
    reference = load_reference_data(client)
    state = build_state(body, reference)
    return state, build_migration_payload(state)


def preview_report(body: Mapping[str, Any], *, actor_email: Optional[str] = None,
                   client=None, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Build the downloadable report and log it as a preview run."""
    now = now or datetime.now(timezone.utc)
    state, payload = validate(body, client=client)
    text = build_migration_report(state, now=now, payload=payload)
    run_id = migration_runs_service.record(
        spell_name=payload.spells.get("name") or "",
        status="preview" if payload.ok else "validation_failed",
        report_text=text,
        spell_id=payload.spells.get("id"),
        actor_email=actor_email,
        errors=payload.errors,
    )
    return {
        "filename": report_filename(state.spell_name, now),
        "text": text,
        "payload": payload,
        "run_id": run_id,
    }


def submit(body: Mapping[str, Any], *, actor_email: Optional[str] = None,
           client=None, now: Optional[datetime] = None) -> Tuple[MigrationPayload, Optional[MigrationResult]]:
    """Validate then write. Returns (payload, None) when validation fails."""
    cl = client if client is not None else get_client()
    now = now or datetime.now(timezone.utc)
    state, payload = validate(body, client=cl)
    text = build_migration_report(state, now=now, payload=payload)
    spell_name = payload.spells.get("name") or ""

    if not payload.ok:
        migration_runs_service.record(
            spell_name=spell_name,
            status="validation_failed",
            report_text=text,
            spell_id=payload.spells.get("id"),
            actor_email=actor_email,
            errors=payload.errors,
        )
        return payload, None

    result = submit_spell_migration(cl, payload)
    errors = [result.error] if result.error else []
    errors.extend(result.rollback_errors)
    migration_runs_service.record(
        spell_name=spell_name,
        status=result.status,
        report_text=text,
        spell_id=result.spell_id,
        actor_email=actor_email,
        failed_step=result.failed_step,
        errors=errors,
    )
    return payload, result


__all__ = [
    "REQUIRED_EFFECT_GROUPS",
    "OPTIONAL_EFFECT_GROUPS",
    "load_reference_data",
    "build_state",
    "validate",
    "preview_report",
    "submit",
]
