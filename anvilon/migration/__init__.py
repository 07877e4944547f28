"""Spell builder migration: cost dictionary, payload/report, submission."""
from .resource_costs import (  # noqa: F401
    RESOURCE_COST_LABELS,
    RESOURCE_COST_RULES,
    ResourceResolution,
    allowed_cost_labels,
    normalize_spell_name,
    resolve_resource_value,
)
from .report import (  # noqa: F401
    MigrationPayload,
    SpellBuilderState,
    build_migration_payload,
    build_migration_report,
    parse_builder_state,
    report_filename,
)
from .submit import (  # noqa: F401
    MigrationResult,
    MigrationValidationError,
    submit_spell_migration,
)

__all__ = [
    "RESOURCE_COST_LABELS",
    "RESOURCE_COST_RULES",
    "ResourceResolution",
    "allowed_cost_labels",
    "normalize_spell_name",
    "resolve_resource_value",
    "MigrationPayload",
    "SpellBuilderState",
    "build_migration_payload",
    "build_migration_report",
    "parse_builder_state",
    "report_filename",
    "MigrationResult",
    "MigrationValidationError",
    "submit_spell_migration",
]
