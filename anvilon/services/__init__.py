"""Service exports."""

from . import auth_service, migration_runs_service, race_detail_service, spell_builder_service

__all__ = [
    "auth_service",
    "migration_runs_service",
    "race_detail_service",
    "spell_builder_service",
]
