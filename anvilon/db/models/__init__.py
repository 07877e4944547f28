"""ORM models aggregate exports."""
from .migration_runs import (  # noqa: F401
    Base,
    SpellMigrationRun,
)

__all__ = [
    "Base",
    "SpellMigrationRun",
]
