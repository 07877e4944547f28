"""ORM models for the local run log."""
from __future__ import annotations

import datetime
import json

from sqlalchemy import Column, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class SpellMigrationRun(Base):
    """One spell builder report or submission.

    `errors_json` keeps the validation / submission errors as a JSON list;
    `report_text` is the exact text handed to the user for download.
    """

    __tablename__ = "spell_migration_runs"

    STATUSES = (
        "preview",
        "validation_failed",
        "committed",
        "rolled_back",
        "rollback_incomplete",
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    spell_id = Column(String(64), nullable=True, index=True)
    spell_name = Column(String(255), nullable=False, default="")
    status = Column(String(32), nullable=False)
    actor_email = Column(String(255), nullable=True)
    failed_step = Column(String(64), nullable=True)
    errors_json = Column(Text, nullable=True)
    report_text = Column(Text, nullable=False, default="")
    created_at = Column(DateTime, default=datetime.datetime.utcnow, nullable=False)

    __table_args__ = (
        Index("ix_spell_migration_runs_created", "created_at"),
    )

    def errors_list(self):
        if not self.errors_json:
            return []
        try:
            data = json.loads(self.errors_json)
        except ValueError:
            return []
        return data if isinstance(data, list) else []

    def as_dict(self, include_report: bool = False) -> dict:
        data = {
            "id": self.id,
            "spell_id": self.spell_id,
            "spell_name": self.spell_name,
            "status": self.status,
            "actor_email": self.actor_email,
            "failed_step": self.failed_step,
            "errors": self.errors_list(),
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
        if include_report:
            data["report_text"] = self.report_text or ""
        return data

    def __repr__(self) -> str:  # pragma: no cover
        return f"<SpellMigrationRun id={self.id} spell={self.spell_name!r} status={self.status}>"


__all__ = ["Base", "SpellMigrationRun"]
