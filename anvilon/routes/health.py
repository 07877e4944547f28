"""Lightweight health probe endpoint.

Exposes /healthz returning a fast 200 for container / LB health checks.
"""
from __future__ import annotations

from typing import Any

from flask import Blueprint, jsonify
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from anvilon import config as app_config
from anvilon.db import app_session
from anvilon.utils.logging import get_logger

LOG = get_logger("anvilon.health")

bp = Blueprint("health", __name__)


@bp.route("/healthz", methods=["GET"])  # simple, cache-friendly
def healthz():
    db_ok = True
    try:
        with app_session() as s:
            s.execute(text("SELECT 1"))
    except (SQLAlchemyError, RuntimeError) as exc:
        db_ok = False
        LOG.debug("Health DB probe failed: %s", exc)
    runtime = app_config.summarize_runtime_config()
    status_code = 200 if db_ok else 500
    return (
        jsonify(
            {
                "status": "ok" if db_ok else "degraded",
                "db": db_ok,
                "env": runtime["env"],
                "mock_client": runtime["mock_client"],
                "supabase_configured": runtime["supabase_configured"],
                "version": app_config.APP_VERSION,
            }
        ),
        status_code,
    )


def register_health(app: Any) -> None:
    if getattr(app, "_health_bp", None):  # idempotent
        return
    app.register_blueprint(bp)
    setattr(app, "_health_bp", bp)
    LOG.debug("health blueprint registered")


__all__ = ["register_health"]
