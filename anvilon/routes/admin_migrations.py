"""Admin views over the spell migration run log.

Page: /admin/spell-migrations/
API:  /admin/spell-migrations/api/runs (GET)
Download: /admin/spell-migrations/<id>/report (GET)
"""
from __future__ import annotations

from typing import Any, Dict, Optional

from flask import Blueprint, jsonify, render_template, request
from flask_babel import gettext as _

from anvilon.migration import report_filename
from anvilon.services import migration_runs_service
from anvilon.utils.downloads import text_attachment
from anvilon.utils.identity import PermissionError, ensure_admin
from anvilon.utils.logging import get_logger

LOG = get_logger("anvilon.admin_migrations")

bp = Blueprint("admin_migrations", __name__, url_prefix="/admin/spell-migrations", template_folder="../templates")


def _json_error(code: str, status: int = 400, *, message: Optional[str] = None):
    payload: Dict[str, Any] = {"error": code}
    final = message or {
        "permission_denied": _("Требуются права администратора."),
        "run_not_found": _("Запись не найдена."),
    }.get(code)
    if final:
        payload["message"] = final
    return jsonify(payload), status


def _require_admin():
    try:
        ensure_admin()
    except PermissionError as exc:
        return _json_error("permission_denied", 403, message=str(exc))
    return True


def _limit_arg() -> int:
    try:
        return int(request.args.get("limit", 50))
    except (TypeError, ValueError):
        return 50


@bp.route("/", methods=["GET"])
def runs_page():
    auth = _require_admin()
    if auth is not True:
        return auth
    return render_template(
        "admin/migration_runs.html",
        title=_("Журнал миграций заклинаний"),
        runs=migration_runs_service.recent_runs(_limit_arg()),
        back={"href": "/library/rules/character/books/magic/spell-builder", "label": _("Конструктор заклинаний")},
    )


@bp.route("/api/runs", methods=["GET"])
def api_runs():
    auth = _require_admin()
    if auth is not True:
        return auth
    return jsonify({"runs": migration_runs_service.recent_runs(_limit_arg())})


@bp.route("/<int:run_id>/report", methods=["GET"])
def download_report(run_id: int):
    auth = _require_admin()
    if auth is not True:
        return auth
    run = migration_runs_service.get_run(run_id)
    if run is None:
        return _json_error("run_not_found", 404)
    filename = report_filename(run.spell_name, run.created_at)
    return text_attachment(run.report_text or "", filename)


def register_admin_migrations(app: Any) -> None:
    if getattr(app, "_anvilon_admin_migrations_bp", None):
        return
    app.register_blueprint(bp)
    setattr(app, "_anvilon_admin_migrations_bp", bp)
    LOG.debug("admin migrations blueprint registered")


__all__ = ["register_admin_migrations", "bp"]
