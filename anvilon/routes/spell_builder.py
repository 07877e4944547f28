"""Spell builder page and its JSON API.

Page: /library/rules/character/books/magic/spell-builder
API:  .../api/validate (POST), .../api/report (POST), .../api/submit (POST, admin)
"""
from __future__ import annotations

from typing import Any, Dict, Optional

from flask import Blueprint, jsonify, render_template, request
from flask_babel import gettext as _
from flask_wtf.csrf import generate_csrf

from anvilon.services import spell_builder_service
from anvilon.supabase import get_client
from anvilon.utils.downloads import text_attachment
from anvilon.utils.identity import PermissionError, ensure_admin, get_access_token, get_current_user_email, is_admin_user
from anvilon.utils.logging import get_logger

LOG = get_logger("anvilon.spell_builder.routes")

BUILDER_PREFIX = "/library/rules/character/books/magic/spell-builder"

bp = Blueprint("spell_builder", __name__, url_prefix=BUILDER_PREFIX, template_folder="../templates")


def _error_messages() -> Dict[str, str]:
    return {
        "permission_denied": _("Требуются права администратора."),
        "invalid_json": _("Тело запроса должно быть JSON-объектом."),
        "validation_failed": _("Форма заполнена с ошибками."),
        "submit_failed": _("Не удалось записать заклинание."),
    }


def _json_error(code: str, status: int = 400, *, message: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
    payload: Dict[str, Any] = {"error": code}
    final = message or _error_messages().get(code)
    if final:
        payload["message"] = final
    if details is not None:
        payload["details"] = details
    return jsonify(payload), status


def _require_admin():
    try:
        ensure_admin()
    except PermissionError as exc:
        return _json_error("permission_denied", 403, message=str(exc))
    return True


def _json_body():
    body = request.get_json(silent=True)
    return body if isinstance(body, dict) else None


@bp.route("", methods=["GET"])
def builder_page():
    reference = spell_builder_service.load_reference_data()
    return render_template(
        "spell_builder/builder.html",
        title=_("Конструктор заклинаний"),
        reference=reference,
        can_submit=is_admin_user(),
        api_base=BUILDER_PREFIX + "/api",
        csrf_token_value=generate_csrf(),
        back={"href": "/library/rules/character/books/magic", "label": _("Книга магии")},
    )


@bp.route("/api/validate", methods=["POST"])
def api_validate():
    body = _json_body()
    if body is None:
        return _json_error("invalid_json")
    _state, payload = spell_builder_service.validate(body)
    return jsonify({"ok": payload.ok, "errors": payload.errors, "payload": payload.as_dict()})


@bp.route("/api/report", methods=["POST"])
def api_report():
    body = _json_body()
    if body is None:
        return _json_error("invalid_json")
    preview = spell_builder_service.preview_report(body, actor_email=get_current_user_email())
    return text_attachment(preview["text"], preview["filename"])


@bp.route("/api/submit", methods=["POST"])
def api_submit():
    auth = _require_admin()
    if auth is not True:
        return auth
    body = _json_body()
    if body is None:
        return _json_error("invalid_json")
    client = get_client().for_user(get_access_token())
    payload, result = spell_builder_service.submit(body, actor_email=get_current_user_email(), client=client)
    if result is None:
        return _json_error("validation_failed", 422, details={"errors": payload.errors})
    if not result.ok:
        LOG.error(
            "spell submission failed spell_id=%s step=%s status=%s", result.spell_id, result.failed_step, result.status
        )
        body_out = result.as_dict()
        body_out["error_code"] = "submit_failed"
        return jsonify(body_out), 502
    LOG.info("spell submitted spell_id=%s", result.spell_id)
    return jsonify(result.as_dict()), 201


def register_spell_builder(app: Any) -> None:
    if getattr(app, "_anvilon_spell_builder_bp", None):
        return
    app.register_blueprint(bp)
    setattr(app, "_anvilon_spell_builder_bp", bp)
    LOG.debug("spell builder blueprint registered")


__all__ = ["register_spell_builder", "BUILDER_PREFIX", "bp"]
