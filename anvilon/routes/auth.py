"""/enter: password login, registration and the account cabinet."""
from __future__ import annotations

from typing import Any, Optional

from flask import Blueprint, Response, flash, redirect, render_template, request, url_for
from flask_babel import gettext as _
from flask_wtf.csrf import generate_csrf

from anvilon.i18n import get_request_lang
from anvilon.services import auth_service
from anvilon.supabase import AuthError
from anvilon.utils.identity import clear_identity_session, get_access_token, set_identity_session
from anvilon.utils.logging import get_logger

LOG = get_logger("anvilon.auth_routes")

bp = Blueprint("auth", __name__, url_prefix="/enter", template_folder="../templates")

SAVED_LOGIN_COOKIE = "anvilon_saved_login"
SAVED_LOGIN_MAX_AGE = 60 * 60 * 24 * 365


def _error_message(code: Optional[str]) -> str:
    messages = {
        "required": _("Заполните все поля."),
        "invalid_email": _("Введите корректный e-mail."),
        "user_not_found": _("Пользователь с таким логином не найден."),
        "invalid_credentials": _("Неверный логин или пароль."),
        "invalid_grant": _("Неверный логин или пароль."),
        "email_not_confirmed": _("Подтвердите e-mail, чтобы войти."),
        "user_already_exists": _("Пользователь с таким e-mail уже зарегистрирован."),
        "weak_password": _("Пароль слишком простой."),
        "profile_failed": _("Не удалось сохранить профиль. Попробуйте ещё раз."),
        "auth_unavailable": _("Вход временно недоступен."),
        "network_error": _("Сервер авторизации недоступен. Попробуйте позже."),
    }
    return messages.get(code or "", _("Не удалось выполнить вход. Попробуйте ещё раз."))


def _remember_enabled(raw_value: Optional[str]) -> bool:
    if raw_value is None:
        return False
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _render_enter(*, mode: str = "login", identifier: str = "", email: str = "", username: str = "", status: int = 200):
    saved_login = request.cookies.get(SAVED_LOGIN_COOKIE, "")
    context = {
        "title": _("Вход"),
        "mode": mode if mode in ("login", "register") else "login",
        "identifier_value": identifier or saved_login,
        "email_value": email,
        "username_value": username,
        "remember": bool(saved_login) or not identifier,
        "csrf_token_value": generate_csrf(),
        "back": {"href": "/", "label": _("На главную")},
    }
    return render_template("auth/enter.html", **context), status


@bp.route("", methods=["GET"])
def enter_page():
    if get_access_token():
        return redirect(url_for("auth.account_page"))
    return _render_enter(mode=request.args.get("mode") or "login")


@bp.route("/login", methods=["POST"])
def login_submit() -> Any:
    identifier = request.form.get("identifier", "")
    password = request.form.get("password", "")
    remember = _remember_enabled(request.form.get("remember"))
    try:
        auth_session = auth_service.login(identifier, password)
    except AuthError as exc:
        LOG.info("login failed code=%s", exc.code)
        flash(_error_message(exc.code), "error")
        return _render_enter(mode="login", identifier=identifier, status=400)

    set_identity_session(
        user_id=auth_session.user.id,
        email=auth_session.user.email,
        access_token=auth_session.access_token,
    )
    response: Response = redirect(url_for("auth.account_page"))
    if remember:
        response.set_cookie(
            SAVED_LOGIN_COOKIE, identifier.strip(), max_age=SAVED_LOGIN_MAX_AGE, path="/", samesite="Lax"
        )
    else:
        response.delete_cookie(SAVED_LOGIN_COOKIE, path="/")
    return response


@bp.route("/register", methods=["POST"])
def register_submit() -> Any:
    email = request.form.get("email", "")
    username = request.form.get("username", "")
    password = request.form.get("password", "")
    try:
        auth_service.register(email, username, password)
    except AuthError as exc:
        LOG.info("registration failed code=%s", exc.code)
        flash(_error_message(exc.code), "error")
        return _render_enter(mode="register", email=email, username=username, status=400)
    flash(_("Аккаунт создан. Подтвердите e-mail и войдите."), "success")
    return redirect(url_for("auth.enter_page", mode="login"))


@bp.route("/account", methods=["GET"])
def account_page():
    lang = get_request_lang()
    account = auth_service.load_account(get_access_token(), lang)
    if account is None:
        clear_identity_session()
        return redirect(url_for("auth.enter_page"))
    return render_template(
        "auth/account.html",
        title=_("Личный кабинет"),
        account=account,
        csrf_token_value=generate_csrf(),
        back={"href": "/", "label": _("На главную")},
    )


@bp.route("/logout", methods=["POST"])
def logout_submit():
    clear_identity_session()
    flash(_("Вы вышли из аккаунта."), "info")
    return redirect(url_for("auth.enter_page"))


def register_auth(app: Any) -> None:
    if getattr(app, "_anvilon_auth_bp", None):
        return
    app.register_blueprint(bp)
    setattr(app, "_anvilon_auth_bp", bp)
    LOG.debug("auth blueprint registered")


__all__ = ["register_auth", "SAVED_LOGIN_COOKIE", "bp"]
