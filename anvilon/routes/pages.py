"""Server-rendered library pages (home, library sections, races, rules)."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from flask import Blueprint, render_template, request
from flask_babel import gettext as _

from anvilon.data import content as content_data
from anvilon.data import magic as magic_data
from anvilon.data import page_art as page_art_data
from anvilon.data import races as races_data
from anvilon.i18n import get_request_lang, pick_localized_text
from anvilon.services.race_detail_service import build_race_detail
from anvilon.supabase import SupabaseError, get_client
from anvilon.ui import prepare_sections
from anvilon.utils.logging import get_logger

LOG = get_logger("anvilon.pages")

bp = Blueprint("pages", __name__, template_folder="../templates")

RULES_PREFIX = "/library/rules/character/books"

# About-world tabs shown when the content tables have nothing published yet.
ABOUT_WORLD_FALLBACK = (
    ("intro", "Об Анвилоне", "About Anvilon"),
    ("magic", "Магия", "Magic"),
    ("technology", "Технологии", "Technology"),
    ("gods", "Божества", "Deities"),
    ("ancients", "Древние", "The Ancients"),
    ("continents", "Материки", "Continents"),
)


def _card(title: str, href: Optional[str] = None, art_url: str = "", subtitle: str = "") -> Dict[str, Any]:
    return {
        "title": title,
        "href": href,
        "art_url": art_url or "",
        "subtitle": subtitle or ("" if href else _("Скоро")),
        "enabled": bool(href),
    }


def _art(page: str, cl) -> str:
    return page_art_data.get_page_art_url(page, client=cl)


@bp.route("/", methods=["GET"])
def home():
    cl = get_client()
    cards = [
        _card(_("Выполнить вход"), "/enter", _art("Login", cl)),
        _card(_("Библиотека знаний"), "/library", _art("KnowledgeLibrary", cl)),
    ]
    return render_template("pages/cards.html", title=_("Анвилон"), cards=cards, back=None)


@bp.route("/library", methods=["GET"])
def library():
    cl = get_client()
    cards = [
        _card(_("Правила"), "/library/rules", _art("Rules", cl)),
        _card(_("О мире"), "/library/about-world", _art("World", cl)),
        _card(_("Жители Анвилона"), "/library/inhabitants", _art("Residents", cl)),
    ]
    return render_template(
        "pages/cards.html",
        title=_("Библиотека знаний"),
        cards=cards,
        back={"href": "/", "label": _("На главную")},
    )


@bp.route("/library/about-world", methods=["GET"])
def about_world():
    cl = get_client()
    lang = get_request_lang()
    sections = content_data.get_content_sections_for_entity("world", "about-world", client=cl)
    if not sections:
        sections = [
            {
                "id": f"fallback:{key}",
                "slug": key,
                "title": pick_localized_text(ru, en, lang),
                "blocks": [],
                "coming_soon": True,
            }
            for key, ru, en in ABOUT_WORLD_FALLBACK
        ]
    sections = prepare_sections(sections, cl.storage_public_url)
    keys = [s.get("slug") for s in sections]
    requested = request.args.get("tab")
    active = requested if requested in keys else keys[0]
    art = {name: _art(name, cl) for name in ("WorldMap", "Continents", "Islands", "Theory")}
    return render_template(
        "pages/about_world.html",
        title=_("О мире"),
        sections=sections,
        active=active,
        art=art,
        back={"href": "/library", "label": _("Библиотека")},
    )


@bp.route("/library/inhabitants", methods=["GET"])
def inhabitants():
    cl = get_client()
    cards = [
        _card(_("Расы"), "/library/inhabitants/races", _art("Races", cl)),
        _card(_("Народности"), None, _art("Nationalities", cl)),
    ]
    return render_template(
        "pages/cards.html",
        title=_("Жители Анвилона"),
        cards=cards,
        back={"href": "/library", "label": _("В библиотеку")},
    )


@bp.route("/library/inhabitants/races", methods=["GET"])
def races():
    error: Optional[str] = None
    rows: List[Dict[str, Any]] = []
    try:
        rows = races_data.get_races()
    except SupabaseError as exc:
        LOG.error("races list failed code=%s message=%s", exc.code, exc.message)
        error = exc.message
    return render_template(
        "pages/races.html",
        title=_("Расы"),
        races=rows,
        error=error,
        back={"href": "/library/inhabitants", "label": _("Жители Анвилона")},
    )


@bp.route("/library/inhabitants/races/<slug>", methods=["GET"])
def race_detail(slug: str):
    ctx = build_race_detail(
        slug,
        section=request.args.get("section"),
        about_tab=request.args.get("tab"),
    )
    status = 404 if ctx["state"] == "not_found" else 200
    race = ctx.get("race") or {}
    return (
        render_template(
            "pages/race_detail.html",
            title=race.get("name") or _("Раса"),
            ctx=ctx,
            lang=get_request_lang(),
            back={"href": "/library/inhabitants/races", "label": _("Расы")},
        ),
        status,
    )


@bp.route("/library/rules", methods=["GET"])
def rules():
    cl = get_client()
    cards = [
        _card(_("Персонаж"), "/library/rules/character", cl.storage_public_url("art", "page-art/CharacterPage.png")),
        _card(_("Внебоевые ситуации"), None, cl.storage_public_url("art", "page-art/NonBattleSutiationPage.jpg")),
        _card(_("Боевые ситуации"), None, cl.storage_public_url("art", "page-art/BattleSutiationPage.jpg")),
    ]
    intro = _(
        "Данное руководство познакомит вас с правилами и механиками игры. Оно содержит инструкции и "
        "информацию по ключевым моментам. Если описание заклинания или навыка противоречит руководству, "
        "частное важнее общего: в приоритете описание заклинания или навыка."
    )
    return render_template(
        "pages/cards.html",
        title=_("Правила"),
        intro=intro,
        cards=cards,
        back={"href": "/library", "label": _("Библиотека знаний")},
    )


@bp.route("/library/rules/character", methods=["GET"])
def rules_character():
    cl = get_client()
    cards = [
        _card(_("Все о персонаже"), None, _art("AboutCharacter", cl)),
        _card(_("Мастерства, навыки и заклинания"), RULES_PREFIX, _art("BookPage", cl)),
        _card(_("Оружие, броня и снаряжение"), None, _art("Equipment", cl)),
    ]
    return render_template(
        "pages/cards.html",
        title=_("Персонаж"),
        cards=cards,
        back={"href": "/library/rules", "label": _("Правила")},
    )


@bp.route(RULES_PREFIX, methods=["GET"])
def rules_books():
    cl = get_client()
    cards = [
        _card(_("Книга навыков"), f"{RULES_PREFIX}/skills", _art("SkillBook", cl)),
        _card(_("Книга магии"), f"{RULES_PREFIX}/magic", _art("SpellBook", cl)),
        _card(_("Трактат профессий"), None, _art("MasteryBook", cl)),
    ]
    return render_template(
        "pages/cards.html",
        title=_("Мастерства, навыки и заклинания"),
        cards=cards,
        back={"href": "/library/rules/character", "label": _("Персонаж")},
    )


def _with_art(cl, row: Dict[str, Any]) -> Dict[str, Any]:
    bucket, path = row.get("bucket"), row.get("art_path")
    out = dict(row)
    out["art_url"] = cl.storage_public_url(bucket, path) if bucket and path else ""
    return out


@bp.route(f"{RULES_PREFIX}/magic", methods=["GET"])
def magic():
    cl = get_client()
    schools = [_with_art(cl, s) for s in magic_data.get_magic_schools(client=cl)]
    paths = [_with_art(cl, p) for p in magic_data.get_magic_paths(client=cl)]
    for school in schools:
        school["paths"] = magic_data.paths_for_school(paths, school.get("id"))
    return render_template(
        "pages/magic.html",
        title=_("Книга магии"),
        schools=schools,
        builder_href=f"{RULES_PREFIX}/magic/spell-builder",
        back={"href": RULES_PREFIX, "label": _("Мастерства, навыки и заклинания")},
    )


@bp.route(f"{RULES_PREFIX}/skills", methods=["GET"])
def skills():
    return render_template(
        "pages/placeholder.html",
        title=_("Книга навыков"),
        back={"href": RULES_PREFIX, "label": _("Мастерства, навыки и заклинания")},
    )


def register_pages(app) -> None:
    if getattr(app, "_anvilon_pages_bp", None):
        return
    app.register_blueprint(bp)
    setattr(app, "_anvilon_pages_bp", bp)
    LOG.debug("pages blueprint registered")


__all__ = ["register_pages", "bp"]
