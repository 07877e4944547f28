from __future__ import annotations

import pytest

from anvilon.ui import prepare_block, prepare_sections


def resolve(bucket, path):
    return f"https://cdn.test/{bucket}/{path}"


def test_paragraph_keeps_text_and_drops_blank():
    assert prepare_block({"id": 1, "type": "paragraph", "payload": {"text": "Текст\nещё"}}, resolve) == {
        "id": 1,
        "type": "paragraph",
        "text": "Текст\nещё",
    }
    assert prepare_block({"type": "paragraph", "payload": {"text": "  "}}, resolve) is None


@pytest.mark.parametrize("level,expected", [(1, 2), (3, 3), (9, 4), ("x", 2), (None, 2)])
def test_heading_level_clamped(level, expected):
    block = prepare_block({"type": "heading", "payload": {"text": "Заголовок", "level": level}}, resolve)
    assert block["level"] == expected


def test_chips_and_kv_list():
    chips = prepare_block({"type": "chips", "payload": {"items": ["a", " ", None, "b"]}}, resolve)
    assert chips["items"] == ["a", "b"]
    assert prepare_block({"type": "list", "payload": {"items": "a,b"}}, resolve) is None

    kv = prepare_block(
        {"type": "kv_list", "payload": {"title": "Имена", "items": [{"name": "Ар", "meaning": "свет"}, {"key": "Ве"}, {}, "x"]}},
        resolve,
    )
    assert kv["items"] == [{"left": "Ар", "right": "свет"}, {"left": "Ве", "right": ""}]
    assert kv["title"] == "Имена"


def test_quote():
    quote = prepare_block({"type": "quote", "payload": {"text": "Слово", "author": " Мудрец "}}, resolve)
    assert quote["author"] == "Мудрец"


def test_image_sources():
    direct = prepare_block({"type": "image", "payload": {"src": "https://x/y.png", "caption": "Карта"}}, resolve)
    assert direct["src"] == "https://x/y.png"
    assert direct["alt"] == "Карта"
    stored = prepare_block({"type": "image", "payload": {"bucket": "art", "path": "m.png"}}, resolve)
    assert stored["src"] == "https://cdn.test/art/m.png"
    assert stored["alt"] == "image"
    assert prepare_block({"type": "image", "payload": {"bucket": "art"}}, resolve) is None


def test_gallery():
    gallery = prepare_block(
        {"type": "gallery", "payload": {"variant": "carousel", "images": [{"src": "a"}, {"caption": "пусто"}, "x"]}},
        resolve,
    )
    assert gallery["variant"] == "carousel"
    assert [img["src"] for img in gallery["images"]] == ["a"]
    other = prepare_block({"type": "gallery", "payload": {"variant": "wall", "images": [{"src": "a"}]}}, resolve)
    assert other["variant"] == "grid"


def test_unknown_and_broken_payloads():
    assert prepare_block({"type": "video", "payload": {"src": "a"}}, resolve) is None
    assert prepare_block({"type": "paragraph", "payload": "text"}, resolve) is None


def test_prepare_sections_filters_blocks():
    sections = [
        {"slug": "desc", "blocks": [{"type": "paragraph", "payload": {"text": "a"}}, {"type": "bogus"}]},
        {"slug": "empty"},
    ]
    out = prepare_sections(sections, resolve)
    assert [len(s["blocks"]) for s in out] == [1, 0]
    assert sections[0]["blocks"][1] == {"type": "bogus"}
