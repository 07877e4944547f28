"""Render-ready content blocks.

Blocks come from ``content_blocks`` (or the legacy race_info conversion) with
free-form payloads. This module turns them into flat dicts the templates can
print without further checks. Unknown block types and blocks with nothing to
show are dropped.

Supported types: paragraph, heading, chips, list, kv_list, quote, image,
gallery.
"""
from __future__ import annotations

from typing import Any, Callable, Dict, List, Mapping, Optional

ImageResolver = Callable[[Optional[str], Optional[str]], str]


def _text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def _image_src(item: Mapping[str, Any], resolve: ImageResolver) -> str:
    src = _text(item.get("src"))
    if src:
        return src
    bucket, path = _text(item.get("bucket")), _text(item.get("path"))
    if bucket and path:
        return resolve(bucket, path)
    return ""


def _image(item: Mapping[str, Any], resolve: ImageResolver) -> Optional[Dict[str, str]]:
    src = _image_src(item, resolve)
    if not src:
        return None
    caption = _text(item.get("caption"))
    return {"src": src, "alt": _text(item.get("alt")) or caption or "image", "caption": caption}


def _kv_item(item: Any) -> Optional[Dict[str, str]]:
    if not isinstance(item, Mapping):
        return None
    left = _text(item.get("name") or item.get("key") or item.get("left"))
    right = _text(item.get("meaning") or item.get("value") or item.get("right"))
    if not left and not right:
        return None
    return {"left": left, "right": right}


def prepare_block(block: Mapping[str, Any], resolve: ImageResolver) -> Optional[Dict[str, Any]]:
    kind = block.get("type")
    p = block.get("payload") or {}
    if not isinstance(p, Mapping):
        p = {}
    out: Dict[str, Any] = {"id": block.get("id"), "type": kind}

    if kind == "paragraph":
        text = "" if p.get("text") is None else str(p.get("text"))
        if not text.strip():
            return None
        out["text"] = text
    elif kind == "heading":
        text = _text(p.get("text"))
        if not text:
            return None
        try:
            level = int(p.get("level") or 2)
        except (TypeError, ValueError):
            level = 2
        out.update(text=text, level=min(max(level, 2), 4))
    elif kind in ("chips", "list"):
        items = [_text(x) for x in p.get("items") or [] if _text(x)] if isinstance(p.get("items"), list) else []
        if not items:
            return None
        out.update(items=items, title=_text(p.get("title")))
    elif kind == "kv_list":
        raw = p.get("items") if isinstance(p.get("items"), list) else []
        items = [kv for kv in (_kv_item(i) for i in raw) if kv]
        if not items:
            return None
        out.update(items=items, title=_text(p.get("title")))
    elif kind == "quote":
        text = _text(p.get("text"))
        if not text:
            return None
        out.update(text=text, author=_text(p.get("author")))
    elif kind == "image":
        image = _image(p, resolve)
        if image is None:
            return None
        out.update(image)
    elif kind == "gallery":
        raw = p.get("images") if isinstance(p.get("images"), list) else []
        images = [img for img in (_image(i, resolve) for i in raw if isinstance(i, Mapping)) if img]
        if not images:
            return None
        out.update(images=images, variant="carousel" if p.get("variant") == "carousel" else "grid")
    else:
        return None
    return out


def prepare_sections(sections: List[Mapping[str, Any]], resolve: ImageResolver) -> List[Dict[str, Any]]:
    """Copy of ``sections`` whose ``blocks`` are render-ready."""
    out: List[Dict[str, Any]] = []
    for section in sections:
        item = dict(section)
        blocks = [prepare_block(b, resolve) for b in section.get("blocks") or []]
        item["blocks"] = [b for b in blocks if b]
        out.append(item)
    return out


__all__ = ["prepare_block", "prepare_sections"]
