"""Public URLs for hosted storage objects.

DB conventions are "bucket" + "path" (path inside the bucket). Editors
sometimes paste leading slashes, bucket-prefixed paths (e.g.
"art/UI_UX/x.png" with bucket="art") or a full URL; all of those resolve to
the same public URL instead of a silent 404.
"""
from __future__ import annotations

import re
from typing import Any, Optional

from anvilon import config as app_config

_ABSOLUTE_URL = re.compile(r"^https?://", re.IGNORECASE)


def _clean(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def get_public_storage_url(bucket: Optional[str], path: Optional[str], base_url: Optional[str] = None) -> str:
    base = _clean(base_url if base_url is not None else app_config.supabase_url())
    b = _clean(bucket)
    p = _clean(path)

    if not base or not b or not p:
        return ""

    if _ABSOLUTE_URL.match(p):
        return p

    p = p.lstrip("/")

    bucket_prefix = f"{b}/"
    if p.startswith(bucket_prefix):
        p = p[len(bucket_prefix):]

    return f"{base.rstrip('/')}/storage/v1/object/public/{b}/{p}"


__all__ = ["get_public_storage_url"]
