"""Compile gettext catalogs (.po -> .mo) with polib.

Flask-Babel only reads compiled ``messages.mo`` files. The repo keeps the
``.po`` sources; ``ensure_compiled`` rebuilds any catalog whose ``.mo`` is
missing or older than its ``.po``.
"""
from __future__ import annotations

from pathlib import Path
from typing import List

import polib

from anvilon.utils.logging import get_logger

LOG = get_logger("anvilon.i18n.catalogs")


def iter_po_files(root: Path) -> List[Path]:
    return sorted(root.glob("*/LC_MESSAGES/messages.po"))


def untranslated(po_path: Path) -> List[str]:
    po = polib.pofile(str(po_path))
    return [entry.msgid for entry in po if entry.msgid and not entry.obsolete and not entry.translated()]


def compile_catalog(po_path: Path) -> Path:
    mo_path = po_path.with_suffix(".mo")
    po = polib.pofile(str(po_path))
    po.save_as_mofile(str(mo_path))
    LOG.info("compiled %s (%d entries, %d%% translated)", mo_path, len(po), po.percent_translated())
    return mo_path


def _stale(po_path: Path) -> bool:
    mo_path = po_path.with_suffix(".mo")
    return not mo_path.exists() or mo_path.stat().st_mtime < po_path.stat().st_mtime


def ensure_compiled(root: Path) -> List[Path]:
    """Compile stale catalogs under ``root``; unwritable trees are logged and skipped."""
    compiled: List[Path] = []
    for po_path in iter_po_files(root):
        if not _stale(po_path):
            continue
        try:
            compiled.append(compile_catalog(po_path))
        except OSError as exc:
            LOG.warning("could not compile %s: %s", po_path, exc)
    return compiled


__all__ = ["iter_po_files", "untranslated", "compile_catalog", "ensure_compiled"]
