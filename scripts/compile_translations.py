#!/usr/bin/env python3
"""Compile Anvilon gettext catalogs and report untranslated messages."""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

from anvilon.i18n.catalogs import compile_catalog, iter_po_files, untranslated


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--root",
        type=Path,
        default=Path("anvilon/translations"),
        help="Directory holding <lang>/LC_MESSAGES/messages.po",
    )
    parser.add_argument("--strict", action="store_true", help="Exit non-zero when a catalog has untranslated entries")
    args = parser.parse_args()

    if not args.root.exists():
        print(f"Translations root {args.root} not found", file=sys.stderr)
        sys.exit(1)

    missing_total = 0
    for po_path in iter_po_files(args.root):
        missing = untranslated(po_path)
        missing_total += len(missing)
        for msgid in missing:
            print(f"{po_path}: untranslated: {msgid}", file=sys.stderr)
        print(compile_catalog(po_path))

    if args.strict and missing_total:
        sys.exit(2)


if __name__ == "__main__":
    main()
