"""Catalog reference tables (`catalogs_book_group`, `catalogs_book`)."""
from __future__ import annotations

from collections import OrderedDict
from typing import Dict, List

from anvilon.data._common import log_remote_error, resolve_client, rows_of
from anvilon.supabase import SupabaseError
from anvilon.utils.logging import get_logger

LOG = get_logger("anvilon.data.catalogs")

RESOURCE_TYPE_GROUP = "resource_type"


def get_catalog_book_groups(client=None) -> List[dict]:
    try:
        res = resolve_client(client).table("catalogs_book_group").select("*").order("created_at").execute()
    except SupabaseError as exc:
        log_remote_error(LOG, "get_catalog_book_groups", exc)
        return []
    return rows_of(res.data)


def get_catalog_books(client=None) -> List[dict]:
    try:
        res = resolve_client(client).table("catalogs_book").select("*").order("created_at").execute()
    except SupabaseError as exc:
        log_remote_error(LOG, "get_catalog_books", exc)
        return []
    return rows_of(res.data)


def get_resource_types(client=None) -> List[dict]:
    """catalogs_book rows of group ``resource_type``, oldest first."""
    try:
        res = (
            resolve_client(client)
            .table("catalogs_book")
            .select("*")
            .eq("group", RESOURCE_TYPE_GROUP)
            .order("created_at")
            .execute()
        )
    except SupabaseError as exc:
        log_remote_error(LOG, "get_resource_types", exc)
        return []
    return rows_of(res.data)


def group_catalog_books(books: List[dict]) -> Dict[str, List[dict]]:
    grouped: "OrderedDict[str, List[dict]]" = OrderedDict()
    for book in books:
        key = str(book.get("group") or "")
        if not key:
            continue
        grouped.setdefault(key, []).append(book)
    return grouped


def catalog_label_map(books: List[dict]) -> Dict[str, str]:
    """id -> name for rows that carry an id, a group and a name."""
    labels: Dict[str, str] = {}
    for book in books:
        book_id = str(book.get("id") or "")
        name = str(book.get("name") or "")
        if book_id and book.get("group") and name:
            labels[book_id] = name
    return labels


__all__ = [
    "RESOURCE_TYPE_GROUP",
    "get_catalog_book_groups",
    "get_catalog_books",
    "get_resource_types",
    "group_catalog_books",
    "catalog_label_map",
]
