"""Great houses of the high elves and their council members.

Both tables are linked by the ``house`` key; council members are sorted by
``number`` inside each house.
"""
from __future__ import annotations

from collections import defaultdict
from typing import Any, Dict, List

from anvilon.data._common import parse_tags, resolve_client, rows_of

HOUSE_COLUMNS = "id, created_at, house, name_house, bucket, art_path, description, bonus_art_path, bonus, tradition"
COUNCIL_COLUMNS = (
    "id, created_at, bucket, art_path, house, number, name, description, character, "
    "policy_direction_tags, allies_tags"
)


def _number(value: Any) -> float:
    return value if isinstance(value, (int, float)) and not isinstance(value, bool) else 0


def get_great_houses(client=None) -> List[Dict[str, Any]]:
    cl = resolve_client(client)
    houses = rows_of(cl.table("great_houses").select(HOUSE_COLUMNS).order("created_at").execute().data)
    council = rows_of(cl.table("council").select(COUNCIL_COLUMNS).order("number").execute().data)

    by_house: Dict[str, List[Dict[str, Any]]] = defaultdict(list)
    for member in council:
        key = str(member.get("house") or "")
        if not key:
            continue
        item = dict(member)
        item["art_url"] = cl.storage_public_url(member.get("bucket"), member.get("art_path"))
        item["policy_direction_tags_list"] = parse_tags(member.get("policy_direction_tags"))
        item["allies_tags_list"] = parse_tags(member.get("allies_tags"))
        by_house[key].append(item)
    for members in by_house.values():
        members.sort(key=lambda m: _number(m.get("number")))

    out: List[Dict[str, Any]] = []
    for house in houses:
        key = str(house.get("house") or "")
        item = dict(house)
        item["art_url"] = cl.storage_public_url(house.get("bucket"), house.get("art_path"))
        item["bonus_art_url"] = cl.storage_public_url(house.get("bucket"), house.get("bonus_art_path"))
        item["council"] = list(by_house.get(key, [])) if key else []
        out.append(item)
    return out


__all__ = ["get_great_houses"]
