"""Shared post-extraction normalization for keyword and menu items."""

from __future__ import annotations

import re
from typing import Any, Iterable, List, Optional, Set

from placecheck.extract.candidates import (
    DURATION_KEYS,
    MAX_MENU_PRICE,
    MIN_MENU_PRICE,
    NAME_KEYS,
    NOTE_KEYS,
    PRICE_KEYS,
    as_number,
    as_string,
    first_value,
    is_good_keyword,
)
from placecheck.models import MenuItem

FULL_KEYWORD_LIMIT = 15
REPRESENTATIVE_KEYWORD_LIMIT = 5
MENU_LIMIT = 30

_PARKING_FEE_HINTS = ("주차", "분당", "초과", "최초", "요금")


def clean_keyword(raw: Any) -> Optional[str]:
    if not isinstance(raw, str):
        return None
    text = re.sub(r"\s+", " ", raw.replace("#", " ")).strip()
    if not text or not is_good_keyword(text):
        return None
    return text


def dedupe_key(text: str) -> str:
    return re.sub(r"\s+", "", text).casefold()


def normalize_keywords(items: Iterable[Any], limit: int = FULL_KEYWORD_LIMIT) -> List[str]:
    """Trim, bound, strip UI chrome and dedupe case/whitespace-insensitively."""

    out: List[str] = []
    seen: Set[str] = set()
    for raw in items or []:
        if isinstance(raw, dict):
            raw = first_value(raw, ("name", "title", "keyword"))
        text = clean_keyword(raw)
        if not text:
            continue
        key = dedupe_key(text)
        if key in seen:
            continue
        seen.add(key)
        out.append(text)
        if len(out) >= limit:
            break
    return out


def menu_from_record(record: Any) -> Optional[MenuItem]:
    if isinstance(record, MenuItem):
        return record
    if isinstance(record, str):
        name = as_string(record)
        return MenuItem(name=name) if name else None
    name = as_string(first_value(record, NAME_KEYS))
    if not name:
        return None
    return MenuItem(
        name=re.sub(r"\s+", " ", name),
        price=as_number(first_value(record, PRICE_KEYS)),
        duration_min=as_number(first_value(record, DURATION_KEYS)),
        note=as_string(first_value(record, NOTE_KEYS)),
    )


def looks_like_parking_fee(name: str) -> bool:
    stripped = name.strip()
    if stripped.isdigit():
        return True
    return any(hint in stripped for hint in _PARKING_FEE_HINTS)


def normalize_menus(items: Iterable[Any], limit: int = MENU_LIMIT) -> List[MenuItem]:
    out: List[MenuItem] = []
    seen: Set[str] = set()
    for raw in items or []:
        item = menu_from_record(raw)
        if item is None:
            continue
        if not re.search(r"[가-힣A-Za-z]", item.name) or looks_like_parking_fee(item.name):
            continue
        if item.price is not None and not (MIN_MENU_PRICE <= item.price <= MAX_MENU_PRICE):
            continue
        key = f"{dedupe_key(item.name)}:{item.price if item.price is not None else 'na'}"
        if key in seen:
            continue
        seen.add(key)
        out.append(item)
        if len(out) >= limit:
            break
    return out


_REGION_RE = re.compile(r"([가-힣]+구|[가-힣]+동|[가-힣]+역)")


def infer_region(address: Optional[str]) -> str:
    """First district/neighbourhood/station token of an address, or ``""``."""

    match = _REGION_RE.search(address or "")
    return match.group(1) if match else ""
