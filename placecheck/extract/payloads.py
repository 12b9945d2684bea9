"""Helpers for reading embedded payloads and text out of rendered documents."""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, Iterable, List, Optional, Sequence

from bs4 import BeautifulSoup

from placecheck.extract.candidates import MAX_DEPTH, as_number, as_string

logger = logging.getLogger(__name__)

DEEP_FIND_DEPTH = 12
_STATE_HINT_RE = re.compile(r"__APOLLO_STATE__|__PLACE_STATE__|keywordList|representativeKeyword|대표키워드", re.IGNORECASE)


def parse_html(html: str) -> BeautifulSoup:
    return BeautifulSoup(html or "", "html.parser")


def safe_json_loads(text: str) -> Any:
    try:
        return json.loads(text)
    except (TypeError, ValueError):
        return None


def first_json_block(text: str) -> Optional[str]:
    """Return the first balanced ``{...}`` or ``[...]`` block in ``text``, string-literal aware."""

    starts = [index for index in (text.find("{"), text.find("[")) if index >= 0]
    if not starts:
        return None
    start = min(starts)
    opener = text[start]
    closer = "}" if opener == "{" else "]"
    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == opener:
            depth += 1
        elif char == closer:
            depth -= 1
            if depth == 0:
                return text[start : index + 1]
    return None


def embedded_payloads(html: str) -> List[Any]:
    """Parse every structured payload embedded in the document.

    Order: Next.js data (and its dehydrated query results), ld+json blocks,
    then inline state scripts that mention keyword hints.
    """

    soup = parse_html(html)
    payloads: List[Any] = []

    next_data = soup.find("script", id="__NEXT_DATA__")
    if next_data is not None:
        parsed = safe_json_loads(next_data.get_text())
        if parsed is not None:
            queries = (
                (((parsed.get("props") or {}).get("pageProps") or {}).get("dehydratedState") or {}).get("queries")
                if isinstance(parsed, dict)
                else None
            )
            if isinstance(queries, list):
                for query in queries:
                    data = ((query or {}).get("state") or {}).get("data") if isinstance(query, dict) else None
                    if data:
                        payloads.append(data)
            payloads.append(parsed)

    for script in soup.find_all("script", attrs={"type": "application/ld+json"}):
        parsed = safe_json_loads(script.get_text())
        if parsed is not None:
            payloads.append(parsed)

    inline_budget = 8
    for script in soup.find_all("script"):
        if inline_budget <= 0:
            break
        if script.get("id") == "__NEXT_DATA__" or script.get("type") == "application/ld+json":
            continue
        body = script.get_text() or ""
        if not _STATE_HINT_RE.search(body):
            continue
        inline_budget -= 1
        block = first_json_block(body)
        parsed = safe_json_loads(block) if block else None
        if parsed is not None:
            payloads.append(parsed)

    return payloads


def meta_content(soup: BeautifulSoup, *, prop: Optional[str] = None, name: Optional[str] = None) -> Optional[str]:
    attrs = {"property": prop} if prop else {"name": name}
    tag = soup.find("meta", attrs=attrs)
    if tag is None:
        return None
    return as_string(tag.get("content"))


def iframe_urls(html: str) -> List[str]:
    soup = parse_html(html)
    urls = []
    for frame in soup.find_all("iframe"):
        src = as_string(frame.get("src"))
        if src and src.startswith("http"):
            urls.append(src)
    return urls


def visible_text(html: str) -> str:
    soup = parse_html(html)
    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()
    return soup.get_text("\n", strip=True)


def text_after_label(text: str, label: str, span: int = 400) -> Optional[str]:
    index = (text or "").find(label)
    if index < 0:
        return None
    return text[index + len(label) : index + len(label) + span]


# ---------- Deep key lookup ----------


def deep_find(value: Any, key: str, max_depth: int = DEEP_FIND_DEPTH) -> Any:
    """Depth-first search for the first occurrence of ``key`` in nested maps/lists."""

    stack = [(value, 0)]
    while stack:
        node, depth = stack.pop()
        if depth > max_depth:
            continue
        if isinstance(node, dict):
            if key in node and node[key] is not None:
                return node[key]
            children = list(node.values())
        elif isinstance(node, list):
            children = node
        else:
            continue
        for child in reversed(children):
            if isinstance(child, (dict, list)):
                stack.append((child, depth + 1))
    return None


def deep_find_any(payloads: Iterable[Any], keys: Sequence[str]) -> Any:
    payloads = list(payloads)
    for key in keys:
        for payload in payloads:
            found = deep_find(payload, key)
            if found is not None:
                return found
    return None


def deep_find_string(payloads: Iterable[Any], keys: Sequence[str]) -> Optional[str]:
    payloads = list(payloads)
    for key in keys:
        for payload in payloads:
            text = as_string(deep_find(payload, key))
            if text:
                return text
    return None


def deep_find_number(payloads: Iterable[Any], keys: Sequence[str]) -> Optional[float]:
    payloads = list(payloads)
    for key in keys:
        for payload in payloads:
            number = as_number(deep_find(payload, key))
            if number is not None:
                return number
    return None


def longest_list_under(payloads: Iterable[Any], keys: Sequence[str]) -> int:
    """Largest list length found under any of ``keys`` (lists or ``{items: [...]}`` wrappers)."""

    best = 0
    for payload in payloads:
        for key in keys:
            found = deep_find(payload, key, max_depth=MAX_DEPTH)
            if isinstance(found, dict):
                found = found.get("items") or found.get("list") or found.get("elements")
            if isinstance(found, list):
                best = max(best, len(found))
    return best


def items_under(payloads: Iterable[Any], keys: Sequence[str]) -> Dict[str, Any]:
    """Map each key to the first value found for it, unwrapping ``{items: [...]}`` containers."""

    payloads = list(payloads)
    found: Dict[str, Any] = {}
    for key in keys:
        value = deep_find_any(payloads, [key])
        if isinstance(value, dict):
            value = value.get("items") or value.get("list") or value.get("keywords") or value.get("tags") or value
        if value is not None:
            found[key] = value
    return found
