"""Resolve request input into one canonical mobile place URL."""

from __future__ import annotations

import logging
import re
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import parse_qs, quote, urlparse

import requests

from placecheck.core.config import Settings
from placecheck.core.errors import NeedsDisambiguation, ServiceMisconfigured, UpstreamError
from placecheck.extract.cascade import Cascade, ExtractionContext
from placecheck.extract.normalize import dedupe_key
from placecheck.extract.strategies import competitor_strategies
from placecheck.models import FetchedDocument, ResolvedPlace
from placecheck.vendors.local_search import LocalSearchError, local_search

logger = logging.getLogger(__name__)

CANONICAL_HOST = "m.place.naver.com"
PLACE_SEGMENTS = ("place", "restaurant", "cafe", "hairshop", "nailshop", "hospital", "accommodation")
SEARCH_URL = "https://m.place.naver.com/search?query={query}"

_SEGMENT_RE = re.compile(r"/(%s)/(\d+)" % "|".join(PLACE_SEGMENTS))
_ENTRY_RE = re.compile(r"/entry/place/(\d+)")


def extract_place_id(url: str) -> Optional[str]:
    parsed = urlparse(url or "")
    match = _ENTRY_RE.search(parsed.path) or _SEGMENT_RE.search(parsed.path)
    if match:
        return match.group(match.lastindex)
    for key in ("placeId", "placeid", "id"):
        values = parse_qs(parsed.query).get(key)
        if values and values[0].isdigit():
            return values[0]
    return None


def canonical_place_url(url: str) -> ResolvedPlace:
    """Rewrite any listing URL onto the mobile host without query or fragment.

    The category segment (``hairshop``, ``restaurant``...) is kept because the
    industry classifier reads it. Map links fall back to ``place``.
    """

    raw = (url or "").strip()
    if raw and "://" not in raw:
        raw = f"https://{raw}"
    parsed = urlparse(raw)
    segment_match = _SEGMENT_RE.search(parsed.path)
    place_id = extract_place_id(raw)

    if place_id:
        segment = segment_match.group(1) if segment_match and not _ENTRY_RE.search(parsed.path) else "place"
        return ResolvedPlace(
            place_url=f"https://{CANONICAL_HOST}/{segment}/{place_id}/home",
            place_id=place_id,
            confidence=1.0,
            resolved_from="place_url",
        )

    path = parsed.path or "/"
    logger.info("No place id found in %s; keeping its path on the canonical host", url)
    return ResolvedPlace(
        place_url=f"https://{CANONICAL_HOST}{path}",
        place_id=None,
        confidence=0.2,
        resolved_from="place_url",
    )


def _digits(value: Optional[str]) -> str:
    return re.sub(r"\D", "", value or "")


def _matches(item: Dict[str, Any], name: str, phone: Optional[str]) -> bool:
    title = dedupe_key(item.get("title") or "")
    wanted = dedupe_key(name)
    if not title or not (wanted in title or title in wanted):
        return False
    if phone and item.get("telephone"):
        return _digits(item["telephone"]).endswith(_digits(phone)[-8:])
    return True


def resolve_business(
    name: str,
    address: str,
    phone: Optional[str],
    *,
    settings: Settings,
    fetcher: Callable[[str], FetchedDocument],
    search=local_search,
) -> ResolvedPlace:
    """Resolve a name/address/phone triple through the local search service."""

    if not settings.local_search_configured:
        raise ServiceMisconfigured("Local search credentials (NAVER_CLIENT_ID/NAVER_CLIENT_SECRET) are not configured.")

    query = f"{name} {address}".strip()
    try:
        items = search(query, settings.naver_client_id, settings.naver_client_secret)
    except (requests.RequestException, LocalSearchError) as exc:
        raise UpstreamError(f"Local search failed: {exc}") from exc

    matches = [item for item in items if _matches(item, name, phone)]
    if len(matches) != 1:
        logger.info("biz_search for %r matched %d of %d results", query, len(matches), len(items))
        raise NeedsDisambiguation(
            "Could not identify a single place for the given business." if matches else "No matching place found.",
            candidates=matches or items,
        )

    match = matches[0]
    link_id = extract_place_id(match.get("link") or "")
    if link_id:
        resolved = canonical_place_url(match["link"])
        resolved.resolved_from = "biz_search"
        resolved.confidence = 0.9
        return resolved

    search_query = " ".join(part for part in (match.get("title"), match.get("roadAddress") or match.get("address")) if part)
    document = fetcher(SEARCH_URL.format(query=quote(search_query)))
    ctx = ExtractionContext(document, fetcher=fetcher)
    found = Cascade("resolve", competitor_strategies(), _unique_ids).run(ctx)
    if not found.items:
        raise NeedsDisambiguation("The matched business has no resolvable place listing.", candidates=[match])

    return ResolvedPlace(
        place_url=f"https://{CANONICAL_HOST}/place/{found.items[0]}/home",
        place_id=found.items[0],
        confidence=0.8,
        resolved_from="biz_search",
    )


def _unique_ids(items: Any) -> List[str]:
    out: List[str] = []
    for item in items or []:
        if item not in out:
            out.append(item)
    return out
