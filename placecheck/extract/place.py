"""Build a raw place profile from a fetched listing document."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Tuple
from urllib.parse import quote

from placecheck.extract.cascade import Cascade, CascadeAttempt, CascadeResult, ExtractionContext
from placecheck.extract.normalize import (
    REPRESENTATIVE_KEYWORD_LIMIT,
    infer_region,
    normalize_keywords,
    normalize_menus,
)
from placecheck.extract.strategies import (
    competitor_strategies,
    payload_chain,
    read_basic_fields,
    read_description,
    read_description_label,
    read_directions,
    read_directions_label,
    read_keywords,
    read_keywords_label,
    read_menus,
    read_menus_label,
    read_photo_count,
    read_photo_count_label,
    validate_basic_fields,
    validate_count,
    validate_text,
)
from placecheck.models import Competitor, FetchedDocument, PlaceProfile, Photos, Reviews

logger = logging.getLogger(__name__)

SEARCH_URL = "https://m.place.naver.com/search?query={query}"
PLACE_HOME_URL = "https://m.place.naver.com/place/{place_id}/home"
COMPETITOR_LIMIT = 5

Fetcher = Callable[[str], FetchedDocument]

KEYWORDS = Cascade("keywords", payload_chain(read_keywords, read_keywords_label), normalize_keywords)
MENUS = Cascade("menus", payload_chain(read_menus, read_menus_label), normalize_menus)
BASIC_FIELDS = Cascade("basic_fields", payload_chain(read_basic_fields), validate_basic_fields, empty=dict)
DESCRIPTION = Cascade(
    "description", payload_chain(read_description, read_description_label), validate_text, empty=lambda: None
)
DIRECTIONS = Cascade(
    "directions", payload_chain(read_directions, read_directions_label), validate_text, empty=lambda: None
)
PHOTO_COUNT = Cascade(
    "photo_count", payload_chain(read_photo_count, read_photo_count_label), validate_count, empty=lambda: None
)


def _run(cascade: Cascade, ctx: ExtractionContext) -> CascadeResult:
    """Run one signal; a failure in one signal never stops the others."""

    try:
        return cascade.run(ctx)
    except Exception as exc:  # noqa: BLE001
        logger.exception("Signal %s failed outside its strategies: %s", cascade.signal, exc)
        attempt = CascadeAttempt(cascade.signal, "runner", 0, "error", detail={"error": str(exc)})
        ctx.trail.append(attempt)
        return CascadeResult(cascade.signal, cascade.empty(), None, [attempt])


def _place_ids(value: Any, own_place_id: Optional[str], limit: int) -> List[str]:
    seen = set()
    out: List[str] = []
    for item in value or []:
        place_id = str(item)
        if not place_id.isdigit() or len(place_id) < 6 or place_id == own_place_id or place_id in seen:
            continue
        seen.add(place_id)
        out.append(place_id)
        if len(out) >= limit:
            break
    return out


def extract_place(
    document: FetchedDocument,
    place_url: str,
    *,
    place_id: Optional[str] = None,
    fetcher: Optional[Fetcher] = None,
    depth: str = "standard",
) -> Tuple[PlaceProfile, List[CascadeAttempt]]:
    """Run every signal cascade over ``document`` and assemble a raw profile.

    The profile is not normalized; see ``placecheck.etl.normalize``.
    """

    ctx = ExtractionContext(document, fetcher=fetcher)
    results: Dict[str, CascadeResult] = {}
    for cascade in (BASIC_FIELDS, KEYWORDS, MENUS, DESCRIPTION, DIRECTIONS, PHOTO_COUNT):
        results[cascade.signal] = _run(cascade, ctx)

    basics = results["basic_fields"].items or {}
    keywords = results["keywords"].items or []
    profile = PlaceProfile(
        place_url=place_url,
        name=basics.get("name") or "",
        place_id=place_id or basics.get("place_id"),
        category=basics.get("category"),
        address=basics.get("address"),
        road_address=basics.get("road_address"),
        phone=basics.get("phone"),
        description=results["description"].items,
        directions=results["directions"].items,
        amenities=basics.get("amenities"),
        tags=basics.get("tags"),
        keywords=keywords,
        keywords5=normalize_keywords(keywords, REPRESENTATIVE_KEYWORD_LIMIT),
        menus=results["menus"].items,
        reviews=Reviews(
            visitor_count=basics.get("visitor_count"),
            blog_count=basics.get("blog_count"),
            rating=basics.get("rating"),
        ),
        photos=Photos(count=results["photo_count"].items),
    )
    profile.provenance = {signal: result.strategy for signal, result in results.items() if result.strategy}

    if depth == "deep" and fetcher is not None:
        profile.competitors = scan_competitors(profile, fetcher, ctx.trail)

    return profile, ctx.trail


def competitor_query(profile: PlaceProfile) -> Optional[str]:
    region = infer_region(profile.address or profile.road_address or "")
    parts = [part for part in (region, profile.category) if part]
    return " ".join(parts) or None


def scan_competitors(
    profile: PlaceProfile,
    fetcher: Fetcher,
    trail: List[CascadeAttempt],
    *,
    limit: int = COMPETITOR_LIMIT,
) -> List[Competitor]:
    """Search nearby same-category places and read each one's representative keywords."""

    query = competitor_query(profile)
    if not query:
        logger.info("Skipping competitor scan for %s: no region or category", profile.place_url)
        return []

    try:
        search_document = fetcher(SEARCH_URL.format(query=quote(query)))
    except Exception as exc:  # noqa: BLE001
        logger.warning("Competitor search failed for %r: %s", query, exc)
        trail.append(CascadeAttempt("competitors", "search", 0, "error", detail={"error": str(exc)}))
        return []

    search_ctx = ExtractionContext(search_document, fetcher=fetcher)
    cascade = Cascade(
        "competitors",
        competitor_strategies(),
        lambda items: _place_ids(items, profile.place_id, limit),
    )
    found = _run(cascade, search_ctx)
    trail.extend(search_ctx.trail)

    competitors: List[Competitor] = []
    for competitor_id in found.items:
        competitor_url = PLACE_HOME_URL.format(place_id=competitor_id)
        keywords5: List[str] = []
        try:
            competitor_ctx = ExtractionContext(fetcher(competitor_url), fetcher=fetcher)
            result = _run(KEYWORDS, competitor_ctx)
            trail.extend(competitor_ctx.trail)
            keywords5 = normalize_keywords(result.items, REPRESENTATIVE_KEYWORD_LIMIT)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Competitor %s keyword read failed: %s", competitor_id, exc)
        competitors.append(Competitor(place_id=competitor_id, place_url=competitor_url, keywords5=keywords5))
    return competitors
