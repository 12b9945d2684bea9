"""Extraction strategies for every listing signal.

Each signal has up to four independent strategies, tried in this order:

* ``embedded`` reads payloads embedded in the main document,
* ``frames`` fetches the frames the document references and repeats the embedded read on each,
* ``network`` reads JSON bodies observed while the document was rendered,
* ``label_text`` scans the visible text next to a fixed label.
"""

from __future__ import annotations

import json
import re
from typing import Any, Callable, Dict, List, Optional, Sequence

from placecheck.extract.candidates import (
    MIN_SELECT_SCORE,
    as_number,
    as_string,
    collect_record_lists,
    collect_string_lists,
    score_keyword_candidate,
    score_record_candidate,
    select_best,
)
from placecheck.extract.cascade import ExtractionContext, Strategy, StrategyResult
from placecheck.extract.payloads import (
    deep_find_any,
    deep_find_number,
    deep_find_string,
    items_under,
    longest_list_under,
    meta_content,
    text_after_label,
)

Reader = Callable[[List[Any], ExtractionContext], StrategyResult]
TextReader = Callable[[ExtractionContext], StrategyResult]

KEYWORD_KEYS = ("representativeKeywords", "representativeKeyword", "keywordList")
TAG_KEYS = ("tags", "hashTags", "themeTags", "serviceTags")
AMENITY_KEYS = ("facilities", "amenities", "conveniences")
NAME_KEYS = ("placeName", "bizName", "name", "title")
CATEGORY_KEYS = ("categoryName", "category", "bizCategory", "categoryLabel")
ADDRESS_KEYS = ("jibunAddress", "address", "addr")
ROAD_ADDRESS_KEYS = ("roadAddress", "roadAddr", "newAddress")
PHONE_KEYS = ("phone", "tel", "virtualPhone", "phoneNumber")
PLACE_ID_KEYS = ("placeId", "businessId")
VISITOR_KEYS = ("visitorReviewCount", "visitorReviews", "reviewCount", "userReviewCount")
BLOG_KEYS = ("blogReviewCount", "blogReviews")
RATING_KEYS = ("rating", "averageRating", "starRating")
DESCRIPTION_KEYS = ("intro", "introduction", "bizIntro", "placeIntro", "homeDescription", "description", "summary", "desc")
DIRECTIONS_KEYS = ("directions", "wayToCome", "wayDescription", "roadDescription", "direction")
PHOTO_COUNT_KEYS = ("photoCount", "imageCount", "totalPhotoCount", "totalImages")
PHOTO_LIST_KEYS = ("images", "photos", "imageList", "photoList")

MENU_HINTS = ("커트", "컷", "펌", "염색", "클리닉", "네일", "젤", "코스", "세트", "정식", "라떼", "아메리카노", "진료", "검진")

USELESS_TITLES = frozenset({"네이버 플레이스", "Naver Place"})
_REVIEW_LINE_RE = re.compile(r"방문자\s*리뷰|블로그\s*리뷰|리뷰\s*\d+")
_MENU_LINE_RE = re.compile(r"^(?P<name>[^\n\d][^\n]{0,40}?)\s*(?P<price>\d{1,3}(?:,\d{3})+|\d{4,7})\s*원")
_PHOTO_COUNT_RES = (re.compile(r"사진\s*([0-9,]{1,7})"), re.compile(r"(?:포토|이미지)\s*([0-9,]{1,7})"))
_PLACE_ID_RES = (
    re.compile(r'"placeId"\s*:\s*"?(\d{6,})'),
    re.compile(r'"id"\s*:\s*"(\d{6,})"'),
    re.compile(r"/(?:place|hairshop|restaurant|cafe|nailshop|hospital|accommodation)/(\d{6,})"),
)
MAX_PLACE_IDS = 80
_LABEL_STOPS = ("찾아가는길", "오시는길", "소개", "대표키워드", "편의", "정보 수정", "리뷰", "사진", "메뉴", "가격")


# ---------- Strategy shapes ----------


class EmbeddedStrategy(Strategy):
    name = "embedded"

    def __init__(self, reader: Reader) -> None:
        self.reader = reader

    def attempt(self, ctx: ExtractionContext) -> StrategyResult:
        return self.reader(ctx.payloads, ctx)


class FrameStrategy(Strategy):
    """Repeat the embedded read on every frame document; the first non-empty frame wins."""

    name = "frames"

    def __init__(self, reader: Reader) -> None:
        self.reader = reader

    def attempt(self, ctx: ExtractionContext) -> StrategyResult:
        frames = ctx.frame_documents()
        debug: Dict[str, Any] = {"frames": len(frames)}
        if ctx.frame_errors:
            debug["frameErrors"] = ctx.frame_errors
        for url, document in frames:
            child = ctx.for_document(document)
            result = self.reader(child.payloads, child)
            if result.items:
                result.debug.update(debug, frameUrl=url)
                return result
        return StrategyResult(items=[], debug=debug)


class NetworkStrategy(Strategy):
    name = "network"

    def __init__(self, reader: Reader) -> None:
        self.reader = reader

    def attempt(self, ctx: ExtractionContext) -> StrategyResult:
        payloads = ctx.network_payloads
        result = self.reader(payloads, ctx)
        result.debug.setdefault("observed", len(payloads))
        return result


class LabelTextStrategy(Strategy):
    name = "label_text"

    def __init__(self, reader: TextReader) -> None:
        self.reader = reader

    def attempt(self, ctx: ExtractionContext) -> StrategyResult:
        return self.reader(ctx)


def payload_chain(reader: Reader, text_reader: Optional[TextReader] = None) -> List[Strategy]:
    chain: List[Strategy] = [EmbeddedStrategy(reader), FrameStrategy(reader), NetworkStrategy(reader)]
    if text_reader is not None:
        chain.append(LabelTextStrategy(text_reader))
    return chain


def _label_section(text: str, labels: Sequence[str], span: int = 400) -> Optional[str]:
    for label in labels:
        section = text_after_label(text, label, span)
        if section is None:
            continue
        cut = len(section)
        for stop in _LABEL_STOPS:
            index = section.find(stop, 1)
            if 0 < index < cut:
                cut = index
        section = section[:cut].strip(" \n:")
        if section:
            return section
    return None


# ---------- Keywords ----------


def read_keywords(payloads: List[Any], ctx: ExtractionContext) -> StrategyResult:
    dedicated = items_under(payloads, KEYWORD_KEYS)
    for key in KEYWORD_KEYS:
        value = dedicated.get(key)
        if isinstance(value, list) and value:
            return StrategyResult(items=value, debug={"source": key})

    candidates = []
    for index, payload in enumerate(payloads):
        candidates.extend(collect_string_lists(payload, source=f"payload[{index}]"))
    best = select_best(candidates, score_keyword_candidate)
    if best is None:
        return StrategyResult(items=[], debug={"candidates": 0})
    debug = {"source": best.source, "score": best.score, "candidates": len(candidates)}
    if best.score < MIN_SELECT_SCORE:
        debug["belowThreshold"] = True
    return StrategyResult(items=best.items, debug=debug)


def read_keywords_label(ctx: ExtractionContext) -> StrategyResult:
    section = _label_section(ctx.text, ("대표키워드",), span=200)
    if not section:
        return StrategyResult(items=[], debug={"label": False})
    tokens = [token for token in re.split(r"[\n,#·|]+", section) if token.strip()]
    return StrategyResult(items=tokens, debug={"label": True})


# ---------- Menus ----------


def read_menus(payloads: List[Any], ctx: ExtractionContext) -> StrategyResult:
    candidates = []
    for index, payload in enumerate(payloads):
        candidates.extend(collect_record_lists(payload, source=f"payload[{index}]", domain_keywords=MENU_HINTS))
    best = select_best(candidates, score_record_candidate)
    if best is None:
        return StrategyResult(items=[], debug={"candidates": 0})
    return StrategyResult(items=best.items, debug={"source": best.source, "score": best.score, **best.debug})


def read_menus_label(ctx: ExtractionContext) -> StrategyResult:
    section = _label_section(ctx.text, ("메뉴", "가격"), span=2000) or ""
    items = []
    for line in section.splitlines():
        match = _MENU_LINE_RE.match(line.strip())
        if match:
            items.append({"name": match.group("name").strip(), "price": match.group("price")})
    return StrategyResult(items=items, debug={"lines": len(items)})


# ---------- Basic fields ----------


def _string_list(payloads: List[Any], keys: Sequence[str]) -> Optional[List[str]]:
    for value in items_under(payloads, keys).values():
        if isinstance(value, list):
            out = []
            for item in value:
                if isinstance(item, dict):
                    item = item.get("name") or item.get("title")
                text = as_string(item)
                if text:
                    out.append(text)
            if out:
                return out
    return None


def _int_or_none(value: Optional[float]) -> Optional[int]:
    return int(value) if value is not None else None


def read_basic_fields(payloads: List[Any], ctx: ExtractionContext) -> StrategyResult:
    fields: Dict[str, Any] = {
        "place_id": deep_find_string(payloads, PLACE_ID_KEYS),
        "category": deep_find_string(payloads, CATEGORY_KEYS),
        "address": deep_find_string(payloads, ADDRESS_KEYS),
        "road_address": deep_find_string(payloads, ROAD_ADDRESS_KEYS),
        "phone": deep_find_string(payloads, PHONE_KEYS),
        "tags": _string_list(payloads, TAG_KEYS),
        "amenities": _string_list(payloads, AMENITY_KEYS),
        "visitor_count": _int_or_none(deep_find_number(payloads, VISITOR_KEYS)),
        "blog_count": _int_or_none(deep_find_number(payloads, BLOG_KEYS)),
        "rating": deep_find_number(payloads, RATING_KEYS),
    }
    place_id = deep_find_any(payloads, PLACE_ID_KEYS)
    if fields["place_id"] is None and isinstance(place_id, int) and not isinstance(place_id, bool):
        fields["place_id"] = str(place_id)

    name = deep_find_string(payloads, NAME_KEYS)
    og_title = meta_content(ctx.soup, prop="og:title")
    if og_title and og_title not in USELESS_TITLES and len(og_title) > 1:
        name = og_title
    fields["name"] = re.sub(r"\s*:\s*네이버.*$", "", name).strip() if name else None

    debug = {"found": sorted(key for key, value in fields.items() if value not in (None, []))}
    return StrategyResult(items=fields, debug=debug)


def validate_basic_fields(fields: Any) -> Dict[str, Any]:
    if not isinstance(fields, dict):
        return {}
    return {key: value for key, value in fields.items() if value not in (None, "", [])}


# ---------- Description / directions ----------


def _looks_like_review_line(text: str) -> bool:
    return bool(_REVIEW_LINE_RE.search(text))


def read_description(payloads: List[Any], ctx: ExtractionContext) -> StrategyResult:
    for key in DESCRIPTION_KEYS:
        text = deep_find_string(payloads, (key,))
        if text and not _looks_like_review_line(text):
            return StrategyResult(items=text, debug={"source": key})
    og_description = meta_content(ctx.soup, prop="og:description") or meta_content(ctx.soup, name="description")
    if og_description and len(og_description) > 3 and og_description not in USELESS_TITLES:
        if not _looks_like_review_line(og_description):
            return StrategyResult(items=og_description, debug={"source": "meta"})
    return StrategyResult(items=None)


def read_description_label(ctx: ExtractionContext) -> StrategyResult:
    section = _label_section(ctx.text, ("소개",), span=800)
    if section and _looks_like_review_line(section):
        section = None
    return StrategyResult(items=section, debug={"label": section is not None})


def read_directions(payloads: List[Any], ctx: ExtractionContext) -> StrategyResult:
    for key in DIRECTIONS_KEYS:
        text = deep_find_string(payloads, (key,))
        if text:
            return StrategyResult(items=text, debug={"source": key})
    return StrategyResult(items=None)


def read_directions_label(ctx: ExtractionContext) -> StrategyResult:
    section = _label_section(ctx.text, ("찾아가는길", "오시는길"), span=600)
    return StrategyResult(items=section, debug={"label": section is not None})


def validate_text(value: Any) -> Optional[str]:
    text = as_string(value)
    if not text:
        return None
    return re.sub(r"[ \t]+", " ", text)


# ---------- Photo count ----------


def read_photo_count(payloads: List[Any], ctx: ExtractionContext) -> StrategyResult:
    count = deep_find_number(payloads, PHOTO_COUNT_KEYS)
    if count is not None:
        return StrategyResult(items=int(count), debug={"source": "key"})
    longest = longest_list_under(payloads, PHOTO_LIST_KEYS)
    if longest:
        return StrategyResult(items=longest, debug={"source": "array"})
    return StrategyResult(items=None)


def read_photo_count_label(ctx: ExtractionContext) -> StrategyResult:
    for pattern in _PHOTO_COUNT_RES:
        match = pattern.search(ctx.text)
        if match:
            number = as_number(match.group(1))
            if number is not None:
                return StrategyResult(items=int(number), debug={"pattern": pattern.pattern})
    return StrategyResult(items=None)


def validate_count(value: Any) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return int(value) if value >= 0 else None


# ---------- Competitor place ids ----------


def place_ids_in_text(text: str) -> List[str]:
    found: List[str] = []
    for pattern in _PLACE_ID_RES:
        for match in pattern.finditer(text or ""):
            found.append(match.group(1))
            if len(found) >= MAX_PLACE_IDS:
                return found
    return found


class SearchDocumentStrategy(Strategy):
    """Place links in the search result document itself."""

    name = "embedded"

    def attempt(self, ctx: ExtractionContext) -> StrategyResult:
        ids = place_ids_in_text(ctx.document.text)
        return StrategyResult(items=ids, debug={"raw": len(ids)})


class SearchFrameStrategy(Strategy):
    name = "frames"

    def attempt(self, ctx: ExtractionContext) -> StrategyResult:
        for url, document in ctx.frame_documents():
            ids = place_ids_in_text(document.text)
            if ids:
                return StrategyResult(items=ids, debug={"frameUrl": url, "raw": len(ids)})
        return StrategyResult(items=[], debug={"frames": len(ctx.frame_documents())})


class SearchNetworkStrategy(Strategy):
    name = "network"

    def attempt(self, ctx: ExtractionContext) -> StrategyResult:
        ids: List[str] = []
        for payload in ctx.network_payloads:
            ids.extend(place_ids_in_text(json.dumps(payload, ensure_ascii=False)))
        return StrategyResult(items=ids, debug={"observed": len(ctx.network_payloads), "raw": len(ids)})


def competitor_strategies() -> List[Strategy]:
    return [SearchDocumentStrategy(), SearchFrameStrategy(), SearchNetworkStrategy()]
