"""Candidate collection and ranking over embedded structured payloads.

Listing pages ship their data as deeply nested JSON blobs whose layout
changes without notice. Instead of addressing fields by path we walk the
whole tree, collect every list that has the right *shape*, and rank the
lists with cheap heuristics.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, List, Optional, Sequence

logger = logging.getLogger(__name__)

MAX_DEPTH = 10
MIN_SELECT_SCORE = 4.0

KEYWORD_MIN_LENGTH = 2
KEYWORD_MAX_LENGTH = 24

NAME_KEYS = ("name", "title", "menuName", "serviceName", "productName", "itemName")
PRICE_KEYS = ("price", "minPrice", "maxPrice", "amount", "value", "cost", "priceValue")
DURATION_KEYS = ("durationMin", "duration", "time", "leadTime")
NOTE_KEYS = ("note", "desc", "description", "memo")

MIN_MENU_PRICE = 5000
MAX_MENU_PRICE = 2_000_000
MENU_SAMPLE_SIZE = 40

# Labels that belong to the listing UI itself, not to the business.
UI_CHROME_TOKENS = frozenset(
    {
        "홈",
        "메뉴",
        "사진",
        "리뷰",
        "예약",
        "가격",
        "지도",
        "정보",
        "더보기",
        "펼치기",
        "접기",
        "저장",
        "문의",
        "소식",
        "스타일",
        "공유",
        "전화",
        "길찾기",
        "마이플레이스",
        "대표키워드",
    }
)
UI_NOISE_RE = re.compile(
    r"(마이플레이스|이미지\s*갯수|방문자\s*리뷰|블로그\s*리뷰|길찾기|영업시간|알림받기|쿠폰)",
    re.IGNORECASE,
)
LETTER_RE = re.compile(r"[가-힣A-Za-z]")
DIGITS_ONLY_RE = re.compile(r"^\d+$")


@dataclass(slots=True)
class RawCandidate:
    """A tentative container considered as the answer for one signal."""

    items: List[Any]
    source: str
    score: float = 0.0
    debug: dict = field(default_factory=dict, repr=False)


def as_string(value: Any) -> Optional[str]:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return None


def as_number(value: Any) -> Optional[float]:
    """Coerce numbers and numeric-looking strings such as ``"24,000원"``."""

    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value) if value == value else None
    if isinstance(value, str):
        cleaned = re.sub(r"[^\d.]", "", value)
        if not cleaned or cleaned.count(".") > 1:
            return None
        try:
            return float(cleaned)
        except ValueError:
            return None
    return None


def first_value(record: Any, keys: Sequence[str]) -> Any:
    if not isinstance(record, dict):
        return None
    for key in keys:
        if record.get(key) is not None:
            return record[key]
    return None


def is_chrome_token(text: str) -> bool:
    cleaned = text.replace("#", "").strip()
    return cleaned in UI_CHROME_TOKENS or bool(UI_NOISE_RE.search(cleaned))


# ---------- Collectors ----------


def walk_lists(value: Any, max_depth: int = MAX_DEPTH) -> Iterable[list]:
    """Yield every list reachable from ``value`` without descending past ``max_depth``."""

    stack = [(value, 0)]
    while stack:
        node, depth = stack.pop()
        if depth > max_depth:
            continue
        if isinstance(node, list):
            yield node
            children = node
        elif isinstance(node, dict):
            children = list(node.values())
        else:
            continue
        for child in reversed(children):
            if isinstance(child, (list, dict)):
                stack.append((child, depth + 1))


def collect_string_lists(value: Any, *, source: str = "payload", max_depth: int = MAX_DEPTH) -> List[RawCandidate]:
    """Collect every non-empty list made only of strings."""

    out: List[RawCandidate] = []
    for node in walk_lists(value, max_depth):
        if node and all(isinstance(item, str) for item in node):
            out.append(RawCandidate(items=list(node), source=source))
    return out


def collect_record_lists(
    value: Any,
    *,
    source: str = "payload",
    domain_keywords: Sequence[str] = (),
    max_depth: int = MAX_DEPTH,
) -> List[RawCandidate]:
    """Collect lists of maps exposing a name-like key plus a price-like key or a domain keyword."""

    out: List[RawCandidate] = []
    for node in walk_lists(value, max_depth):
        if len(node) < 3 or len(node) > 2000:
            continue
        sample = node[:MENU_SAMPLE_SIZE]
        if not all(isinstance(item, dict) for item in sample):
            continue

        name_hits = 0
        price_hits = 0
        keyword_hits = 0
        for record in sample:
            name = as_string(first_value(record, NAME_KEYS))
            if not name:
                continue
            name_hits += 1
            price = as_number(first_value(record, PRICE_KEYS))
            if price is not None and MIN_MENU_PRICE <= price <= MAX_MENU_PRICE:
                price_hits += 1
            if any(keyword in name for keyword in domain_keywords):
                keyword_hits += 1

        if name_hits < 3 or (price_hits < 2 and keyword_hits < 2):
            continue
        out.append(
            RawCandidate(
                items=list(node),
                source=source,
                debug={"names": name_hits, "prices": price_hits, "keywordHits": keyword_hits},
            )
        )
    return out


# ---------- Scorers ----------


def is_good_keyword(text: str, max_length: int = KEYWORD_MAX_LENGTH) -> bool:
    cleaned = re.sub(r"\s+", " ", text.replace("#", "")).strip()
    if len(cleaned) < KEYWORD_MIN_LENGTH or len(cleaned) > max_length:
        return False
    if not LETTER_RE.search(cleaned) or DIGITS_ONLY_RE.match(cleaned):
        return False
    return not is_chrome_token(cleaned)


def score_keyword_candidate(candidate: RawCandidate) -> float:
    """Length preference curve + content quality - chrome penalty."""

    members = [re.sub(r"\s+", " ", str(item).replace("#", "")).strip() for item in candidate.items]
    members = [member for member in members if member]
    size = len(members)

    score = 0.0
    if 3 <= size <= 20:
        score += 4
    if 5 <= size <= 15:
        score += 3
    if len(candidate.items) > 30:
        score -= 4

    good = 0
    noise = 0
    for member in members:
        if is_good_keyword(member):
            good += 1
            continue
        if is_chrome_token(member):
            noise += 1
        if len(member) < KEYWORD_MIN_LENGTH or len(member) > KEYWORD_MAX_LENGTH:
            noise += 1
        if not LETTER_RE.search(member) or DIGITS_ONLY_RE.match(member):
            noise += 1

    score += min(good, 10)
    score -= noise * 2
    return score


def score_record_candidate(candidate: RawCandidate) -> float:
    names = candidate.debug.get("names", 0)
    prices = candidate.debug.get("prices", 0)
    keyword_hits = candidate.debug.get("keywordHits", 0)
    return float(names * 2 + prices * 3 + keyword_hits)


def rank_candidates(
    candidates: Iterable[RawCandidate], scorer: Callable[[RawCandidate], float]
) -> List[RawCandidate]:
    ranked = []
    for candidate in candidates:
        candidate.score = scorer(candidate)
        ranked.append(candidate)
    # sorted() is stable, so equal scores keep discovery order.
    return sorted(ranked, key=lambda item: item.score, reverse=True)


def select_best(
    candidates: Iterable[RawCandidate],
    scorer: Callable[[RawCandidate], float],
    *,
    min_score: float = MIN_SELECT_SCORE,
) -> Optional[RawCandidate]:
    """Return the top candidate; it is returned even below ``min_score`` when nothing clears the bar."""

    ranked = rank_candidates(candidates, scorer)
    if not ranked:
        return None
    best = ranked[0]
    if best.score < min_score:
        logger.debug("Best candidate from %s scored %.1f below threshold %.1f", best.source, best.score, min_score)
    return best
