"""Deterministic listing quality score (discover / convert / trust / risk)."""

from __future__ import annotations

import re
from collections import Counter
from typing import List, Optional

from placecheck.industry.profiles import banned_phrases_for_vertical
from placecheck.models import PlaceProfile, ScoreBreakdown, ScoreResult, ScoreSignals

DISCOVER_CAP = 30
CONVERT_CAP = 30
TRUST_CAP = 25
RISK_CAP = 15

STUFFING_REPEATS = 12
STUFFING_PENALTY = 6
BANNED_PHRASE_PENALTY = 5
STALE_PHOTO_COUNT = 5

GRADE_LADDER = ((90, "A"), (80, "B"), (70, "C"), (60, "D"))

_WORD_SPLIT_RE = re.compile(r"[^\w\s]", re.UNICODE)


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def grade_for(total: int) -> str:
    for threshold, grade in GRADE_LADDER:
        if total >= threshold:
            return grade
    return "F"


def score_structure(description: str) -> int:
    lines = [line for line in description.split("\n") if line.strip()]
    points = 0
    if len(lines) >= 8:
        points += 5
    if "- " in description:
        points += 3
    if len(description) >= 300:
        points += 2
    return int(clamp(points, 0, 10))


def score_directions(directions: str) -> int:
    points = 0
    if "출구" in directions:
        points += 3
    if re.search(r"도보|\d+\s*m|\d+\s*분", directions):
        points += 3
    if "주차" in directions:
        points += 2
    if len(directions) >= 150:
        points += 2
    return int(clamp(points, 0, 10))


def has_keyword_stuffing(text: str, repeats: int = STUFFING_REPEATS) -> bool:
    """True when any token of two or more characters appears ``repeats`` times or more."""

    words = [word for word in _WORD_SPLIT_RE.sub(" ", text.lower()).split() if len(word) >= 2]
    if not words:
        return False
    return Counter(words).most_common(1)[0][1] >= repeats


def banned_phrase_hits(text: str, vertical: str) -> List[str]:
    return [phrase for phrase in banned_phrases_for_vertical(vertical) if phrase in text]


def missing_fields(profile: PlaceProfile) -> List[str]:
    missing = []
    if not profile.description:
        missing.append("description")
    if not profile.directions:
        missing.append("directions")
    if not profile.menus:
        missing.append("menus")
    if not profile.photos.count:
        missing.append("photos")
    return missing


def _count(value: Optional[int]) -> int:
    return value or 0


def score_place(profile: PlaceProfile, vertical: str) -> ScoreResult:
    """Score a normalized profile. Pure and total: absent fields score their floor value."""

    tags = len(profile.tags or [])
    menus = len(profile.menus or [])
    visitors = _count(profile.reviews.visitor_count)
    photos = _count(profile.photos.count)

    discover = 0
    discover += 6 if profile.category else 2
    discover += 6 if profile.address else 0
    discover += 8 if tags >= 3 else 5 if tags >= 1 else 0
    discover += 6 if profile.description else 0
    discover += 4 if visitors else 2

    convert = 0
    convert += score_structure(profile.description) if profile.description else 0
    convert += score_directions(profile.directions) if profile.directions else 0
    convert += 8 if menus >= 3 else 5 if menus >= 1 else 0
    convert += 4 if profile.phone else 1

    trust = 0
    trust += 10 if visitors >= 30 else 6 if visitors >= 5 else 2
    trust += 8 if photos >= 20 else 5 if photos >= 5 else 2
    trust += 4 if profile.reviews.rating else 1
    trust += 3 if tags >= 3 else 1

    copy_text = f"{profile.description or ''}\n{profile.directions or ''}"
    stuffing = has_keyword_stuffing(copy_text)
    risk = RISK_CAP
    if stuffing:
        risk -= STUFFING_PENALTY
    if banned_phrase_hits(copy_text, vertical):
        risk -= BANNED_PHRASE_PENALTY

    breakdown = ScoreBreakdown(
        discover=int(clamp(discover, 0, DISCOVER_CAP)),
        convert=int(clamp(convert, 0, CONVERT_CAP)),
        trust=int(clamp(trust, 0, TRUST_CAP)),
        risk=int(clamp(risk, 0, RISK_CAP)),
    )
    total = int(clamp(breakdown.discover + breakdown.convert + breakdown.trust + breakdown.risk, 0, 100))
    return ScoreResult(
        total=total,
        grade=grade_for(total),
        breakdown=breakdown,
        signals=ScoreSignals(
            missing_fields=missing_fields(profile),
            keyword_stuffing_risk=stuffing,
            staleness_risk=photos < STALE_PHOTO_COUNT,
        ),
    )
