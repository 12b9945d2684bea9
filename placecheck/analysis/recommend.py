"""Templated copy, keyword plan and prioritized todo list for a place."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

from placecheck.extract.normalize import dedupe_key, infer_region
from placecheck.industry.profiles import GENERIC_REGION, IndustryProfile, TemplateContext, profile_for
from placecheck.models import (
    UNKNOWN_VOLUME,
    KeywordPick,
    PlaceProfile,
    RecommendResult,
    Rewrite,
    ScoreResult,
    TodoItem,
)

logger = logging.getLogger(__name__)

TODO_SIZE = 5
MAX_SERVICES = 3
MAX_TRUST_POINTS = 3
DEFAULT_PHOTO_SET = "외관/내부/대표메뉴(또는 전후)/가격표"
CONVERSION_MARKERS = ("예약", "당일", "주차", "작업")

ANTI_STUFFING_NOTE = "키워드 나열만 있는 문장은 감점 요인입니다(문장 안에 자연스럽게 포함)."
GENERIC_TRUST_POINT = "기본 정보(가격/시간/예약)를 명확히 제공"

# Distinct low-impact fillers, used in order to pad the todo list.
LOW_IMPACT_FILLERS = (
    TodoItem("소식 주 1회", "low", "이달 포인트 1개(이벤트/신메뉴/시즌)"),
    TodoItem("리뷰 답글 정리", "low", "최근 리뷰 10개에 감사+재방문 유도 답글"),
    TodoItem("대표 사진 순서 점검", "low", "첫 3장을 외관/대표 메뉴(시술)/내부로 배치"),
    TodoItem("영업시간/휴무 최신화", "low", "공휴일·임시 휴무를 미리 등록"),
    TodoItem("편의시설 정보 보강", "low", "주차/와이파이/예약/단체석 여부 체크"),
)


def top_services(profile: PlaceProfile, vocabulary: List[str]) -> List[str]:
    """Vocabulary terms present in the place's own text, in vocabulary order."""

    parts = [profile.description or ""]
    parts.extend(profile.tags or [])
    parts.extend(menu.name for menu in profile.menus or [])
    parts.extend(profile.keywords or [])
    text = " ".join(parts)

    hits: List[str] = []
    for term in vocabulary:
        if term in text and term not in hits:
            hits.append(term)
        if len(hits) >= MAX_SERVICES:
            break
    return hits


def trust_points(profile: PlaceProfile, industry: IndustryProfile) -> List[str]:
    points: List[str] = []
    if (profile.reviews.visitor_count or 0) >= 30:
        points.append("리뷰 기반으로 꾸준히 찾는 매장")
    if (profile.photos.count or 0) >= 20:
        points.append("사진 정보가 충분해 첫 방문도 편함")
    if industry.trust_filler:
        points.append(industry.trust_filler)
    return points[:MAX_TRUST_POINTS] or [GENERIC_TRUST_POINT]


def build_keywords5(region: str, intents: List[str], services: List[str]) -> List[KeywordPick]:
    """Fixed five-slot plan: two core, two signature, one conversion keyword."""

    region = region or GENERIC_REGION
    core = [
        intents[0] if len(intents) > 0 else f"{region} 추천",
        intents[1] if len(intents) > 1 else f"{region} 인기",
    ]
    spare = list(intents[2:])

    signatures = []
    for index in range(2):
        if index < len(services):
            signatures.append(f"{region} {services[index]}")
        elif spare:
            signatures.append(spare.pop(0))
        else:
            signatures.append(f"{region} 추천" if index else f"{region} 대표서비스")

    conversion = next((intent for intent in intents if any(marker in intent for marker in CONVERSION_MARKERS)), None)
    if conversion is None:
        conversion = f"{region} 예약"

    return [
        KeywordPick(core[0], "core", "지역 기반 대표 키워드"),
        KeywordPick(core[1], "core", "탐색 의도 키워드"),
        KeywordPick(signatures[0], "signature", "서비스/메뉴 기반 전환"),
        KeywordPick(signatures[1], "signature", "추가 니즈 커버"),
        KeywordPick(conversion, "conversion", "행동 유도"),
    ]


def build_todo(profile: PlaceProfile, industry: Optional[IndustryProfile] = None) -> List[TodoItem]:
    todo: List[TodoItem] = []
    if not profile.directions:
        todo.append(TodoItem("찾아오는 길 보강", "high", "출구/거리/랜드마크/주차/입구까지 5~8줄"))
    if not profile.description:
        todo.append(TodoItem("상세설명 보강", "high", "대상→강점→대표→예약 CTA 흐름"))
    if (profile.photos.count or 0) < 10:
        checklist = industry.photo_checklist if industry is not None else ()
        todo.append(TodoItem("사진 세트 추가", "high", "/".join(checklist) or DEFAULT_PHOTO_SET))
    if len(profile.menus or []) < 3:
        todo.append(TodoItem("메뉴/가격 정리", "mid", "상위 5개 메뉴에 가격/소요/옵션 표기"))
    if (profile.reviews.visitor_count or 0) < 10:
        todo.append(TodoItem("리뷰 운영", "mid", "방문 직후 요청 + 답글 24시간 내"))

    for filler in LOW_IMPACT_FILLERS:
        if len(todo) >= TODO_SIZE:
            break
        todo.append(TodoItem(filler.action, filler.impact, filler.how))
    return todo[:TODO_SIZE]


def build_compliance(profile: PlaceProfile, industry: IndustryProfile) -> List[str]:
    text = f"{profile.description or ''}\n{profile.directions or ''}"
    notes = [ANTI_STUFFING_NOTE]
    hits = [phrase for phrase in industry.banned_phrases if phrase in text]
    if hits:
        notes.append(f"리스크 문구 주의: {', '.join(hits)}")
    if industry.banned_phrases:
        notes.append(f"업종 금지 표현: {', '.join(industry.banned_phrases)}")
    return notes


def recommend(
    profile: PlaceProfile,
    scores: ScoreResult,
    subcategory: str,
    volumes: Optional[Mapping[str, Any]] = None,
) -> RecommendResult:
    """Build the full (unredacted) recommendation for ``profile``.

    ``scores`` is accepted so callers can pass the pipeline's result through;
    the todo list reads the profile directly so it stays complete when
    scoring saw an empty profile.
    """

    industry = profile_for(subcategory)
    region = infer_region(profile.address or profile.road_address or "")
    intents = industry.intents_for(region)
    services = top_services(profile, list(industry.service_keywords))

    context = TemplateContext(
        name=profile.name,
        region=region,
        top_services=services,
        trust_points=trust_points(profile, industry),
        call_to_action=industry.call_to_action,
    )
    keywords5 = attach_volumes(build_keywords5(region, intents, services), volumes or {})
    logger.debug(
        "Recommendation for %s uses region=%r services=%s (grade %s)", profile.place_url, region, services, scores.grade
    )

    return RecommendResult(
        keywords5=keywords5,
        rewrite=Rewrite(description=industry.describe(context), directions=industry.directions(region)),
        todo_top5=build_todo(profile, industry),
        compliance_notes=build_compliance(profile, industry),
    )


def attach_volumes(picks: List[KeywordPick], volumes: Mapping[str, Any]) -> List[KeywordPick]:
    by_key: Dict[str, Any] = {dedupe_key(keyword): volume for keyword, volume in volumes.items()}
    for pick in picks:
        pick.volume = by_key.get(dedupe_key(pick.keyword), UNKNOWN_VOLUME)
    return picks
