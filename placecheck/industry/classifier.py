"""Rule-based industry classification over free profile text."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from placecheck.industry.taxonomy import DEFAULT_SUBCATEGORY, vertical_for
from placecheck.models import IndustryClassification, PlaceProfile

logger = logging.getLogger(__name__)

NORMALIZING_CONSTANT = 10.0
MIN_CONFIDENCE = 0.3
MAX_CONFIDENCE = 0.95
DEFAULT_REASON = "기본값 적용(단서 부족)"


@dataclass(frozen=True)
class Rule:
    subcategory: str
    patterns: Tuple[str, ...]
    weight: float
    reason: str


# Listing URLs carry the category segment of the mobile site.
URL_RULES: Tuple[Rule, ...] = (
    Rule("beauty_hair_salon", ("/hairshop/",), 9, "URL 경로가 hairshop"),
    Rule("beauty_nail_shop", ("/nailshop/",), 9, "URL 경로가 nailshop"),
    Rule("fnb_restaurant", ("/restaurant/", "/food/"), 7, "URL 경로가 음식점 계열"),
    Rule("fnb_cafe", ("/cafe/",), 7, "URL 경로가 카페"),
    Rule("medical_clinic", ("/hospital/", "/clinic/"), 7, "URL 경로가 의료기관"),
    Rule("real_estate_office", ("/realestate/",), 7, "URL 경로가 부동산"),
)

# Specific subcategories come before the generic ones that share vocabulary.
TEXT_RULES: Tuple[Rule, ...] = (
    Rule("medical_vet", ("동물병원", "수의", "반려동물"), 8, "동물병원 단서"),
    Rule("medical_dental", ("치과", "임플란트", "교정"), 8, "치과 단서"),
    Rule("medical_oriental", ("한의원", "한방", "추나"), 7, "한의원 단서"),
    Rule("medical_clinic", ("병원", "의원", "클리닉", "진료", "전문의"), 6, "의료 단서"),
    Rule("beauty_nail_shop", ("네일", "젤네일", "패디"), 7, "네일 단서"),
    Rule("beauty_hair_salon", ("미용실", "헤어", "살롱", "커트", "펌", "염색"), 7, "미용실 단서"),
    Rule("beauty_skin_care", ("피부관리", "에스테틱", "스킨케어"), 7, "피부관리 단서"),
    Rule("beauty_waxing", ("왁싱",), 7, "왁싱 단서"),
    Rule("real_estate_office", ("부동산", "공인중개", "중개"), 7, "부동산 단서"),
    Rule("fitness_pilates", ("필라테스",), 8, "필라테스 단서"),
    Rule("fitness_yoga", ("요가",), 8, "요가 단서"),
    Rule("fitness_gym", ("헬스", "피트니스", "gym"), 6, "헬스장 단서"),
    Rule("edu_music_art", ("피아노", "미술", "음악학원", "보컬"), 7, "예체능 학원 단서"),
    Rule("edu_sports", ("태권도", "수영", "축구교실", "주짓수"), 7, "체육 교실 단서"),
    Rule("edu_academy", ("학원", "교습소", "과외", "입시"), 6, "학원 단서"),
    Rule("fnb_cafe", ("카페", "커피", "디저트", "베이커리", "cafe", "coffee"), 6, "카페 단서"),
    Rule("fnb_pub_bar", ("술집", "이자카야", "포차", "호프", "칵테일", "와인바", "pub"), 6, "주점 단서"),
    Rule("fnb_delivery_takeout", ("배달전문", "포장전문", "테이크아웃"), 6, "배달/포장 단서"),
    Rule("fnb_restaurant", ("맛집", "식당", "음식점", "레스토랑", "한식", "일식", "중식", "양식"), 5, "음식점 단서"),
)


def profile_text(profile: PlaceProfile) -> str:
    parts: List[str] = [profile.name or "", profile.category or "", profile.address or ""]
    parts.extend(profile.tags or [])
    parts.extend(menu.name for menu in profile.menus or [])
    parts.append(profile.description or "")
    parts.append(profile.directions or "")
    return " ".join(part for part in parts if part).lower()


def _accumulate(
    text: str,
    rules: Tuple[Rule, ...],
    scores: Dict[str, float],
    reasons: Dict[str, List[str]],
    order: Dict[str, int],
) -> None:
    for rule in rules:
        for pattern in rule.patterns:
            if pattern in text:
                scores[rule.subcategory] = scores.get(rule.subcategory, 0.0) + rule.weight
                order.setdefault(rule.subcategory, len(order))
                bucket = reasons.setdefault(rule.subcategory, [])
                if rule.reason not in bucket:
                    bucket.append(rule.reason)
                break


def classify_text(text: str, url: Optional[str] = None) -> IndustryClassification:
    """Score every rule over ``text`` (and ``url``) and return the best subcategory.

    Within a rule only the first matching pattern counts. Ties go to the rule
    that matched first.
    """

    scores: Dict[str, float] = {}
    reasons: Dict[str, List[str]] = {}
    order: Dict[str, int] = {}
    _accumulate((url or "").lower(), URL_RULES, scores, reasons, order)
    _accumulate((text or "").lower(), TEXT_RULES, scores, reasons, order)

    if not scores:
        return IndustryClassification(
            subcategory=DEFAULT_SUBCATEGORY,
            vertical=vertical_for(DEFAULT_SUBCATEGORY),
            confidence=MIN_CONFIDENCE,
            reasons=[DEFAULT_REASON],
        )

    best = min(scores, key=lambda subcategory: (-scores[subcategory], order[subcategory]))
    confidence = min(max(scores[best] / NORMALIZING_CONSTANT, MIN_CONFIDENCE), MAX_CONFIDENCE)
    logger.debug("Classified as %s (score=%.1f, candidates=%s)", best, scores[best], scores)
    return IndustryClassification(
        subcategory=best,
        vertical=vertical_for(best),
        confidence=round(confidence, 2),
        reasons=reasons[best],
    )


def classify(profile: PlaceProfile) -> IndustryClassification:
    return classify_text(profile_text(profile), profile.place_url)
