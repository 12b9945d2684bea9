"""Per-industry copy: search intents, service vocabulary, templates and banned phrases."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

from placecheck.industry.taxonomy import DEFAULT_SUBCATEGORY, SUBCATEGORY_TO_VERTICAL

GENERIC_REGION = "해당 지역"
DEFAULT_CTA = "예약/문의는 네이버 플레이스 버튼을 이용하시면 가장 빠릅니다."
REAL_ESTATE_CTA = "방문 상담은 예약하시면 대기 없이 진행됩니다. (방문 전 연락 추천)"
GENERIC_SERVICES = ("대표 메뉴/서비스 1", "대표 메뉴/서비스 2", "대표 메뉴/서비스 3")


@dataclass(slots=True)
class TemplateContext:
    name: str
    region: str
    top_services: List[str]
    trust_points: List[str]
    call_to_action: str = DEFAULT_CTA


@dataclass(frozen=True)
class IndustryProfile:
    subcategory: str
    intents: Tuple[str, ...]
    service_keywords: Tuple[str, ...]
    intro: str
    audience_title: str
    audience: Tuple[str, ...]
    services_title: str
    trust_title: str
    directions_lines: Tuple[str, ...]
    default_services: Tuple[str, ...] = GENERIC_SERVICES
    default_trust: Tuple[str, ...] = ("기본 정보(가격/시간/예약)를 명확히 제공",)
    trust_filler: str = ""
    photo_checklist: Tuple[str, ...] = ()
    banned_phrases: Tuple[str, ...] = ()
    call_to_action: str = DEFAULT_CTA

    def intents_for(self, region: str) -> List[str]:
        region = region or GENERIC_REGION
        return [intent.format(region=region) for intent in self.intents]

    def describe(self, ctx: TemplateContext) -> str:
        region = ctx.region or GENERIC_REGION
        name = ctx.name or "저희 매장"
        services = list(ctx.top_services) or list(self.default_services)
        trust = list(ctx.trust_points) or list(self.default_trust)
        blocks = [
            self.intro.format(region=region, name=name),
            "\n".join([self.audience_title] + [f"- {line}" for line in self.audience]),
            "\n".join([self.services_title] + [f"- {item}" for item in services]),
            "\n".join([self.trust_title] + [f"- {item}" for item in trust]),
            ctx.call_to_action or self.call_to_action,
        ]
        return "\n\n".join(blocks)

    def directions(self, region: str) -> str:
        region = region or GENERIC_REGION
        lines = [f"{region} 기준으로 안내드립니다.", ""] + [f"- {line}" for line in self.directions_lines]
        return "\n".join(lines)


FNB_RESTAURANT = IndustryProfile(
    subcategory="fnb_restaurant",
    intents=("{region} 맛집", "{region} 음식점", "{region} 점심", "{region} 저녁", "{region} 예약"),
    service_keywords=("정식", "런치", "디너", "단체", "회식", "포장", "배달", "코스", "세트"),
    intro="{region}에서 식사 고민될 때 찾기 좋은 {name}입니다.",
    audience_title="이런 분들께 잘 맞아요",
    audience=("점심/저녁 식사 장소를 고민 중인 분", "메뉴 선택이 쉬운 곳을 찾는 분", "단체/회식 장소가 필요한 분"),
    services_title="주요 메뉴",
    trust_title="이용 포인트",
    directions_lines=("○○역 ○번 출구 → 도보 ○분", "○○건물 1층 / 간판 확인", "주차 가능 여부는 방문 전 문의 권장"),
    default_services=("대표 메뉴 1", "대표 메뉴 2", "대표 메뉴 3"),
    default_trust=("메뉴 선택이 쉬운 구성", "단체/예약 안내 명확", "방문 전 참고 정보 제공"),
    photo_checklist=("외관", "대표 메뉴", "좌석/테이블", "메뉴판", "실내 전경"),
    banned_phrases=("무조건", "전국최고", "1등맛집"),
)

FNB_CAFE = IndustryProfile(
    subcategory="fnb_cafe",
    intents=(
        "{region} 카페",
        "{region} 커피",
        "{region} 디저트 카페",
        "{region} 분위기 좋은 카페",
        "{region} 작업하기 좋은 카페",
    ),
    service_keywords=("아메리카노", "라떼", "핸드드립", "디카페인", "케이크", "쿠키", "스콘", "디저트", "콘센트", "와이파이", "좌석"),
    intro="{region}에서 커피와 디저트를 편하게 즐길 수 있는 {name}입니다.",
    audience_title="이런 분들께 추천드려요",
    audience=("잠깐 쉬거나 대화하기 좋은 카페를 찾는 분", "작업/공부가 가능한 카페가 필요한 분", "디저트도 함께 즐기고 싶은 분"),
    services_title="주요 메뉴",
    trust_title="매장 특징",
    directions_lines=("○○역 ○번 출구 → 도보 ○분", "○○건물 1층 / 간판 확인", "주차 가능 여부는 방문 전 확인 권장"),
    default_services=("아메리카노", "라떼", "디저트"),
    default_trust=("좌석/동선이 편함", "메뉴 구성이 직관적", "체류 정보(콘센트/와이파이) 안내"),
    trust_filler="좌석/콘센트/와이파이 등 이용 정보를 정리하면 체류 고객이 늘어요",
    photo_checklist=("외관", "내부 전경", "대표 음료", "디저트", "좌석 구성"),
    banned_phrases=("전국최고", "무조건 맛있음"),
)

FNB_PUB_BAR = IndustryProfile(
    subcategory="fnb_pub_bar",
    intents=("{region} 술집", "{region} 바", "{region} 이자카야", "{region} 2차", "{region} 분위기 좋은 술집"),
    service_keywords=("안주", "하이볼", "칵테일", "와인", "맥주", "위스키", "혼술", "단체"),
    intro="{region}에서 가볍게 한잔하기 좋은 {name}입니다.",
    audience_title="이런 분들께 추천드려요",
    audience=("1차 이후 2차 장소를 찾는 분", "분위기 있는 술집을 원하는 분", "혼술 또는 소규모 모임"),
    services_title="주요 안주/주류",
    trust_title="매장 특징",
    directions_lines=("○○역 ○번 출구 → 골목 진입 ○m", "건물 ○층 / 입구 간판 확인", "야간 방문 시 전화 문의 추천"),
    default_services=("시그니처 안주", "하이볼", "맥주/위스키"),
    default_trust=("좌석/분위기 안내", "2차/단체 이용 팁 제공", "야간 동선 안내 명확"),
    trust_filler="분위기/좌석 정보 안내가 명확하면 전환이 좋아요",
    photo_checklist=("외관(야간)", "바/테이블", "안주", "주류 진열", "조명/분위기"),
    banned_phrases=("무제한", "최고급", "완벽한 분위기"),
)

BEAUTY_HAIR_SALON = IndustryProfile(
    subcategory="beauty_hair_salon",
    intents=("{region} 미용실", "{region} 헤어샵", "{region} 커트", "{region} 염색", "{region} 펌"),
    service_keywords=("커트", "염색", "뿌리염색", "탈색", "펌", "셋팅펌", "매직", "클리닉", "두피", "레이어드", "허쉬컷"),
    intro="{region}에서 헤어 스타일 상담부터 시술까지 꼼꼼하게 진행하는 {name}입니다.",
    audience_title="이런 분들께 잘 맞아요",
    audience=("커트만으로도 분위기 변화를 원하시는 분", "염색/펌 후 손상이 걱정되는 분", "집에서도 손질 쉬운 스타일을 원하는 분"),
    services_title="대표 시술",
    trust_title="시술 포인트",
    directions_lines=("○○역 ○번 출구 → 도보 ○분", "○○빌딩 ○층", "예약 시간 5분 전 도착 권장"),
    default_services=("커트", "염색", "펌"),
    photo_checklist=("외관", "내부", "시술 공간", "전/후 스타일", "가격표"),
    banned_phrases=("100% 만족", "무조건 성공"),
)

BEAUTY_NAIL_SHOP = IndustryProfile(
    subcategory="beauty_nail_shop",
    intents=("{region} 네일샵", "{region} 젤네일", "{region} 네일아트", "{region} 패디", "{region} 네일 추천"),
    service_keywords=("젤네일", "아트", "프렌치", "원컬러", "케어", "패디", "패디큐어", "리무버"),
    intro="{region}에서 네일 케어와 디자인을 함께 받을 수 있는 {name}입니다.",
    audience_title="추천 대상",
    audience=("손/발 케어가 필요한 분", "디자인 상담을 함께 받고 싶은 분", "예약제로 조용한 시술을 원하는 분"),
    services_title="주요 서비스",
    trust_title="매장 포인트",
    directions_lines=("○○역 ○번 출구 → 도보 ○분", "○○빌딩 ○층", "예약 시간 5분 전 도착 권장"),
    default_services=("젤네일", "케어", "패디"),
    default_trust=("예약제로 운영 시 안내 명확", "아트 샘플/가격표 정리", "위생/도구 관리 안내"),
    photo_checklist=("외관", "시술 공간", "아트 샘플", "전/후 비교", "가격표"),
    banned_phrases=("100% 만족", "절대 안 벗겨짐"),
)

MEDICAL_CLINIC = IndustryProfile(
    subcategory="medical_clinic",
    intents=("{region} 병원", "{region} 의원", "{region} 진료", "{region} 예약", "{region} 전문의"),
    service_keywords=("진료", "검사", "상담", "물리치료", "주사", "처방", "재활", "통증"),
    intro="{region}에서 진료와 상담을 진행하는 {name}입니다.",
    audience_title="진료 안내",
    audience=("증상과 상태를 확인한 뒤 진료 방향을 안내합니다.", "불필요한 과잉 진료를 지양합니다."),
    services_title="주요 진료 항목",
    trust_title="이용 포인트",
    directions_lines=("○○역 ○번 출구 → 도보 ○분", "○○빌딩 ○층", "주차 가능 여부는 방문 전 문의 권장"),
    default_services=("진료", "검사", "상담"),
    default_trust=("과장 표현 없이 안내", "진료 항목/시간/예약 안내 정리", "주차/동선 정보 제공"),
    trust_filler="진료 안내 문구는 과장 표현 없이 깔끔하게 구성하는 게 좋아요",
    photo_checklist=("병원 외관", "접수/대기 공간", "진료실", "의료 장비"),
    banned_phrases=("완치 보장", "100% 효과", "부작용 없음"),
)

REAL_ESTATE_OFFICE = IndustryProfile(
    subcategory="real_estate_office",
    intents=("{region} 부동산", "{region} 공인중개사", "{region} 전세", "{region} 월세", "{region} 매매"),
    service_keywords=("전세", "월세", "매매", "원룸", "투룸", "오피스텔", "아파트", "상가", "사무실"),
    intro="{region} 지역 위주로 전월세 및 매매 상담을 진행하는 {name}입니다.",
    audience_title="상담 방식",
    audience=("조건(예산/입주일/우선순위)을 먼저 정리", "허위·미끼 매물 없이 실제 매물만 안내"),
    services_title="주요 중개 유형",
    trust_title="신뢰 포인트",
    directions_lines=("○○역 ○번 출구 인근", "○○빌딩 ○층", "방문 전 전화 예약 시 상담 대기 없음"),
    default_services=("전세", "월세", "매매"),
    trust_filler="조건 기반으로 빠르게 매물을 좁혀 안내하면 만족도가 높아요",
    photo_checklist=("사무실 외관", "상담 공간", "중개 등록증", "내부 전경"),
    banned_phrases=("확정 수익", "무조건 가능"),
    call_to_action=REAL_ESTATE_CTA,
)

# Education and fitness share a neutral lesson/class template.
NEUTRAL_CLASS = IndustryProfile(
    subcategory="edu_academy",
    intents=("{region} 학원", "{region} 수업", "{region} 상담", "{region} 체험 수업", "{region} 예약"),
    service_keywords=("상담", "체험", "수업", "레슨", "개인", "그룹", "PT", "필라테스", "요가", "입시", "회화"),
    intro="{region}에서 수준에 맞춘 수업을 진행하는 {name}입니다.",
    audience_title="이런 분들께 잘 맞아요",
    audience=("처음 시작하는 분", "목표에 맞춘 커리큘럼이 필요한 분", "일정에 맞춰 꾸준히 다니고 싶은 분"),
    services_title="주요 수업",
    trust_title="운영 포인트",
    directions_lines=("○○역 ○번 출구 → 도보 ○분", "○○빌딩 ○층", "첫 방문 시 10분 전 도착 권장"),
    default_services=("체험 수업", "정규 수업", "상담"),
    default_trust=("수업 시간/정원 안내 명확", "상담 후 수준별 배정", "시설/준비물 안내"),
    photo_checklist=("외관", "수업 공간", "시설/장비", "수업 장면"),
    banned_phrases=("100% 합격", "무조건 효과", "보장"),
)

PROFILES: Dict[str, IndustryProfile] = {
    "fnb_restaurant": FNB_RESTAURANT,
    "fnb_cafe": FNB_CAFE,
    "fnb_pub_bar": FNB_PUB_BAR,
    "beauty_hair_salon": BEAUTY_HAIR_SALON,
    "beauty_nail_shop": BEAUTY_NAIL_SHOP,
    "medical_clinic": MEDICAL_CLINIC,
    "real_estate_office": REAL_ESTATE_OFFICE,
}

# Subcategories without dedicated copy reuse their closest sibling.
FALLBACK_PROFILES: Dict[str, str] = {
    "fnb_delivery_takeout": "fnb_restaurant",
    "beauty_skin_care": "beauty_hair_salon",
    "beauty_waxing": "beauty_hair_salon",
    "medical_dental": "medical_clinic",
    "medical_oriental": "medical_clinic",
    "medical_vet": "medical_clinic",
}


def profile_for(subcategory: str) -> IndustryProfile:
    if subcategory in PROFILES:
        return PROFILES[subcategory]
    if subcategory in FALLBACK_PROFILES:
        return PROFILES[FALLBACK_PROFILES[subcategory]]
    if SUBCATEGORY_TO_VERTICAL.get(subcategory) in {"education", "fitness"}:
        return NEUTRAL_CLASS
    return PROFILES[DEFAULT_SUBCATEGORY]


def banned_phrases_for_vertical(vertical: str) -> List[str]:
    """Union of the banned phrases of every profile serving ``vertical``, first-seen order."""

    phrases: List[str] = []
    profiles: Sequence[IndustryProfile] = list(PROFILES.values()) + [NEUTRAL_CLASS]
    for profile in profiles:
        if SUBCATEGORY_TO_VERTICAL[profile.subcategory] != vertical and not (
            profile is NEUTRAL_CLASS and vertical in {"education", "fitness"}
        ):
            continue
        for phrase in profile.banned_phrases:
            if phrase not in phrases:
                phrases.append(phrase)
    return phrases
