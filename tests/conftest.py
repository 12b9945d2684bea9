import copy
import json
import sys
from pathlib import Path

import pytest

# Ensure the `placecheck` package is importable when running pytest from the repo root.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


PLACE_DETAIL = {
    "placeId": "1234567",
    "name": "라온 헤어",
    "category": "미용실",
    "address": "서울 강남구 역삼동 123-4",
    "roadAddress": "서울 강남구 테헤란로 12",
    "phone": "02-555-1234",
    "representativeKeywords": ["강남 미용실", "역삼 헤어", "레이어드컷", "뿌리염색", "두피 클리닉", "강남 미용실"],
    "visitorReviewCount": 120,
    "blogReviewCount": 15,
    "rating": 4.6,
    "intro": "강남역 앞에서 1:1 상담 후 커트와 염색을 진행하는 헤어샵입니다.",
    "wayToCome": "강남역 3번 출구에서 도보 3분, 건물 2층입니다.",
    "menus": [
        {"name": "커트", "price": 25000},
        {"name": "디자인 펌", "price": "120,000원"},
        {"name": "뿌리염색", "price": 70000},
    ],
    "photoCount": 42,
}


def next_data_html(detail):
    next_data = {
        "props": {"pageProps": {"dehydratedState": {"queries": [{"state": {"data": {"placeDetail": detail}}}]}}}
    }
    return (
        "<html><head><title>place</title></head><body>"
        f'<script id="__NEXT_DATA__" type="application/json">{json.dumps(next_data, ensure_ascii=False)}</script>'
        "</body></html>"
    )


@pytest.fixture
def listing_html():
    return next_data_html(PLACE_DETAIL)


@pytest.fixture
def place_detail():
    return copy.deepcopy(PLACE_DETAIL)


@pytest.fixture
def render_listing():
    return next_data_html
