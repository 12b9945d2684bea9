from urllib.parse import quote

import pytest

from placecheck.core.errors import UpstreamError
from placecheck.extract import place
from placecheck.extract.cascade import ExtractionContext
from placecheck.extract.strategies import place_ids_in_text, read_basic_fields
from placecheck.models import FetchedDocument, MenuItem

PLACE_URL = "https://m.place.naver.com/hairshop/1234567/home"


def make_document(text, url=PLACE_URL, **kwargs):
    return FetchedDocument(url=url, final_url=url, status=200, text=text, **kwargs)


def test_extract_place_reads_embedded_payloads(listing_html):
    profile, trail = place.extract_place(make_document(listing_html), PLACE_URL, place_id="1234567")

    assert profile.name == "라온 헤어"
    assert profile.place_id == "1234567"
    assert profile.category == "미용실"
    assert profile.address == "서울 강남구 역삼동 123-4"
    assert profile.road_address == "서울 강남구 테헤란로 12"
    assert profile.keywords == ["강남 미용실", "역삼 헤어", "레이어드컷", "뿌리염색", "두피 클리닉"]
    assert profile.keywords5 == profile.keywords
    assert profile.menus == [
        MenuItem(name="커트", price=25000.0),
        MenuItem(name="디자인 펌", price=120000.0),
        MenuItem(name="뿌리염색", price=70000.0),
    ]
    assert profile.description.startswith("강남역 앞에서")
    assert profile.directions == "강남역 3번 출구에서 도보 3분, 건물 2층입니다."
    assert profile.photos.count == 42
    assert profile.reviews.visitor_count == 120
    assert profile.reviews.rating == 4.6
    assert profile.competitors is None
    assert set(profile.provenance.values()) == {"embedded"}
    assert all(attempt.outcome == "hit" for attempt in trail)


def test_extract_place_falls_back_to_label_text():
    html = (
        "<html><body>"
        "<div>대표키워드</div><div>#강남맛집 #파스타 #데이트</div>"
        "<div>소개</div><p>신선한 재료로 만드는 파스타 전문점입니다.</p>"
        "<div>찾아가는길</div><p>강남역 2번 출구 도보 5분</p>"
        "</body></html>"
    )

    profile, trail = place.extract_place(make_document(html), PLACE_URL)

    assert profile.keywords == ["강남맛집", "파스타", "데이트"]
    assert profile.description == "신선한 재료로 만드는 파스타 전문점입니다."
    assert profile.directions == "강남역 2번 출구 도보 5분"
    assert profile.provenance["keywords"] == "label_text"
    assert "basic_fields" not in profile.provenance
    assert profile.name == ""
    keyword_attempts = [attempt.strategy for attempt in trail if attempt.signal == "keywords"]
    assert keyword_attempts == ["embedded", "frames", "network", "label_text"]


def test_extract_place_reads_frames_and_network(render_listing, place_detail):
    frame_url = "https://pcmap.place.naver.com/hairshop/1234567/home"
    shell = f'<html><body><iframe src="{frame_url}"></iframe></body></html>'
    frame_detail = {"representativeKeywords": ["역삼 미용실", "남자 커트", "다운펌"]}
    documents = {frame_url: make_document(render_listing(frame_detail), url=frame_url)}
    fetched = []

    def fetcher(url):
        fetched.append(url)
        return documents[url]

    observed = [{"result": {"photoCount": 7, "menus": place_detail["menus"]}}]
    profile, _ = place.extract_place(
        make_document(shell, observed_payloads=observed), PLACE_URL, fetcher=fetcher
    )

    assert profile.keywords == ["역삼 미용실", "남자 커트", "다운펌"]
    assert profile.provenance["keywords"] == "frames"
    assert profile.provenance["photo_count"] == "network"
    assert profile.photos.count == 7
    assert len(profile.menus) == 3
    assert fetched == [frame_url]


def test_og_title_wins_over_payload_name(render_listing, place_detail):
    html = render_listing(place_detail).replace(
        "<title>place</title>", '<meta property="og:title" content="라온 헤어 역삼점 : 네이버">'
    )
    document = make_document(html)
    ctx = ExtractionContext(document)

    result = read_basic_fields(ctx.payloads, ctx)

    assert result.items["name"] == "라온 헤어 역삼점"


def test_place_ids_in_text():
    text = '{"placeId":"1234567"} <a href="/hairshop/2222222/home"></a> <a href="/place/3333333"></a> "id":"42"'
    assert place_ids_in_text(text) == ["1234567", "2222222", "3333333"]


def test_deep_depth_scans_competitors(listing_html, render_listing):
    search_url = place.SEARCH_URL.format(query=quote("강남구 미용실"))
    search_html = '{"placeId":"1234567"} <a href="/hairshop/2222222/home"></a> <a href="/place/3333333"></a>'
    rival_html = render_listing({"representativeKeywords": ["강남 헤어샵", "강남 펌", "홈", "강남 펌"]})
    documents = {
        search_url: make_document(search_html, url=search_url),
        place.PLACE_HOME_URL.format(place_id="2222222"): make_document(rival_html),
    }

    def fetcher(url):
        if url not in documents:
            raise UpstreamError(f"no document for {url}")
        return documents[url]

    profile, trail = place.extract_place(
        make_document(listing_html), PLACE_URL, place_id="1234567", fetcher=fetcher, depth="deep"
    )

    assert [competitor.place_id for competitor in profile.competitors] == ["2222222", "3333333"]
    assert profile.competitors[0].keywords5 == ["강남 헤어샵", "강남 펌"]
    assert profile.competitors[0].place_url == "https://m.place.naver.com/place/2222222/home"
    assert profile.competitors[1].keywords5 == []
    assert any(attempt.signal == "competitors" and attempt.outcome == "hit" for attempt in trail)
    keyword_hits = [attempt for attempt in trail if attempt.signal == "keywords" and attempt.outcome == "hit"]
    assert len(keyword_hits) == 2


def test_standard_depth_never_fetches(listing_html):
    def fetcher(url):
        pytest.fail(f"unexpected fetch of {url}")

    profile, _ = place.extract_place(make_document(listing_html), PLACE_URL, fetcher=fetcher)

    assert profile.competitors is None


def test_competitor_query_needs_region_or_category():
    profile, _ = place.extract_place(make_document("<html></html>"), PLACE_URL)
    assert place.competitor_query(profile) is None
    assert place.scan_competitors(profile, fetcher=lambda url: None, trail=[]) == []
