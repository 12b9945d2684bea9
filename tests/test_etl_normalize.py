from placecheck.etl import normalize
from placecheck.models import UNKNOWN_NAME, PlaceProfile, Photos, Reviews


def test_format_phone():
    assert normalize.format_phone("02-555-1234") == "+8225551234"
    assert normalize.format_phone("010-1234-5678") == "+821012345678"
    assert normalize.format_phone(" 문의 요망 ") == "문의 요망"
    assert normalize.format_phone("") is None
    assert normalize.format_phone(None) is None


def test_normalize_profile_fills_sentinel_and_cleans_fields():
    raw = PlaceProfile(
        place_url="https://m.place.naver.com/place/1/home",
        name="  ",
        category="",
        address=" 서울 강남구 역삼동 1 ",
        phone="02-555-1234",
        tags=["  데이트 ", "데이트", "", "분위기  좋은"],
        amenities=[],
        keywords=[],
        reviews=Reviews(visitor_count=-3, blog_count=4, rating=7.5),
        photos=Photos(count=-1),
    )

    profile = normalize.normalize_profile(raw)

    assert profile.name == UNKNOWN_NAME
    assert profile.category is None
    assert profile.address == "서울 강남구 역삼동 1"
    assert profile.phone == "+8225551234"
    assert profile.tags == ["데이트", "분위기 좋은"]
    assert profile.amenities is None
    assert profile.keywords is None
    assert profile.reviews == Reviews(visitor_count=None, blog_count=4, rating=None)
    assert profile.photos.count is None


def test_normalize_profile_does_not_mutate_input():
    raw = PlaceProfile(place_url="u", name="", tags=["a b"], reviews=Reviews(visitor_count=-1))

    normalize.normalize_profile(raw)

    assert raw.name == ""
    assert raw.reviews.visitor_count == -1


def test_normalize_profile_keeps_absent_fields_absent():
    profile = normalize.normalize_profile(PlaceProfile(place_url="u", name="라온"))
    assert profile.name == "라온"
    assert profile.description is None
    assert profile.menus is None
    assert profile.phone is None


def test_tags_dedupe_after_collapsing_whitespace():
    raw = PlaceProfile(place_url="u", name="라온", tags=["주차  가능", "주차 가능", " ", "단체석"])
    assert normalize.normalize_profile(raw).tags == ["주차 가능", "단체석"]
