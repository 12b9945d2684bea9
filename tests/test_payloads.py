import json

from placecheck.extract import payloads


def test_embedded_payloads_order():
    next_data = {"props": {"pageProps": {"dehydratedState": {"queries": [{"state": {"data": {"q": 1}}}, None]}}}}
    html = (
        f'<script id="__NEXT_DATA__">{json.dumps(next_data)}</script>'
        '<script type="application/ld+json">{"@type": "LocalBusiness", "name": "라온"}</script>'
        '<script>window.__APOLLO_STATE__ = {"Place:1": {"keywordList": ["a"]}};</script>'
        "<script>console.log('unrelated')</script>"
    )

    found = payloads.embedded_payloads(html)

    assert found[0] == {"q": 1}
    assert found[1] == next_data
    assert found[2]["@type"] == "LocalBusiness"
    assert found[3] == {"Place:1": {"keywordList": ["a"]}}
    assert len(found) == 4


def test_embedded_payloads_tolerates_broken_json():
    html = '<script id="__NEXT_DATA__">{not json</script><script type="application/ld+json">[</script>'
    assert payloads.embedded_payloads(html) == []


def test_first_json_block_ignores_braces_in_strings():
    text = 'x = {"a": "}{", "b": [1, {"c": "\\"]"}]}; tail();'
    assert payloads.first_json_block(text) == '{"a": "}{", "b": [1, {"c": "\\"]"}]}'
    assert payloads.first_json_block("no json here") is None


def test_deep_find_helpers():
    data = [{"outer": {"inner": [{"visitorReviewCount": "1,234"}]}}, {"name": "  "}, {"name": "라온"}]

    assert payloads.deep_find(data[0], "visitorReviewCount") == "1,234"
    assert payloads.deep_find_number(data, ["missing", "visitorReviewCount"]) == 1234.0
    assert payloads.deep_find_string(data, ["name"]) == "라온"
    assert payloads.deep_find_any(data, ["nope"]) is None


def test_items_under_unwraps_containers():
    data = [{"keywordList": {"items": ["a", "b"]}, "photos": {"elements": [1, 2, 3]}}, {"images": [1]}]

    assert payloads.items_under(data, ["keywordList"]) == {"keywordList": ["a", "b"]}
    assert payloads.longest_list_under(data, ["photos", "images"]) == 3


def test_text_helpers():
    html = (
        '<html><head><meta property="og:title" content="라온 헤어 : 네이버"></head>'
        "<body><script>var a = 1;</script><div>소개</div><p>안녕하세요</p>"
        '<iframe src="https://pcmap.place.naver.com/place/1/home"></iframe><iframe src="about:blank"></iframe>'
        "</body></html>"
    )

    soup = payloads.parse_html(html)

    assert payloads.meta_content(soup, prop="og:title") == "라온 헤어 : 네이버"
    assert payloads.meta_content(soup, name="description") is None
    assert payloads.iframe_urls(html) == ["https://pcmap.place.naver.com/place/1/home"]
    text = payloads.visible_text(html)
    assert "var a" not in text
    assert payloads.text_after_label(text, "소개", 6).strip() == "안녕하세요"
    assert payloads.text_after_label(text, "없음") is None
