import base64
import hashlib
import hmac

import pytest

from placecheck.vendors import searchad


class DummyResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self._payload = payload or {}
        self.text = str(self._payload)

    def json(self):
        return self._payload


class DummySession:
    def __init__(self):
        self.calls = []

    def get(self, url, params=None, headers=None, timeout=None):
        self.calls.append((url, params, headers, timeout))
        return self.response


@pytest.fixture
def patch_session(monkeypatch):
    session = DummySession()
    monkeypatch.setattr(searchad, "_SESSION", session)
    return session


def test_sign_matches_hmac_sha256():
    expected = base64.b64encode(
        hmac.new(b"secret", b"1700000000000.GET./keywordstool", hashlib.sha256).digest()
    ).decode("ascii")
    assert searchad.sign("1700000000000", "GET", "/keywordstool", "secret") == expected


def test_keyword_tool_sends_signed_request(patch_session):
    patch_session.response = DummyResponse(payload={"keywordList": [{"relKeyword": "강남미용실"}]})

    rows = searchad.keyword_tool(["강남미용실", "역삼헤어"], "api", "secret", "777", timeout=5)

    url, params, headers, timeout = patch_session.calls[0]
    assert url == "https://api.searchad.naver.com/keywordstool"
    assert params == {"hintKeywords": "강남미용실,역삼헤어", "showDetail": "1"}
    assert headers["X-API-KEY"] == "api"
    assert headers["X-Customer"] == "777"
    assert headers["X-Signature"] == searchad.sign(headers["X-Timestamp"], "GET", "/keywordstool", "secret")
    assert timeout == 5
    assert rows == [{"relKeyword": "강남미용실"}]


def test_keyword_tool_error_status(patch_session):
    patch_session.response = DummyResponse(status_code=403, payload={"title": "Forbidden"})
    with pytest.raises(searchad.SearchAdError):
        searchad.keyword_tool(["a"], "api", "secret", "777")


class FakeLookup:
    def __init__(self, fail_on=()):
        self.calls = []
        self.fail_on = fail_on

    def __call__(self, hints, api_key, secret_key, customer_id, timeout=None):
        self.calls.append(list(hints))
        if len(self.calls) in self.fail_on:
            raise searchad.SearchAdError("keywordstool answered 500")
        return [
            {"relKeyword": hint, "monthlyPcQcCnt": "< 10", "monthlyMobileQcCnt": 120}
            for hint in hints
        ]


def test_unconfigured_service_reports_unknown():
    lookup = FakeLookup()
    service = searchad.KeywordVolumeService("", "", "", lookup=lookup)

    volumes = service.volumes(["강남 미용실", "역삼 헤어"])

    assert volumes == {"강남 미용실": "unknown", "역삼 헤어": "unknown"}
    assert lookup.calls == []


def test_failed_chunk_only_affects_its_own_keywords():
    keywords = [f"키워드 {index}" for index in range(7)]
    lookup = FakeLookup(fail_on=(1,))
    service = searchad.KeywordVolumeService("api", "secret", "777", lookup=lookup)

    volumes = service.volumes(keywords)

    assert [len(chunk) for chunk in lookup.calls] == [5, 2]
    assert all(volumes[keyword] == "unknown" for keyword in keywords[:5])
    assert volumes["키워드 5"] == {"pc": 10, "mobile": 120, "total": 130}
    assert lookup.calls[1] == ["키워드5", "키워드6"]


def test_resolved_volumes_are_cached():
    lookup = FakeLookup()
    service = searchad.KeywordVolumeService("api", "secret", "777", lookup=lookup)

    service.volumes(["강남 미용실"])
    again = service.volumes(["강남 미용실", "강남미용실"])

    assert len(lookup.calls) == 1
    assert again["강남 미용실"]["total"] == 130
    assert again["강남미용실"]["total"] == 130


def test_missing_rows_stay_unknown_and_are_retried():
    calls = []

    def lookup(hints, *args, **kwargs):
        calls.append(hints)
        return []

    service = searchad.KeywordVolumeService("api", "secret", "777", lookup=lookup)

    assert service.volumes(["희귀 키워드"]) == {"희귀 키워드": "unknown"}
    service.volumes(["희귀 키워드"])
    assert len(calls) == 2
