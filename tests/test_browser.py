import threading

import pytest
import requests
from playwright.sync_api import Error as PlaywrightError

from placecheck.core.cache import DocumentCache
from placecheck.core.errors import UpstreamError
from placecheck.vendors import browser
from placecheck.models import FetchedDocument

URL = "https://m.place.naver.com/place/1234567/home"


def make_document(text="<html><body>라온 헤어</body></html>", status=200, url=URL):
    return FetchedDocument(url=url, final_url=url, status=status, text=text)


class DummyClient:
    def __init__(self, documents):
        self.documents = documents
        self.calls = []

    def fetch(self, url):
        self.calls.append(url)
        return self.documents[url]


def test_detect_block_on_rate_limit():
    blocked = browser.detect_block(make_document("Too Many Requests", status=429))
    assert blocked.reason == "rate_limited"
    assert blocked.to_payload() == {
        "ok": False,
        "blocked": True,
        "reason": "rate_limited",
        "message": "The listing host is rate limiting requests.",
        "snippet": "Too Many Requests",
    }


def test_detect_block_on_restriction_marker():
    html = "<html><body><h1>서비스 이용이 제한되었습니다</h1><p>잠시 후 다시 시도해 주세요.</p></body></html>"
    blocked = browser.detect_block(make_document(html))
    assert blocked.reason == "marker:서비스 이용이 제한"
    assert blocked.snippet.startswith("서비스 이용이 제한되었습니다")
    assert "<h1>" not in blocked.snippet


def test_detect_block_ignores_markup_only_matches():
    html = '<html><head><meta name="robots" content="noindex"></head><body>라온 헤어</body></html>'
    assert browser.detect_block(make_document(html)) is None


def test_cached_fetcher_serves_repeat_requests_from_cache():
    client = DummyClient({URL: make_document()})
    cache = DocumentCache()

    first = browser.CachedFetcher(client, cache)
    first(URL)
    second = browser.CachedFetcher(client, cache)
    document = second(URL)

    assert client.calls == [URL]
    assert document.text.endswith("</html>")
    assert URL not in first.hits
    assert URL in second.hits


def test_cached_fetcher_skips_blocked_and_client_errors():
    blocked_url = "https://m.place.naver.com/place/1/home"
    missing_url = "https://m.place.naver.com/place/2/home"
    client = DummyClient(
        {
            blocked_url: make_document("<p>과도한 접근 요청으로 차단</p>", url=blocked_url),
            missing_url: make_document("not found", status=404, url=missing_url),
        }
    )
    fetcher = browser.CachedFetcher(client, DocumentCache())

    fetcher(blocked_url)
    fetcher(blocked_url)
    fetcher(missing_url)
    fetcher(missing_url)

    assert client.calls == [blocked_url, blocked_url, missing_url, missing_url]


def test_cached_fetcher_raises_on_server_errors():
    client = DummyClient({URL: make_document("oops", status=502)})
    with pytest.raises(UpstreamError):
        browser.CachedFetcher(client, DocumentCache())(URL)


class DummyResponse:
    def __init__(self, text="<html></html>", status_code=200, url=URL):
        self.text = text
        self.status_code = status_code
        self.url = url


class DummySession:
    def __init__(self, response=None, exc=None):
        self.headers = {}
        self.response = response
        self.exc = exc
        self.calls = []
        self.closed = False

    def get(self, url, timeout=None, allow_redirects=None):
        self.calls.append((url, timeout))
        if self.exc is not None:
            raise self.exc
        return self.response

    def close(self):
        self.closed = True


def test_requests_client_fetch():
    session = DummySession(DummyResponse("<p>ok</p>", url="https://m.place.naver.com/place/1234567/home?x=1"))
    client = browser.RequestsDocumentClient(session=session, timeout=3)

    document = client.fetch(URL)
    client.close()

    assert document.status == 200
    assert document.final_url.endswith("?x=1")
    assert document.observed_payloads == []
    assert session.calls == [(URL, 3)]
    assert session.headers["User-Agent"] == browser.USER_AGENT
    assert session.closed


def test_requests_client_wraps_transport_errors():
    client = browser.RequestsDocumentClient(session=DummySession(exc=requests.ConnectionError("reset")))
    with pytest.raises(UpstreamError):
        client.fetch(URL)


@pytest.mark.parametrize(
    "script",
    [
        '<script>window.__SEO__={"robots":"index,follow"};</script>',
        '<script>var recaptchaSiteKey="k";</script>',
    ],
)
def test_detect_block_ignores_script_bodies(listing_html, script):
    html = listing_html.replace("</body>", script + "</body>")
    assert browser.detect_block(make_document(html)) is None


class FakePage:
    def __init__(self, url):
        self.url = url
        self.main_frame = object()
        self.frames = [self.main_frame]

    def on(self, event, handler):
        pass

    def goto(self, url, wait_until=None, timeout=None):
        self.url = url
        return type("Response", (), {"status": 200})()

    def content(self):
        return "<html><body>라온 헤어</body></html>"

    def close(self):
        pass


class FakeContext:
    def new_page(self):
        return FakePage("about:blank")

    def close(self):
        pass


class FakeBrowser:
    def __init__(self, thread):
        self.thread = thread
        self.closed = False

    def new_context(self, **kwargs):
        return FakeContext()

    def close(self):
        self.closed = True


class FakeDriver:
    def __init__(self, registry):
        self.registry = registry
        self.chromium = self
        self.stopped = False

    def launch(self, headless=True, args=None):
        failure = self.registry["failures"].pop(0) if self.registry["failures"] else None
        if failure is not None:
            raise failure
        launched = FakeBrowser(threading.current_thread().name)
        self.registry["browsers"].append(launched)
        return launched

    def stop(self):
        self.stopped = True


@pytest.fixture
def fake_playwright(monkeypatch):
    registry = {"failures": [], "browsers": [], "drivers": []}

    class Starter:
        def start(self):
            driver = FakeDriver(registry)
            registry["drivers"].append(driver)
            return driver

    monkeypatch.setattr(browser, "sync_playwright", lambda: Starter())
    return registry


def test_playwright_launch_failure_is_wrapped_and_retried(fake_playwright):
    fake_playwright["failures"].append(PlaywrightError("Executable doesn't exist"))
    client = browser.PlaywrightDocumentClient()

    with pytest.raises(UpstreamError):
        client.fetch(URL)
    document = client.fetch(URL)

    assert fake_playwright["drivers"][0].stopped
    assert len(fake_playwright["drivers"]) == 2
    assert document.status == 200
    assert document.final_url == URL


def test_playwright_browser_is_owned_per_thread(fake_playwright):
    client = browser.PlaywrightDocumentClient()
    client.fetch(URL)
    client.fetch(URL)

    errors = []

    def worker():
        try:
            client.fetch(URL)
            client.close()
        except Exception as exc:  # noqa: BLE001
            errors.append(exc)

    thread = threading.Thread(target=worker, name="request-2")
    thread.start()
    thread.join()
    client.close()

    assert errors == []
    owners = [launched.thread for launched in fake_playwright["browsers"]]
    assert owners == [threading.current_thread().name, "request-2"]
    assert all(launched.closed for launched in fake_playwright["browsers"])
    assert all(driver.stopped for driver in fake_playwright["drivers"])
