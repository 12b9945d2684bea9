"""Document clients that render or download listing pages."""

from __future__ import annotations

import logging
import re
import threading
from typing import Any, List, Optional, Set

import requests
from playwright.sync_api import Error as PlaywrightError, TimeoutError as PlaywrightTimeoutError, sync_playwright

from placecheck.core.cache import DocumentCache
from placecheck.core.errors import ExtractionBlocked, UpstreamError
from placecheck.extract.payloads import visible_text
from placecheck.models import FetchedDocument

logger = logging.getLogger(__name__)

USER_AGENT = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.0 Mobile/15E148 Safari/604.1"
)
DEFAULT_TIMEOUT = 15
MAX_OBSERVED_PAYLOADS = 60
MAX_OBSERVED_BYTES = 2_000_000
SNIPPET_LENGTH = 300

BLOCKED_MARKERS = (
    "서비스 이용이 제한",
    "과도한 접근",
    "접근이 제한",
    "비정상적인 접근",
    "권한이 없습니다",
    "captcha",
    "robot",
)


class PlaywrightDocumentClient:
    """Render pages in headless Chromium and keep the JSON traffic seen on the way.

    The sync API is bound to the thread that started it, so every thread
    gets its own Playwright driver and browser.
    """

    def __init__(self, timeout_ms: int = DEFAULT_TIMEOUT * 1000) -> None:
        self._local = threading.local()
        self._timeout_ms = timeout_ms

    def _ensure_browser(self) -> Any:
        browser = getattr(self._local, "browser", None)
        if browser is not None:
            return browser
        driver = sync_playwright().start()
        try:
            browser = driver.chromium.launch(headless=True, args=["--no-sandbox"])
        except PlaywrightError as exc:
            driver.stop()
            raise UpstreamError(f"Could not launch the browser: {exc}") from exc
        self._local.playwright = driver
        self._local.browser = browser
        logger.info("Started headless browser for %s", threading.current_thread().name)
        return browser

    def fetch(self, url: str) -> FetchedDocument:
        browser = self._ensure_browser()
        context = browser.new_context(user_agent=USER_AGENT, locale="ko-KR")
        page = context.new_page()
        observed: List[Any] = []

        def _capture(response) -> None:
            if len(observed) >= MAX_OBSERVED_PAYLOADS:
                return
            content_type = (response.headers.get("content-type") or "").lower()
            if "json" not in content_type:
                return
            try:
                body = response.body()
                if len(body) > MAX_OBSERVED_BYTES:
                    return
                observed.append(response.json())
            except (PlaywrightError, ValueError) as exc:
                logger.debug("Skipping unreadable response body from %s: %s", response.url, exc)

        page.on("response", _capture)
        try:
            response = page.goto(url, wait_until="networkidle", timeout=self._timeout_ms)
            frame_urls = [frame.url for frame in page.frames if frame is not page.main_frame and frame.url]
            return FetchedDocument(
                url=url,
                final_url=page.url,
                status=response.status if response is not None else None,
                text=page.content(),
                observed_payloads=observed,
                frame_urls=frame_urls,
            )
        except PlaywrightTimeoutError as exc:
            raise UpstreamError(f"Timed out rendering {url}") from exc
        except PlaywrightError as exc:
            raise UpstreamError(f"Rendering failed for {url}: {exc}") from exc
        finally:
            page.close()
            context.close()

    def close(self) -> None:
        """Shut down the browser owned by the calling thread."""
        browser = getattr(self._local, "browser", None)
        if browser is not None:
            browser.close()
            self._local.browser = None
        driver = getattr(self._local, "playwright", None)
        if driver is not None:
            driver.stop()
            self._local.playwright = None


class RequestsDocumentClient:
    """Plain HTTP client; never observes network payloads."""

    def __init__(self, session: Optional[requests.Session] = None, timeout: float = DEFAULT_TIMEOUT) -> None:
        self.session = session or requests.Session()
        self.session.headers.setdefault("User-Agent", USER_AGENT)
        self.session.headers.setdefault("Accept", "text/html,application/xhtml+xml")
        self.session.headers.setdefault("Accept-Language", "ko-KR,ko;q=0.9")
        self.timeout = timeout

    def fetch(self, url: str) -> FetchedDocument:
        try:
            response = self.session.get(url, timeout=self.timeout, allow_redirects=True)
        except requests.RequestException as exc:  # noqa: BLE001
            raise UpstreamError(f"Failed to fetch {url}: {exc}") from exc
        return FetchedDocument(url=url, final_url=response.url, status=response.status_code, text=response.text)

    def close(self) -> None:
        self.session.close()


def detect_block(document: FetchedDocument) -> Optional[ExtractionBlocked]:
    """Return an ``ExtractionBlocked`` when the document is a restriction or challenge page."""

    stripped = re.sub(r"\s+", " ", visible_text(document.text or "")).strip()
    snippet = stripped[:SNIPPET_LENGTH]
    if document.status == 429:
        return ExtractionBlocked(
            "The listing host is rate limiting requests.", reason="rate_limited", snippet=snippet, status=429
        )
    lowered = stripped.lower()
    for marker in BLOCKED_MARKERS:
        if marker in lowered:
            return ExtractionBlocked(
                "The listing host returned an access restriction page.",
                reason=f"marker:{marker}",
                snippet=snippet,
                status=document.status,
            )
    return None


class CachedFetcher:
    """URL-keyed document cache in front of a document client.

    Blocked pages and error statuses are never cached. ``hits`` records the
    URLs this fetcher served from the cache.
    """

    def __init__(self, client: Any, cache: Optional[DocumentCache] = None) -> None:
        self.client = client
        self.cache = cache
        self.hits: Set[str] = set()

    def __call__(self, url: str) -> FetchedDocument:
        if self.cache is not None:
            hit = self.cache.get(url)
            if hit is not None:
                logger.debug("Document cache hit for %s", url)
                self.hits.add(url)
                return hit
        document = self.client.fetch(url)
        if document.status is not None and document.status >= 500:
            raise UpstreamError(f"Listing host answered {document.status} for {url}")
        if self.cache is not None and (document.status or 200) < 400 and detect_block(document) is None:
            self.cache.set(url, document)
        return document
