"""Ordered fallback strategy chains with a uniform attempt trail."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from bs4 import BeautifulSoup

from placecheck.extract.payloads import embedded_payloads, iframe_urls, parse_html, visible_text
from placecheck.models import FetchedDocument

logger = logging.getLogger(__name__)

MAX_FRAMES = 5

HIT = "hit"
EMPTY = "empty"
ERROR = "error"


@dataclass(slots=True)
class StrategyResult:
    items: Any
    debug: Dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class CascadeAttempt:
    signal: str
    strategy: str
    elapsed_ms: int
    outcome: str
    count: int = 0
    detail: Dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class CascadeResult:
    signal: str
    items: Any
    strategy: Optional[str]
    trail: List[CascadeAttempt] = field(default_factory=list)

    @property
    def found(self) -> bool:
        return self.strategy is not None


class ExtractionContext:
    """Per-request view over one fetched document and the frames it references.

    Parsed payloads and frame documents are memoized for the lifetime of the
    context only; nothing here outlives a single analysis.
    """

    def __init__(
        self,
        document: FetchedDocument,
        *,
        fetcher: Optional[Callable[[str], FetchedDocument]] = None,
        max_frames: int = MAX_FRAMES,
    ) -> None:
        self.document = document
        self.fetcher = fetcher
        self.max_frames = max_frames
        self.trail: List[CascadeAttempt] = []
        self._payloads: Optional[List[Any]] = None
        self._soup: Optional[BeautifulSoup] = None
        self._text: Optional[str] = None
        self._frames: Optional[List[Tuple[str, FetchedDocument]]] = None
        self._frame_errors: Dict[str, str] = {}

    @property
    def payloads(self) -> List[Any]:
        if self._payloads is None:
            self._payloads = embedded_payloads(self.document.text)
        return self._payloads

    @property
    def network_payloads(self) -> List[Any]:
        return list(self.document.observed_payloads or [])

    @property
    def soup(self) -> BeautifulSoup:
        if self._soup is None:
            self._soup = parse_html(self.document.text)
        return self._soup

    @property
    def text(self) -> str:
        if self._text is None:
            self._text = visible_text(self.document.text)
        return self._text

    def frame_urls(self) -> List[str]:
        seen = {self.document.url, self.document.final_url}
        urls: List[str] = []
        for url in list(self.document.frame_urls or []) + iframe_urls(self.document.text):
            if not url or url in seen or url == "about:blank":
                continue
            seen.add(url)
            urls.append(url)
        return urls[: self.max_frames]

    def frame_documents(self) -> List[Tuple[str, FetchedDocument]]:
        if self._frames is not None:
            return self._frames
        self._frames = []
        if self.fetcher is None:
            return self._frames
        for url in self.frame_urls():
            try:
                self._frames.append((url, self.fetcher(url)))
            except Exception as exc:  # noqa: BLE001
                logger.warning("Frame fetch failed for %s: %s", url, exc)
                self._frame_errors[url] = str(exc)
        return self._frames

    @property
    def frame_errors(self) -> Dict[str, str]:
        return dict(self._frame_errors)

    def for_document(self, document: FetchedDocument) -> "ExtractionContext":
        """A child context for a frame document; it never fetches further frames."""
        return ExtractionContext(document, fetcher=None, max_frames=0)


class Strategy:
    """One independent way of extracting a signal."""

    name = "strategy"

    def attempt(self, ctx: ExtractionContext) -> StrategyResult:
        raise NotImplementedError


def _size(items: Any) -> int:
    if items is None:
        return 0
    if isinstance(items, (list, tuple, dict, set)):
        return len(items)
    return 1


class Cascade:
    """Run strategies in priority order and stop at the first non-empty validated result."""

    def __init__(
        self,
        signal: str,
        strategies: Sequence[Strategy],
        validate: Callable[[Any], Any],
        *,
        empty: Callable[[], Any] = list,
    ) -> None:
        self.signal = signal
        self.strategies = list(strategies)
        self.validate = validate
        self.empty = empty

    def run(self, ctx: ExtractionContext) -> CascadeResult:
        trail: List[CascadeAttempt] = []
        for strategy in self.strategies:
            started = time.perf_counter()
            try:
                result = strategy.attempt(ctx)
                items = self.validate(result.items)
            except Exception as exc:  # noqa: BLE001
                elapsed_ms = int((time.perf_counter() - started) * 1000)
                logger.warning("%s strategy %s failed: %s", self.signal, strategy.name, exc)
                attempt = CascadeAttempt(self.signal, strategy.name, elapsed_ms, ERROR, detail={"error": str(exc)})
                trail.append(attempt)
                ctx.trail.append(attempt)
                continue

            elapsed_ms = int((time.perf_counter() - started) * 1000)
            outcome = HIT if _size(items) else EMPTY
            attempt = CascadeAttempt(self.signal, strategy.name, elapsed_ms, outcome, _size(items), result.debug)
            trail.append(attempt)
            ctx.trail.append(attempt)
            if outcome == HIT:
                logger.debug("%s resolved by %s (%d items)", self.signal, strategy.name, _size(items))
                return CascadeResult(self.signal, items, strategy.name, trail)

        logger.info("%s exhausted %d strategies without a result", self.signal, len(self.strategies))
        return CascadeResult(self.signal, self.empty(), None, trail)
