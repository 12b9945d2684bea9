"""End-to-end place analysis pipeline."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from placecheck.analysis.plan import apply_plan
from placecheck.analysis.recommend import attach_volumes, recommend
from placecheck.analysis.scoring import score_place
from placecheck.core.cache import DocumentCache, KeywordVolumeCache
from placecheck.core.config import ConfigError, Settings, get_settings
from placecheck.etl.normalize import normalize_profile
from placecheck.extract.place import extract_place
from placecheck.industry.classifier import classify
from placecheck.models import ResolvedPlace, to_payload
from placecheck.services.resolve import canonical_place_url, resolve_business
from placecheck.vendors.browser import CachedFetcher, PlaywrightDocumentClient, RequestsDocumentClient, detect_block
from placecheck.vendors.searchad import KeywordVolumeService

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class AnalyzeRequest:
    mode: str
    place_url: Optional[str] = None
    name: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    plan: str = "free"
    language: str = "ko"
    depth: str = "standard"
    debug: bool = False


@dataclass
class AnalysisServices:
    """Process-wide collaborators, built once and shared by every request."""

    settings: Settings
    client: Any
    document_cache: DocumentCache
    volumes: KeywordVolumeService
    local_search: Optional[Callable[..., Any]] = None

    def close(self) -> None:
        close = getattr(self.client, "close", None)
        if close is not None:
            close()


def build_services(settings: Optional[Settings] = None) -> AnalysisServices:
    settings = settings or get_settings()
    if settings.document_client == "http":
        client: Any = RequestsDocumentClient(timeout=settings.request_timeout_seconds)
    elif settings.document_client == "playwright":
        client = PlaywrightDocumentClient(timeout_ms=int(settings.request_timeout_seconds * 1000))
    else:
        raise ConfigError(f"Unsupported document client: {settings.document_client!r}")
    return AnalysisServices(
        settings=settings,
        client=client,
        document_cache=DocumentCache(settings.document_cache_size, settings.document_cache_ttl_seconds),
        volumes=KeywordVolumeService(
            settings.searchad_api_key,
            settings.searchad_secret_key,
            settings.searchad_customer_id,
            cache=KeywordVolumeCache(ttl=settings.keyword_volume_cache_ttl_seconds),
            timeout=settings.request_timeout_seconds,
        ),
    )


def resolve(request: AnalyzeRequest, services: AnalysisServices, fetcher: CachedFetcher) -> ResolvedPlace:
    if request.mode == "place_url":
        return canonical_place_url(request.place_url or "")
    kwargs: Dict[str, Any] = {"settings": services.settings, "fetcher": fetcher}
    if services.local_search is not None:
        kwargs["search"] = services.local_search
    return resolve_business(request.name or "", request.address or "", request.phone, **kwargs)


def analyze(request: AnalyzeRequest, services: AnalysisServices) -> Dict[str, Any]:
    """Run the whole pipeline and return the JSON-ready response body.

    Resolution and upstream errors propagate; a blocked document is returned
    as a structured payload instead.
    """

    request_id = uuid.uuid4().hex
    fetcher = CachedFetcher(services.client, services.document_cache)
    resolved = resolve(request, services, fetcher)
    logger.info("[%s] Analyzing %s (mode=%s depth=%s)", request_id, resolved.place_url, request.mode, request.depth)

    document = fetcher(resolved.place_url)
    blocked = detect_block(document)
    if blocked is not None:
        logger.warning("[%s] Blocked while fetching %s: %s", request_id, resolved.place_url, blocked.reason)
        return blocked.to_payload()

    raw, trail = extract_place(
        document,
        resolved.place_url,
        place_id=resolved.place_id,
        fetcher=fetcher,
        depth=request.depth,
    )
    place = normalize_profile(raw, services.settings.default_phone_region)
    industry = classify(place)
    scores = score_place(place, industry.vertical)
    full = recommend(place, scores, industry.subcategory)

    volumes = services.volumes.volumes(pick.keyword for pick in full.keywords5)
    attach_volumes(full.keywords5, volumes)
    gated = apply_plan(request.plan, full)

    body: Dict[str, Any] = {
        "meta": {
            "requestId": request_id,
            "mode": request.mode,
            "plan": request.plan,
            "placeUrl": resolved.place_url,
            "resolvedFrom": resolved.resolved_from,
            "confidence": resolved.confidence,
            "fetchedAt": datetime.now(timezone.utc).isoformat(),
            "cached": resolved.place_url in fetcher.hits,
        },
        "industry": to_payload(industry),
        "place": to_payload(place, exclude={"provenance"}),
        "scores": to_payload(scores),
        "recommend": to_payload(gated),
    }
    if request.debug:
        body["debug"] = {"provenance": dict(place.provenance), "trail": to_payload(trail)}
    logger.info("[%s] Done: %s grade=%s total=%d", request_id, industry.subcategory, scores.grade, scores.total)
    return body

