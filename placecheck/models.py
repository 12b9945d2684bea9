"""Core data models shared by the place analysis pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field, fields, is_dataclass
from typing import Any, Dict, List, Optional

UNKNOWN_NAME = "UNKNOWN"
UNKNOWN_VOLUME = "unknown"


@dataclass(slots=True)
class FetchedDocument:
    """A rendered document as returned by a document client."""

    url: str
    final_url: str
    status: Optional[int]
    text: str
    observed_payloads: List[Any] = field(default_factory=list, repr=False)
    frame_urls: List[str] = field(default_factory=list)


@dataclass(slots=True)
class ResolvedPlace:
    place_url: str
    place_id: Optional[str] = None
    confidence: float = 0.2
    resolved_from: Optional[str] = None


@dataclass(slots=True)
class MenuItem:
    name: str
    price: Optional[float] = None
    duration_min: Optional[float] = None
    note: Optional[str] = None


@dataclass(slots=True)
class Competitor:
    place_id: str
    place_url: str
    keywords5: List[str] = field(default_factory=list)


@dataclass(slots=True)
class Reviews:
    visitor_count: Optional[int] = None
    blog_count: Optional[int] = None
    rating: Optional[float] = None


@dataclass(slots=True)
class Photos:
    count: Optional[int] = None


@dataclass(slots=True)
class PlaceProfile:
    """Canonical snapshot of a business listing."""

    place_url: str
    name: str = UNKNOWN_NAME
    place_id: Optional[str] = None
    category: Optional[str] = None
    address: Optional[str] = None
    road_address: Optional[str] = None
    phone: Optional[str] = None
    description: Optional[str] = None
    directions: Optional[str] = None
    amenities: Optional[List[str]] = None
    tags: Optional[List[str]] = None
    keywords: Optional[List[str]] = None
    keywords5: Optional[List[str]] = None
    menus: Optional[List[MenuItem]] = None
    competitors: Optional[List[Competitor]] = None
    reviews: Reviews = field(default_factory=Reviews)
    photos: Photos = field(default_factory=Photos)
    provenance: Dict[str, str] = field(default_factory=dict, repr=False)


@dataclass(slots=True)
class IndustryClassification:
    subcategory: str
    vertical: str
    confidence: float
    reasons: List[str] = field(default_factory=list)


@dataclass(slots=True)
class ScoreBreakdown:
    discover: int = 0
    convert: int = 0
    trust: int = 0
    risk: int = 0


@dataclass(slots=True)
class ScoreSignals:
    missing_fields: List[str] = field(default_factory=list)
    keyword_stuffing_risk: bool = False
    staleness_risk: bool = False


@dataclass(slots=True)
class ScoreResult:
    total: int
    grade: str
    breakdown: ScoreBreakdown
    signals: ScoreSignals


@dataclass(slots=True)
class KeywordPick:
    keyword: str
    type: str
    reason: str
    volume: Any = UNKNOWN_VOLUME


@dataclass(slots=True)
class Rewrite:
    description: str
    directions: str


@dataclass(slots=True)
class TodoItem:
    action: str
    impact: str
    how: str


@dataclass(slots=True)
class RecommendResult:
    keywords5: List[KeywordPick]
    rewrite: Rewrite
    todo_top5: List[TodoItem]
    compliance_notes: List[str] = field(default_factory=list)


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def to_payload(value: Any, *, exclude: Optional[set] = None) -> Any:
    """Convert dataclasses into JSON-ready dicts with camelCase keys, dropping ``None`` fields."""

    if is_dataclass(value) and not isinstance(value, type):
        out: Dict[str, Any] = {}
        for item in fields(value):
            if exclude and item.name in exclude:
                continue
            raw = getattr(value, item.name)
            if raw is None:
                continue
            out[_camel(item.name)] = to_payload(raw)
        return out
    if isinstance(value, dict):
        return {key: to_payload(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_payload(item) for item in value]
    return value
