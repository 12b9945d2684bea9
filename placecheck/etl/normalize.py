"""Normalize raw extracted place profiles into their canonical shape."""

import copy
import logging
import re
from typing import Any, List, Optional

import phonenumbers

from placecheck.models import UNKNOWN_NAME, PlaceProfile

logger = logging.getLogger(__name__)

_OPTIONAL_TEXT_FIELDS = ("place_id", "category", "address", "road_address", "description", "directions")
_OPTIONAL_LIST_FIELDS = ("amenities", "tags", "keywords", "keywords5", "menus", "competitors")


def _clean_text(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    cleaned = value.replace("\u001c", "").strip()
    return cleaned or None


def _clean_list(values: Any) -> Optional[List[str]]:
    if not values:
        return None
    out = []
    for value in values:
        text = _clean_text(value)
        if not text:
            continue
        text = re.sub(r"\s+", " ", text)
        if text not in out:
            out.append(text)
    return out or None


def format_phone(raw: Optional[str], default_region: Optional[str] = "KR") -> Optional[str]:
    """Return an E.164 phone string when parseable, otherwise the trimmed input."""

    text = _clean_text(raw)
    if not text:
        return None
    try:
        parsed = phonenumbers.parse(text, default_region)
    except phonenumbers.NumberParseException:
        logger.debug("Keeping unparseable phone %r as-is", text)
        return text
    if not phonenumbers.is_possible_number(parsed):
        return text
    return phonenumbers.format_number(parsed, phonenumbers.PhoneNumberFormat.E164)


def normalize_profile(raw: PlaceProfile, default_region: Optional[str] = "KR") -> PlaceProfile:
    """Pure: returns a new profile; never raises and never invents absent fields."""

    profile = copy.deepcopy(raw)
    profile.name = re.sub(r"\s+", " ", _clean_text(raw.name) or "") or UNKNOWN_NAME

    for name in _OPTIONAL_TEXT_FIELDS:
        setattr(profile, name, _clean_text(getattr(raw, name)))

    profile.phone = format_phone(raw.phone, default_region)
    profile.tags = _clean_list(raw.tags)
    profile.amenities = _clean_list(raw.amenities)

    for name in _OPTIONAL_LIST_FIELDS:
        if not getattr(profile, name):
            setattr(profile, name, None)

    reviews = profile.reviews
    if reviews.visitor_count is not None and reviews.visitor_count < 0:
        reviews.visitor_count = None
    if reviews.blog_count is not None and reviews.blog_count < 0:
        reviews.blog_count = None
    if reviews.rating is not None and not 0 <= reviews.rating <= 5:
        reviews.rating = None
    if profile.photos.count is not None and profile.photos.count < 0:
        profile.photos.count = None
    return profile
