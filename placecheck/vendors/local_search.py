"""Client utilities for the Naver local search API."""

import logging
import re
from typing import Any, Dict, List

import requests

logger = logging.getLogger(__name__)
_SESSION = requests.Session()
_BASE_URL = "https://openapi.naver.com/v1/search/local.json"
_TAG_RE = re.compile(r"<[^>]+>")


class LocalSearchError(RuntimeError):
    """Raised when the local search API returns a non-successful response."""


def _clean(value: Any) -> str:
    return _TAG_RE.sub("", value or "").strip() if isinstance(value, str) else ""


def local_search(
    query: str, client_id: str, client_secret: str, display: int = 5, timeout: float = 10
) -> List[Dict[str, Any]]:
    headers = {"X-Naver-Client-Id": client_id, "X-Naver-Client-Secret": client_secret}
    params = {"query": query, "display": display, "sort": "random"}
    response = _SESSION.get(_BASE_URL, params=params, headers=headers, timeout=timeout)
    if response.status_code != 200:
        logger.error("local_search failed: status=%s, body=%s", response.status_code, response.text[:300])
        raise LocalSearchError(f"local search answered {response.status_code}")
    payload = response.json()
    items = []
    for item in payload.get("items", []):
        items.append(
            {
                "title": _clean(item.get("title")),
                "link": _clean(item.get("link")),
                "category": _clean(item.get("category")),
                "address": _clean(item.get("address")),
                "roadAddress": _clean(item.get("roadAddress")),
                "telephone": _clean(item.get("telephone")),
            }
        )
    return items
