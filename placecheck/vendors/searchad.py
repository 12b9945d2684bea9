"""Client for the Naver SearchAd keyword tool (monthly search volumes)."""

from __future__ import annotations

import base64
import hashlib
import hmac
import logging
import re
import time
from typing import Any, Dict, Iterable, List, Optional

import requests

from placecheck.core.cache import KeywordVolumeCache
from placecheck.models import UNKNOWN_VOLUME

logger = logging.getLogger(__name__)
_SESSION = requests.Session()
_BASE_URL = "https://api.searchad.naver.com"
_ENDPOINT = "/keywordstool"
CHUNK_SIZE = 5
CHUNK_TIMEOUT = 12


class SearchAdError(RuntimeError):
    """Raised when the keyword tool answers with a non-successful response."""


def sign(timestamp: str, method: str, uri: str, secret_key: str) -> str:
    message = f"{timestamp}.{method}.{uri}".encode("utf-8")
    digest = hmac.new(secret_key.encode("utf-8"), message, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


def _count(value: Any) -> Optional[int]:
    """Volumes come back as ints or strings such as ``"< 10"``."""

    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, str):
        cleaned = re.sub(r"[<>,\s]", "", value)
        return int(cleaned) if cleaned.isdigit() else None
    return None


def _key(keyword: str) -> str:
    return re.sub(r"\s+", "", keyword).casefold()


def keyword_tool(
    hint_keywords: List[str], api_key: str, secret_key: str, customer_id: str, timeout: float = CHUNK_TIMEOUT
) -> List[Dict[str, Any]]:
    timestamp = str(int(time.time() * 1000))
    headers = {
        "X-Timestamp": timestamp,
        "X-API-KEY": api_key,
        "X-Customer": customer_id,
        "X-Signature": sign(timestamp, "GET", _ENDPOINT, secret_key),
    }
    params = {"hintKeywords": ",".join(hint_keywords), "showDetail": "1"}
    response = _SESSION.get(f"{_BASE_URL}{_ENDPOINT}", params=params, headers=headers, timeout=timeout)
    if response.status_code != 200:
        logger.error("keyword_tool failed: status=%s body=%s", response.status_code, response.text[:300])
        raise SearchAdError(f"keywordstool answered {response.status_code}")
    payload = response.json()
    rows = payload.get("keywordList") if isinstance(payload, dict) else None
    return rows if isinstance(rows, list) else []


class KeywordVolumeService:
    """Attach monthly volumes to keywords, chunk by chunk.

    A failed chunk leaves only its own keywords as ``"unknown"``. Resolved
    volumes are cached; unresolved ones are not.
    """

    def __init__(
        self,
        api_key: Optional[str],
        secret_key: Optional[str],
        customer_id: Optional[str],
        *,
        cache: Optional[KeywordVolumeCache] = None,
        timeout: float = CHUNK_TIMEOUT,
        lookup=keyword_tool,
    ) -> None:
        self.api_key = api_key
        self.secret_key = secret_key
        self.customer_id = customer_id
        self.cache = cache if cache is not None else KeywordVolumeCache()
        self.timeout = timeout
        self._lookup = lookup

    @property
    def configured(self) -> bool:
        return bool(self.api_key and self.secret_key and self.customer_id)

    def volumes(self, keywords: Iterable[str]) -> Dict[str, Any]:
        wanted: List[str] = []
        for keyword in keywords:
            keyword = (keyword or "").strip()
            if keyword and keyword not in wanted:
                wanted.append(keyword)

        out: Dict[str, Any] = {keyword: UNKNOWN_VOLUME for keyword in wanted}
        pending = []
        for keyword in wanted:
            cached = self.cache.get(_key(keyword))
            if cached is not None:
                out[keyword] = cached
            else:
                pending.append(keyword)

        if not pending or not self.configured:
            return out

        for start in range(0, len(pending), CHUNK_SIZE):
            chunk = pending[start : start + CHUNK_SIZE]
            try:
                rows = self._lookup(
                    [_key(keyword) for keyword in chunk],
                    self.api_key,
                    self.secret_key,
                    self.customer_id,
                    timeout=self.timeout,
                )
            except (requests.RequestException, SearchAdError, ValueError) as exc:
                logger.warning("Keyword volume chunk %s failed: %s", chunk, exc)
                continue

            by_key = {}
            for row in rows:
                rel = (row.get("relKeyword") or "").strip() if isinstance(row, dict) else ""
                if rel:
                    by_key[_key(rel)] = row
            for keyword in chunk:
                row = by_key.get(_key(keyword))
                if row is None:
                    continue
                pc = _count(row.get("monthlyPcQcCnt"))
                mobile = _count(row.get("monthlyMobileQcCnt"))
                volume = {"pc": pc, "mobile": mobile, "total": (pc or 0) + (mobile or 0)}
                self.cache.set(_key(keyword), volume)
                out[keyword] = volume
        return out
