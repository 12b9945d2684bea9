"""Application configuration helpers."""

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)


class ConfigError(RuntimeError):
    """Raised when configuration cannot be turned into working services."""


@dataclass(frozen=True)
class Settings:
    document_client: str = "playwright"
    request_timeout_seconds: float = 15.0
    document_cache_size: int = 500
    document_cache_ttl_seconds: int = 30 * 60
    keyword_volume_cache_ttl_seconds: int = 12 * 60 * 60
    naver_client_id: str = ""
    naver_client_secret: str = ""
    searchad_api_key: str = ""
    searchad_secret_key: str = ""
    searchad_customer_id: str = ""
    default_phone_region: Optional[str] = "KR"
    port: int = 8080

    @property
    def local_search_configured(self) -> bool:
        return bool(self.naver_client_id and self.naver_client_secret)

    @property
    def keyword_volume_configured(self) -> bool:
        return bool(self.searchad_api_key and self.searchad_secret_key and self.searchad_customer_id)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings from environment variables with sensible defaults."""
    load_dotenv()

    document_client = os.getenv("DOCUMENT_CLIENT", "playwright").strip().lower()
    if document_client not in {"playwright", "http"}:
        logger.warning("Unknown DOCUMENT_CLIENT=%s; using playwright", document_client)
        document_client = "playwright"

    default_phone_region_raw = os.getenv("DEFAULT_PHONE_REGION", "KR")
    default_phone_region = default_phone_region_raw.strip().upper() if default_phone_region_raw else None

    settings = Settings(
        document_client=document_client,
        request_timeout_seconds=float(os.getenv("REQUEST_TIMEOUT_SECONDS", "15")),
        document_cache_size=int(os.getenv("DOCUMENT_CACHE_SIZE", "500")),
        document_cache_ttl_seconds=int(os.getenv("DOCUMENT_CACHE_TTL_SECONDS", str(30 * 60))),
        keyword_volume_cache_ttl_seconds=int(os.getenv("KEYWORD_VOLUME_CACHE_TTL_SECONDS", str(12 * 60 * 60))),
        naver_client_id=os.getenv("NAVER_CLIENT_ID", ""),
        naver_client_secret=os.getenv("NAVER_CLIENT_SECRET", ""),
        searchad_api_key=os.getenv("NAVER_SEARCHAD_API_KEY", ""),
        searchad_secret_key=os.getenv("NAVER_SEARCHAD_SECRET_KEY", ""),
        searchad_customer_id=os.getenv("NAVER_SEARCHAD_CUSTOMER_ID", ""),
        default_phone_region=default_phone_region,
        port=int(os.getenv("PORT", "8080")),
    )

    if not settings.local_search_configured:
        logger.warning("NAVER_CLIENT_ID/NAVER_CLIENT_SECRET are not configured; biz_search requests will fail.")
    if not settings.keyword_volume_configured:
        logger.warning("SearchAd credentials are not configured; keyword volumes will be reported as unknown.")

    return settings
