"""Application configuration helpers."""

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import FrozenSet

from dotenv import load_dotenv

logger = logging.getLogger(__name__)


class ConfigError(RuntimeError):
    """Raised when mandatory configuration is missing."""


@dataclass(frozen=True)
class Settings:
    foursquare_api_key: str
    foursquare_base_url: str = "https://places-api.foursquare.com/places"
    foursquare_api_version: str = "2025-06-17"
    default_lat: float = 40.7
    default_lng: float = -74.0
    search_limit: int = 5
    nearby_limit: int = 10
    discover_result_cap: int = 6
    max_interests: int = 3
    per_interest_limit: int = 5
    discover_workers: int = 3
    local_area_codes: FrozenSet[str] = frozenset()
    port: int = 8080


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("%s=%r is not an integer; using %d.", name, raw, default)
        return default


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("%s=%r is not a number; using %s.", name, raw, default)
        return default


def _parse_area_codes(raw: str) -> FrozenSet[str]:
    codes = set()
    for part in raw.split(","):
        digits = "".join(ch for ch in part if ch.isdigit())
        if digits:
            codes.add(digits)
    return frozenset(codes)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings from environment variables with sensible defaults."""
    load_dotenv()

    foursquare_api_key = os.getenv("FOURSQUARE_API_KEY", "")
    base_url = os.getenv("FOURSQUARE_BASE_URL") or Settings.foursquare_base_url
    api_version = os.getenv("FOURSQUARE_API_VERSION") or Settings.foursquare_api_version

    if not foursquare_api_key:
        logger.warning("FOURSQUARE_API_KEY is not configured; Foursquare requests will fail.")

    return Settings(
        foursquare_api_key=foursquare_api_key,
        foursquare_base_url=base_url.rstrip("/"),
        foursquare_api_version=api_version,
        default_lat=_float_env("DEFAULT_LAT", Settings.default_lat),
        default_lng=_float_env("DEFAULT_LNG", Settings.default_lng),
        search_limit=_int_env("SEARCH_LIMIT", Settings.search_limit),
        nearby_limit=_int_env("NEARBY_LIMIT", Settings.nearby_limit),
        discover_result_cap=_int_env("DISCOVER_RESULT_CAP", Settings.discover_result_cap),
        max_interests=_int_env("MAX_INTERESTS", Settings.max_interests),
        per_interest_limit=_int_env("PER_INTEREST_LIMIT", Settings.per_interest_limit),
        discover_workers=_int_env("DISCOVER_WORKERS", Settings.discover_workers),
        local_area_codes=_parse_area_codes(os.getenv("LOCAL_AREA_CODES", "")),
        port=_int_env("PORT", Settings.port),
    )


def require_api_key(settings: Settings) -> str:
    if not settings.foursquare_api_key:
        raise ConfigError("FOURSQUARE_API_KEY must be set in the environment to query Foursquare.")
    return settings.foursquare_api_key
