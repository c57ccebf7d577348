"""Utilities for turning raw Foursquare payloads into canonical places."""

import logging
import math
from datetime import date, datetime
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from authcompass.core.models import CanonicalPlace, SourceFormat

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY = "Place"
DEFAULT_ADDRESS = "Address not available"
UNNAMED_PLACE = "Unnamed place"

# platform -> accepted keys inside the social_media object
_SOCIAL_PLATFORMS = {
    "facebook": ("facebook_id", "facebook"),
    "instagram": ("instagram",),
    "twitter": ("twitter",),
}


class InvalidRecord(ValueError):
    """Raised when a raw payload carries neither an identifier nor a name."""


def detect_source_format(raw: Mapping[str, Any]) -> SourceFormat:
    if "fsq_place_id" in raw or "latitude" in raw:
        return SourceFormat.FOURSQUARE_PLACES
    return SourceFormat.FOURSQUARE_V3


def _v3_identity(raw: Mapping[str, Any]) -> Tuple[Any, Optional[float], Optional[float]]:
    main = (raw.get("geocodes") or {}).get("main") or {}
    return raw.get("fsq_id") or raw.get("id"), _safe_float(main.get("latitude")), _safe_float(main.get("longitude"))


def _places_identity(raw: Mapping[str, Any]) -> Tuple[Any, Optional[float], Optional[float]]:
    return (
        raw.get("fsq_place_id") or raw.get("id"),
        _safe_float(raw.get("latitude")),
        _safe_float(raw.get("longitude")),
    )


_IDENTITY_EXTRACTORS: Dict[SourceFormat, Callable[[Mapping[str, Any]], Tuple[Any, Optional[float], Optional[float]]]] = {
    SourceFormat.FOURSQUARE_V3: _v3_identity,
    SourceFormat.FOURSQUARE_PLACES: _places_identity,
}


def normalize(
    raw: Mapping[str, Any],
    source_format: Optional[SourceFormat] = None,
    *,
    current_year: Optional[int] = None,
) -> CanonicalPlace:
    """Build a CanonicalPlace from a raw payload of either Foursquare shape."""
    if not isinstance(raw, Mapping):
        raise InvalidRecord(f"expected a mapping, got {type(raw).__name__}")

    fmt = source_format or detect_source_format(raw)
    raw_id, latitude, longitude = _IDENTITY_EXTRACTORS[fmt](raw)
    place_id = _strip_or_none(raw_id)
    name = _strip_or_none(raw.get("name"))
    if not place_id and not name:
        raise InvalidRecord("record has neither an identifier nor a name")

    if current_year is None:
        current_year = date.today().year

    chains = _as_list(raw.get("chains"))
    website = _strip_or_none(raw.get("website"))

    return CanonicalPlace(
        id=place_id or name,
        name=name or UNNAMED_PLACE,
        category=parse_category(raw.get("categories")),
        address=format_address(raw.get("location")),
        distance_meters=_safe_float(raw.get("distance")),
        is_chain=len(chains) > 0,
        age_years=age_in_years(raw.get("date_created"), current_year),
        social_media_count=count_social_media(raw.get("social_media")),
        has_website=website is not None,
        phone=_strip_or_none(raw.get("tel")),
        verified=bool(raw.get("verified")),
        latitude=latitude,
        longitude=longitude,
        chain_name=_chain_name(chains),
        website=website,
    )


def parse_category(categories: Optional[Iterable[Any]]) -> str:
    for category in _as_list(categories):
        if isinstance(category, Mapping):
            name = _strip_or_none(category.get("name"))
        else:
            name = _strip_or_none(category)
        return name or DEFAULT_CATEGORY
    return DEFAULT_CATEGORY


def format_address(location: Optional[Mapping[str, Any]]) -> str:
    if not isinstance(location, Mapping):
        return DEFAULT_ADDRESS
    formatted = _strip_or_none(location.get("formatted_address"))
    if formatted:
        return formatted
    parts = [_strip_or_none(location.get(key)) for key in ("address", "locality", "region")]
    joined = ", ".join(part for part in parts if part)
    return joined or DEFAULT_ADDRESS


def age_in_years(created: Any, current_year: int) -> Optional[int]:
    created_year = _year_of(created)
    if created_year is None:
        return None
    return current_year - created_year


def count_social_media(social_media: Optional[Mapping[str, Any]]) -> int:
    if not isinstance(social_media, Mapping):
        return 0
    count = 0
    for keys in _SOCIAL_PLATFORMS.values():
        if any(_strip_or_none(social_media.get(key)) for key in keys):
            count += 1
    return count


def _year_of(value: Any) -> Optional[int]:
    if isinstance(value, (datetime, date)):
        return value.year
    text = _strip_or_none(value)
    if not text:
        return None
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).year
    except ValueError:
        pass
    head = text[:4]
    if head.isdigit():
        return int(head)
    logger.debug("Unparseable creation timestamp: %r", value)
    return None


def _as_list(value: Any) -> List[Any]:
    # scalars and mappings in a list-valued field count as absent
    if isinstance(value, (list, tuple)):
        return list(value)
    return []


def _chain_name(chains: Any) -> Optional[str]:
    if not chains:
        return None
    first = chains[0]
    if isinstance(first, Mapping):
        return _strip_or_none(first.get("name"))
    return _strip_or_none(first)


def _strip_or_none(value: Any) -> Optional[str]:
    if value is None:
        return None
    value_str = str(value).strip()
    return value_str or None


def _safe_float(value: Any) -> Optional[float]:
    try:
        if value is None or isinstance(value, bool):
            return None
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None
