"""Client utilities for the Foursquare Places API."""

import logging
from typing import Any, Dict, List, Optional, Sequence

import requests

from authcompass.core.config import Settings

logger = logging.getLogger(__name__)
_SESSION = requests.Session()
_TIMEOUT = 10

DETAIL_FIELDS = (
    "fsq_place_id,name,location,categories,chains,website,tel,email,social_media,"
    "verified,date_created,date_refreshed,latitude,longitude,hours,price,rating,link"
)


class FoursquareError(RuntimeError):
    """Raised when the Places API returns a non-successful response."""


def _headers(settings: Settings, api_key: str) -> Dict[str, str]:
    return {
        "Accept": "application/json",
        "Authorization": f"Bearer {api_key}",
        "X-Places-Api-Version": settings.foursquare_api_version,
    }


def _get(url: str, params: Dict[str, Any], settings: Settings, api_key: str) -> Any:
    try:
        response = _SESSION.get(url, params=params, headers=_headers(settings, api_key), timeout=_TIMEOUT)
    except requests.RequestException as exc:
        logger.error("Foursquare request failed: url=%s error=%s", url, exc)
        raise FoursquareError(str(exc)) from exc

    if response.status_code == 404:
        return None
    if response.status_code >= 400:
        logger.error("Foursquare returned status=%s for url=%s: %s", response.status_code, url, response.text[:300])
        raise FoursquareError(f"Foursquare returned HTTP {response.status_code}")
    return response.json()


def search_places(
    query: str,
    lat: float,
    lng: float,
    limit: int,
    api_key: str,
    settings: Settings,
    sort: str = "DISTANCE",
) -> List[Dict[str, Any]]:
    params = {"query": query, "ll": f"{lat},{lng}", "limit": limit, "sort": sort}
    payload = _get(f"{settings.foursquare_base_url}/search", params, settings, api_key)
    results = (payload or {}).get("results") or []
    logger.info("Foursquare search query=%s returned %d results", query, len(results))
    return results


def nearby_places(
    lat: float,
    lng: float,
    categories: Sequence[str],
    limit: int,
    api_key: str,
    settings: Settings,
) -> List[Dict[str, Any]]:
    params: Dict[str, Any] = {"ll": f"{lat},{lng}", "limit": limit, "sort": "POPULARITY"}
    if categories:
        params["categories"] = ",".join(categories)
    payload = _get(f"{settings.foursquare_base_url}/search", params, settings, api_key)
    return (payload or {}).get("results") or []


def place_details(place_id: str, api_key: str, settings: Settings) -> Optional[Dict[str, Any]]:
    """Fetch a single place; returns None when Foursquare does not know the id."""
    params = {"fields": DETAIL_FIELDS}
    return _get(f"{settings.foursquare_base_url}/{place_id}", params, settings, api_key)


def place_photos(place_id: str, api_key: str, settings: Settings, limit: int = 5) -> List[Dict[str, Any]]:
    try:
        payload = _get(f"{settings.foursquare_base_url}/{place_id}/photos", {"limit": limit}, settings, api_key)
    except FoursquareError as exc:
        logger.warning("Photo lookup failed for %s: %s", place_id, exc)
        return []
    if isinstance(payload, list):
        return payload
    return (payload or {}).get("photos") or []
