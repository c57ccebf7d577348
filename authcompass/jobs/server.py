"""HTTP entrypoint exposing search, nearby, discovery and place details."""

from __future__ import annotations

import logging
import os
from typing import Any, Optional

from flask import Flask, jsonify, request

from authcompass.core.config import ConfigError, get_settings, require_api_key
from authcompass.core.models import DiscoveryContext, RankingMode
from authcompass.etl.aggregate import score_results
from authcompass.etl.summary import summarize
from authcompass.jobs.discover import rules_from_settings, run_discovery, run_nearby, run_search, to_payload
from authcompass.vendors import foursquare

# ---------- Logging ----------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s - %(message)s",
)
logger = logging.getLogger(__name__)

# ---------- App ----------
app = Flask(__name__)

# ---------- Helpers ----------


def _float_arg(value: Any, default: float) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _limit_arg(value: Any, default: int) -> int:
    try:
        limit = int(value)
    except (TypeError, ValueError):
        return default
    return limit if limit > 0 else default


def _upstream_error(error: str, exc: Exception) -> Any:
    return jsonify({"success": False, "error": error, "message": str(exc)}), 502


def _config_error(exc: ConfigError) -> Any:
    logger.error("Configuration error: %s", exc)
    return jsonify({"success": False, "error": "service not configured", "message": str(exc)}), 503


# ---------- Routes ----------


@app.get("/")
def root() -> Any:
    return "ok", 200


@app.get("/healthz")
def healthcheck() -> Any:
    settings = get_settings()
    return (
        jsonify(
            {
                "status": "ok",
                "api_key_configured": bool(settings.foursquare_api_key),
                "revision": os.getenv("K_REVISION", "unknown"),
            }
        ),
        200,
    )


@app.get("/api/places/search")
def search_places() -> Any:
    settings = get_settings()
    query = (request.args.get("query") or "").strip()
    if not query:
        return jsonify({"success": False, "error": "Query parameter is required"}), 400

    lat = _float_arg(request.args.get("lat"), settings.default_lat)
    lng = _float_arg(request.args.get("lng"), settings.default_lng)
    limit = _limit_arg(request.args.get("limit"), settings.search_limit)

    try:
        batch = run_search(query, lat, lng, limit, settings)
    except ConfigError as exc:
        return _config_error(exc)
    except foursquare.FoursquareError as exc:
        return _upstream_error("Failed to search places", exc)

    payload = to_payload(batch)
    payload["query"] = query
    payload["location"] = {"lat": lat, "lng": lng}
    return jsonify(payload), 200


@app.get("/api/places/nearby")
def nearby_places() -> Any:
    settings = get_settings()
    lat = _float_arg(request.args.get("lat"), settings.default_lat)
    lng = _float_arg(request.args.get("lng"), settings.default_lng)
    limit = _limit_arg(request.args.get("limit"), settings.nearby_limit)
    raw_categories = request.args.get("categories") or ""
    categories = [c.strip() for c in raw_categories.split(",") if c.strip()]

    try:
        batch = run_nearby(lat, lng, categories, limit, settings)
    except ConfigError as exc:
        return _config_error(exc)
    except foursquare.FoursquareError as exc:
        return _upstream_error("Failed to get nearby places", exc)

    payload = to_payload(batch)
    payload["location"] = {"lat": lat, "lng": lng}
    return jsonify(payload), 200


@app.post("/api/discover")
def discover_places() -> Any:
    """
    Discover places for a set of interests.
    Required JSON fields: interests (list of strings)
    Optional: location {lat, lng}, limit (int), rank_by ("score" | "distance")
    """
    settings = get_settings()
    payload = request.get_json(silent=True)
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        return jsonify({"success": False, "error": "request body must be a JSON object"}), 400

    interests = payload.get("interests")
    if isinstance(interests, str):
        interests = [interests]
    if not isinstance(interests, list) or not any(str(i or "").strip() for i in interests):
        return jsonify({"success": False, "error": "interests must be a non-empty list"}), 400

    location = payload.get("location") or {}
    if not isinstance(location, dict):
        location = {}

    rank_by_raw = str(payload.get("rank_by") or RankingMode.SCORE.value).lower()
    try:
        rank_by = RankingMode(rank_by_raw)
    except ValueError:
        return jsonify({"success": False, "error": "rank_by must be 'score' or 'distance'"}), 400

    context = DiscoveryContext(
        interests=tuple(str(i) for i in interests),
        lat=_float_arg(location.get("lat"), settings.default_lat),
        lng=_float_arg(location.get("lng"), settings.default_lng),
        result_cap=_limit_arg(payload.get("limit"), settings.discover_result_cap),
        per_interest_limit=settings.per_interest_limit,
        rank_by=rank_by,
    )

    try:
        batch = run_discovery(context, settings)
    except ConfigError as exc:
        return _config_error(exc)

    return jsonify(to_payload(batch, with_summaries=True)), 200


@app.get("/api/place/<place_id>")
def place_details(place_id: str) -> Any:
    settings = get_settings()
    try:
        api_key = require_api_key(settings)
        raw = foursquare.place_details(place_id, api_key, settings)
    except ConfigError as exc:
        return _config_error(exc)
    except foursquare.FoursquareError as exc:
        return _upstream_error("Failed to get place details", exc)

    batch = score_results([raw] if raw else [], rules=rules_from_settings(settings))
    if not batch.places:
        return jsonify({"success": False, "error": "Place not found"}), 404

    place = batch.places[0]
    body = place.to_dict()
    body["summary"] = summarize(place)
    body["photos"] = foursquare.place_photos(place_id, api_key, settings)[:3]
    return jsonify({"success": True, "place": body}), 200


def main(port: Optional[int] = None) -> None:
    port = port or get_settings().port
    logger.info("[BOOT] Binding on 0.0.0.0:%d", port)
    app.run(host="0.0.0.0", port=port)


if __name__ == "__main__":
    main()
