"""Discovery and search jobs: fetch from Foursquare, score, merge and rank."""

import argparse
import json
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Optional, Sequence

from authcompass.core.config import ConfigError, Settings, get_settings, require_api_key
from authcompass.core.models import DiscoveryContext, RankingMode
from authcompass.etl.aggregate import ScoredBatch, aggregate, score_results
from authcompass.etl.scoring import ScoringRules
from authcompass.etl.summary import summarize
from authcompass.vendors import foursquare

logger = logging.getLogger(__name__)


def rules_from_settings(settings: Settings) -> ScoringRules:
    return ScoringRules(local_area_codes=settings.local_area_codes)


def select_interests(interests: Sequence[str], max_interests: int) -> List[str]:
    """Keep the first ``max_interests`` distinct, non-blank interests."""
    selected: List[str] = []
    seen = set()
    for interest in interests:
        cleaned = str(interest or "").strip()
        if not cleaned or cleaned.lower() in seen:
            continue
        seen.add(cleaned.lower())
        selected.append(cleaned)
        if len(selected) >= max_interests:
            break
    return selected


def _search_interest(interest: str, context: DiscoveryContext, api_key: str, settings: Settings) -> List[Dict[str, Any]]:
    try:
        return foursquare.search_places(
            interest,
            context.lat,
            context.lng,
            context.per_interest_limit,
            api_key,
            settings,
        )
    except Exception as exc:  # noqa: BLE001
        logger.warning("Search for interest=%s failed, treating as empty: %s", interest, exc)
        return []


def run_discovery(context: DiscoveryContext, settings: Optional[Settings] = None) -> ScoredBatch:
    """One search per interest (bounded), run concurrently, merged into one ranking."""
    settings = settings or get_settings()
    api_key = require_api_key(settings)

    interests = select_interests(context.interests, settings.max_interests)
    if not interests:
        raise ValueError("At least one interest is required for discovery")

    logger.info("Discovering places for interests=%s at %s,%s", interests, context.lat, context.lng)
    workers = max(1, min(settings.discover_workers, len(interests)))
    with ThreadPoolExecutor(max_workers=workers) as executor:
        # map() yields in submission order, which keeps first-seen ordering stable
        raw_lists = list(executor.map(lambda interest: _search_interest(interest, context, api_key, settings), interests))

    rules = rules_from_settings(settings)
    scored_lists = []
    skipped: List[str] = []
    for interest, raw_results in zip(interests, raw_lists):
        batch = score_results(raw_results, current_year=context.current_year, rules=rules)
        scored_lists.append(batch.places)
        skipped.extend(f"{interest}: {reason}" for reason in batch.skipped)

    places = aggregate(scored_lists, context.result_cap, context.rank_by)
    logger.info("Discovery produced %d places (%d records skipped)", len(places), len(skipped))
    return ScoredBatch(places=places, skipped=skipped)


def run_search(
    query: str,
    lat: float,
    lng: float,
    limit: int,
    settings: Optional[Settings] = None,
    rank_by: RankingMode = RankingMode.SCORE,
    current_year: Optional[int] = None,
) -> ScoredBatch:
    """Single-query search; upstream failures propagate to the caller."""
    settings = settings or get_settings()
    api_key = require_api_key(settings)
    if not query or not query.strip():
        raise ValueError("Query must be provided for place searches")

    raw_results = foursquare.search_places(query.strip(), lat, lng, limit, api_key, settings)
    batch = score_results(raw_results, current_year=current_year, rules=rules_from_settings(settings))
    return ScoredBatch(places=aggregate([batch.places], limit, rank_by), skipped=batch.skipped)


def run_nearby(
    lat: float,
    lng: float,
    categories: Sequence[str],
    limit: int,
    settings: Optional[Settings] = None,
    current_year: Optional[int] = None,
) -> ScoredBatch:
    settings = settings or get_settings()
    api_key = require_api_key(settings)

    raw_results = foursquare.nearby_places(lat, lng, categories, limit, api_key, settings)
    batch = score_results(raw_results, current_year=current_year, rules=rules_from_settings(settings))
    return ScoredBatch(places=aggregate([batch.places], limit), skipped=batch.skipped)


def to_payload(batch: ScoredBatch, with_summaries: bool = False) -> Dict[str, Any]:
    """Shape a batch into the ``{success, count, places}`` response body."""
    places = []
    for place in batch.places:
        entry = place.to_dict()
        if with_summaries:
            entry["summary"] = summarize(place)
        places.append(entry)

    payload: Dict[str, Any] = {"success": True, "count": len(places), "places": places}
    if not places:
        payload["message"] = "No places found"
    if batch.skipped:
        payload["warnings"] = list(batch.skipped)
    return payload


def build_parser(settings: Optional[Settings] = None) -> argparse.ArgumentParser:
    settings = settings or get_settings()
    parser = argparse.ArgumentParser(description="Discover authentic places near a location")
    parser.add_argument("interests", nargs="+", help="Interests to search for, e.g. 'coffee shop'")
    parser.add_argument("--lat", type=float, default=settings.default_lat, help="Latitude of the search origin")
    parser.add_argument("--lng", type=float, default=settings.default_lng, help="Longitude of the search origin")
    parser.add_argument(
        "--limit",
        type=int,
        default=settings.discover_result_cap,
        help="Maximum number of places to return",
    )
    parser.add_argument(
        "--rank-by",
        dest="rank_by",
        choices=[mode.value for mode in RankingMode],
        default=RankingMode.SCORE.value,
        help="Order results by authenticity score or by distance",
    )
    parser.add_argument("--summaries", action="store_true", help="Include a generated summary per place")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s - %(message)s")
    settings = get_settings()
    args = build_parser(settings).parse_args(argv)

    context = DiscoveryContext(
        interests=tuple(args.interests),
        lat=args.lat,
        lng=args.lng,
        result_cap=args.limit,
        per_interest_limit=settings.per_interest_limit,
        rank_by=RankingMode(args.rank_by),
    )
    try:
        batch = run_discovery(context, settings)
    except ConfigError as exc:
        logger.error("Configuration error: %s", exc)
        return 2

    print(json.dumps(to_payload(batch, with_summaries=args.summaries), indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
