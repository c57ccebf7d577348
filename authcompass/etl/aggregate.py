"""Merge, deduplicate and rank scored places coming from one or more queries."""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Mapping, Optional, Sequence

from authcompass.core.models import RankingMode, ScoredPlace, SourceFormat
from authcompass.etl.normalize import InvalidRecord, normalize
from authcompass.etl.scoring import ScoringRules, score_place

logger = logging.getLogger(__name__)


@dataclass
class ScoredBatch:
    """Scored places from a single query plus the records that were skipped."""

    places: List[ScoredPlace] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)


def score_results(
    raw_results: Optional[Iterable[Mapping[str, Any]]],
    source_format: Optional[SourceFormat] = None,
    *,
    current_year: Optional[int] = None,
    rules: Optional[ScoringRules] = None,
) -> ScoredBatch:
    """Normalize and score one query's raw records, skipping invalid ones."""
    batch = ScoredBatch()
    for index, raw in enumerate(raw_results or []):
        try:
            place = normalize(raw, source_format, current_year=current_year)
        except InvalidRecord as exc:
            logger.warning("Skipping invalid place record #%d: %s", index, exc)
            batch.skipped.append(f"record {index}: {exc}")
            continue
        batch.places.append(score_place(place, rules))
    return batch


def _distance_key(place: ScoredPlace):
    # unknown or non-finite distances sort after every known one
    if place.distance_meters is None or not math.isfinite(place.distance_meters):
        return (1, 0.0)
    return (0, place.distance_meters)


def aggregate(
    query_results: Sequence[Iterable[ScoredPlace]],
    result_cap: int,
    mode: RankingMode = RankingMode.SCORE,
) -> List[ScoredPlace]:
    """Flatten per-query results, drop repeated ids, rank and cap.

    The first occurrence of an id wins. Both orderings use Python's stable
    sort, so ties keep the order in which places were first seen.
    """
    seen = set()
    unique: List[ScoredPlace] = []
    for results in query_results:
        for place in results or []:
            if place.id in seen:
                continue
            seen.add(place.id)
            unique.append(place)

    if mode is RankingMode.DISTANCE:
        ranked = sorted(unique, key=_distance_key)
    else:
        ranked = sorted(unique, key=lambda place: place.authenticity_score, reverse=True)

    cap = max(0, result_cap)
    logger.debug("Aggregated %d unique places (cap=%d, mode=%s)", len(ranked), cap, mode.value)
    return ranked[:cap]
