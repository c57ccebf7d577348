"""Template-based descriptions of scored places."""

import math
from typing import Optional

from authcompass.core.models import ScoredPlace


def _rounded_meters(distance: Optional[float]) -> int:
    # half-up, so 312.5 reads as 313
    if distance is None or not math.isfinite(distance):
        return 0
    return math.floor(distance + 0.5)


def summarize(place: ScoredPlace) -> str:
    business_type = "chain" if place.is_chain else "independent"
    parts = [f"This {business_type} {place.category.lower()}"]

    if place.age_years is not None and place.age_years > 0:
        parts.append(f" has been serving the community for {place.age_years} years. ")
    else:
        parts.append(" is a local establishment. ")

    meters = _rounded_meters(place.distance_meters)
    if meters > 0:
        parts.append(f"Located just {meters} meters away, it")
    else:
        parts.append("It")

    parts.append(
        f" offers an authentic local experience with an authenticity score of {place.authenticity_score}/100. "
    )

    if place.has_website:
        parts.append("Visit their website for more information about their offerings and hours.")
    else:
        parts.append("This local gem maintains a traditional approach to business.")

    return "".join(parts)
