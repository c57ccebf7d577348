"""Core data models shared by the scoring engine and the places service."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field, fields
from typing import Any, Dict, Optional, Tuple


class SourceFormat(enum.Enum):
    """Shapes of raw place payloads the normalizer understands."""

    FOURSQUARE_V3 = "foursquare_v3"
    FOURSQUARE_PLACES = "foursquare_places"


class RankingMode(enum.Enum):
    SCORE = "score"
    DISTANCE = "distance"


@dataclass(frozen=True, slots=True)
class CanonicalPlace:
    """Provider-agnostic snapshot of a place, ready for scoring."""

    id: str
    name: str
    category: str
    address: str
    distance_meters: Optional[float]
    is_chain: bool
    age_years: Optional[int]
    social_media_count: int
    has_website: bool
    phone: Optional[str]
    verified: bool
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    chain_name: Optional[str] = None
    website: Optional[str] = None


@dataclass(frozen=True, slots=True)
class AuthenticityResult:
    score: int
    label: str
    css_class: str


@dataclass(frozen=True, slots=True)
class ScoredPlace(CanonicalPlace):
    """A canonical place with its authenticity score attached."""

    authenticity_score: int = field(kw_only=True)
    authenticity_label: str = field(kw_only=True)
    authenticity_class: str = field(kw_only=True)

    @classmethod
    def from_place(cls, place: CanonicalPlace, result: AuthenticityResult) -> "ScoredPlace":
        values = {f.name: getattr(place, f.name) for f in fields(CanonicalPlace)}
        return cls(
            **values,
            authenticity_score=result.score,
            authenticity_label=result.label,
            authenticity_class=result.css_class,
        )

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready mapping using the API's camelCase keys."""
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "address": self.address,
            "distance": self.distance_meters,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "isChain": self.is_chain,
            "chainName": self.chain_name,
            "ageYears": self.age_years,
            "socialMediaCount": self.social_media_count,
            "website": self.website,
            "phone": self.phone,
            "verified": self.verified,
            "authenticityScore": self.authenticity_score,
            "authenticityLabel": self.authenticity_label,
            "authenticityClass": self.authenticity_class,
        }


@dataclass(frozen=True)
class DiscoveryContext:
    """Request-scoped inputs for a discovery run.

    Created per request and passed explicitly; nothing about a user's
    interests or location is kept at module level.
    """

    interests: Tuple[str, ...]
    lat: float
    lng: float
    result_cap: int
    per_interest_limit: int = 5
    rank_by: RankingMode = RankingMode.SCORE
    current_year: Optional[int] = None
