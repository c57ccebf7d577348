"""Authenticity scoring heuristics.

Every place starts at a base score of 50 and collects independent
adjustments for proximity, chain affiliation, age, social-media presence,
website and verification. The result is clamped to 0-100 and mapped onto a
five-step label scale.
"""

from dataclasses import dataclass
from typing import FrozenSet, Optional, Tuple

from authcompass.core.models import AuthenticityResult, CanonicalPlace, ScoredPlace


BASE_SCORE = 50
MIN_SCORE = 0
MAX_SCORE = 100

# (upper bound exclusive, bonus), first match wins
_DISTANCE_BRACKETS: Tuple[Tuple[float, int], ...] = ((500, 15), (1000, 10), (2000, 5))
# (lower bound exclusive, bonus), first match wins
_AGE_BRACKETS: Tuple[Tuple[int, int], ...] = ((10, 15), (5, 10), (2, 5))

INDEPENDENT_BONUS = 20
CHAIN_PENALTY = -10
MODERATE_SOCIAL_BONUS = 5
HEAVY_SOCIAL_BONUS = 2
WEBSITE_BONUS = 5
VERIFIED_BONUS = 5
LOCAL_AREA_CODE_BONUS = 5

# (threshold, label, css class), highest first
LABELS: Tuple[Tuple[int, str, str], ...] = (
    (85, "Highly Authentic", "auth-high"),
    (70, "Very Authentic", "auth-very"),
    (55, "Authentic", "auth-good"),
    (40, "Somewhat Authentic", "auth-okay"),
)
FALLBACK_LABEL = ("Tourist Spot", "auth-low")

_LABEL_RANKS = {label: rank for rank, (_, label, _) in enumerate(reversed(LABELS), start=1)}
_LABEL_RANKS[FALLBACK_LABEL[0]] = 0


@dataclass(frozen=True)
class ScoringRules:
    """Optional tweaks on top of the standard formula.

    ``local_area_codes`` holds bare digit strings (e.g. ``"718"``); a place
    whose phone number carries one of them, as in ``(718) 555-0100`` or
    ``+1 718 555 0100``, earns a small bonus.
    Empty by default, which leaves the standard formula untouched.
    """

    local_area_codes: FrozenSet[str] = frozenset()


DEFAULT_RULES = ScoringRules()


def distance_bonus(distance_meters: Optional[float]) -> int:
    if distance_meters is None:
        return 0
    for upper, bonus in _DISTANCE_BRACKETS:
        if distance_meters < upper:
            return bonus
    return 0


def age_bonus(age_years: Optional[int]) -> int:
    if age_years is None:
        return 0
    for lower, bonus in _AGE_BRACKETS:
        if age_years > lower:
            return bonus
    return 0


def social_media_bonus(count: int) -> int:
    if count >= 3:
        return HEAVY_SOCIAL_BONUS
    if count >= 1:
        return MODERATE_SOCIAL_BONUS
    return 0


def has_local_area_code(phone: Optional[str], area_codes: FrozenSet[str]) -> bool:
    if not phone or not area_codes:
        return False
    if any(f"({code})" in phone for code in area_codes):
        return True
    digits = "".join(ch for ch in phone if ch.isdigit())
    # drop a leading North American country code
    if len(digits) == 11 and digits.startswith("1"):
        digits = digits[1:]
    return len(digits) == 10 and digits[:3] in area_codes


def raw_score(place: CanonicalPlace, rules: ScoringRules = DEFAULT_RULES) -> int:
    """Unclamped sum of the base score and all adjustments."""
    total = BASE_SCORE
    total += distance_bonus(place.distance_meters)
    total += CHAIN_PENALTY if place.is_chain else INDEPENDENT_BONUS
    total += age_bonus(place.age_years)
    total += social_media_bonus(place.social_media_count)
    if place.has_website:
        total += WEBSITE_BONUS
    if place.verified:
        total += VERIFIED_BONUS
    if has_local_area_code(place.phone, rules.local_area_codes):
        total += LOCAL_AREA_CODE_BONUS
    return total


def label_for(score_value: float) -> Tuple[str, str]:
    for threshold, label, css_class in LABELS:
        if score_value >= threshold:
            return label, css_class
    return FALLBACK_LABEL


def label_rank(label: str) -> int:
    """Ordinal of a label, 0 for "Tourist Spot" up to 4 for "Highly Authentic"."""
    try:
        return _LABEL_RANKS[label]
    except KeyError:
        raise ValueError(f"unknown authenticity label: {label!r}") from None


def score(place: CanonicalPlace, rules: Optional[ScoringRules] = None) -> AuthenticityResult:
    total = raw_score(place, rules or DEFAULT_RULES)
    clamped = int(round(max(MIN_SCORE, min(MAX_SCORE, total))))
    label, css_class = label_for(clamped)
    return AuthenticityResult(score=clamped, label=label, css_class=css_class)


def score_place(place: CanonicalPlace, rules: Optional[ScoringRules] = None) -> ScoredPlace:
    return ScoredPlace.from_place(place, score(place, rules))


def rescale(score_value: float, upper: int = 10) -> float:
    """Map a 0-100 score onto 0..upper for clients of the older score ranges."""
    if upper <= 0:
        raise ValueError("upper must be positive")
    bounded = max(MIN_SCORE, min(MAX_SCORE, score_value))
    return round(bounded * upper / MAX_SCORE, 1)
