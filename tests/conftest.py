import sys
from pathlib import Path

import pytest

# Ensure the `authcompass` package is importable when running pytest from a checkout.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from authcompass.core.models import CanonicalPlace, ScoredPlace  # noqa: E402


def _place_fields(**overrides):
    fields = {
        "id": "p1",
        "name": "Test Place",
        "category": "Coffee Shop",
        "address": "1 Main St, Brooklyn, NY",
        "distance_meters": None,
        "is_chain": False,
        "age_years": None,
        "social_media_count": 0,
        "has_website": False,
        "phone": None,
        "verified": False,
    }
    fields.update(overrides)
    return fields


@pytest.fixture
def make_place():
    def factory(**overrides):
        return CanonicalPlace(**_place_fields(**overrides))

    return factory


@pytest.fixture
def make_scored():
    def factory(place_id, score, distance=None, **overrides):
        values = {"id": place_id, "name": f"Place {place_id}", "distance_meters": distance}
        values.update(overrides)
        return ScoredPlace(
            **_place_fields(**values),
            authenticity_score=score,
            authenticity_label="Authentic",
            authenticity_class="auth-good",
        )

    return factory
