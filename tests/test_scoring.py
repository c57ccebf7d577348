import itertools

import pytest

from authcompass.etl import scoring


def test_independent_coffee_shop_is_clamped_to_maximum(make_place):
    place = make_place(
        distance_meters=300,
        age_years=12,
        social_media_count=2,
        has_website=True,
        verified=True,
    )

    assert scoring.raw_score(place) == 115
    result = scoring.score(place)
    assert result.score == 100
    assert result.label == "Highly Authentic"
    assert result.css_class == "auth-high"


def test_far_chain_restaurant_hits_lower_label_boundary(make_place):
    place = make_place(category="Restaurant", distance_meters=5000, is_chain=True)

    result = scoring.score(place)

    assert result.score == 40
    assert result.label == "Somewhat Authentic"


def test_independent_bookstore(make_place):
    place = make_place(category="Bookstore", age_years=3, social_media_count=1)

    result = scoring.score(place)

    assert result.score == 80
    assert result.label == "Very Authentic"


@pytest.mark.parametrize(
    "distance, bonus",
    [(None, 0), (0, 15), (499.9, 15), (500, 10), (999, 10), (1000, 5), (1999, 5), (2000, 0), (8000, 0)],
)
def test_distance_brackets(distance, bonus):
    assert scoring.distance_bonus(distance) == bonus


@pytest.mark.parametrize("age, bonus", [(None, 0), (-1, 0), (2, 0), (3, 5), (5, 5), (6, 10), (10, 10), (11, 15)])
def test_age_brackets(age, bonus):
    assert scoring.age_bonus(age) == bonus


@pytest.mark.parametrize("count, bonus", [(0, 0), (1, 5), (2, 5), (3, 2), (5, 2)])
def test_social_media_bonus(count, bonus):
    assert scoring.social_media_bonus(count) == bonus


@pytest.mark.parametrize(
    "value, label",
    [(100, "Highly Authentic"), (85, "Highly Authentic"), (84, "Very Authentic"), (70, "Very Authentic"),
     (69, "Authentic"), (55, "Authentic"), (54, "Somewhat Authentic"), (40, "Somewhat Authentic"),
     (39, "Tourist Spot"), (0, "Tourist Spot")],
)
def test_label_thresholds(value, label):
    assert scoring.label_for(value)[0] == label


def test_label_rank_ordering():
    ordered = ["Tourist Spot", "Somewhat Authentic", "Authentic", "Very Authentic", "Highly Authentic"]
    assert [scoring.label_rank(label) for label in ordered] == [0, 1, 2, 3, 4]
    with pytest.raises(ValueError):
        scoring.label_rank("Good Authentic")


def _all_places(make_place):
    combos = itertools.product(
        [None, 100, 750, 1500, 3000],
        [False, True],
        [None, 1, 4, 8, 30],
        [0, 1, 3],
        [False, True],
        [False, True],
    )
    for distance, chain, age, social, website, verified in combos:
        yield make_place(
            distance_meters=distance,
            is_chain=chain,
            age_years=age,
            social_media_count=social,
            has_website=website,
            verified=verified,
        )


def test_score_range_determinism_and_label_monotonicity(make_place):
    results = []
    for place in _all_places(make_place):
        first = scoring.score(place)
        assert first == scoring.score(place)
        assert 0 <= first.score <= 100
        results.append(first)

    results.sort(key=lambda r: r.score)
    ranks = [scoring.label_rank(r.label) for r in results]
    assert ranks == sorted(ranks)


def test_local_area_code_bonus_is_opt_in(make_place):
    place = make_place(is_chain=True, phone="(718) 285-6180")
    rules = scoring.ScoringRules(local_area_codes=frozenset({"718"}))

    assert scoring.score(place).score == 40
    assert scoring.score(place, rules).score == 45


@pytest.mark.parametrize(
    "phone, expected",
    [("(718) 555-0100", True), ("+1 718 555 0100", True), ("718-555-0100", True),
     ("(212) 555-0100", False), ("555-0100", False), (None, False)],
)
def test_has_local_area_code(phone, expected):
    assert scoring.has_local_area_code(phone, frozenset({"718"})) is expected


def test_score_place_attaches_result(make_place):
    scored = scoring.score_place(make_place(id="abc", age_years=3, social_media_count=1))

    assert scored.id == "abc"
    assert scored.authenticity_score == 80
    assert scored.authenticity_label == "Very Authentic"
    assert scored.to_dict()["authenticityScore"] == 80


def test_rescale():
    assert scoring.rescale(80) == 8.0
    assert scoring.rescale(73, upper=10) == 7.3
    assert scoring.rescale(150) == 10.0
    with pytest.raises(ValueError):
        scoring.rescale(50, upper=0)
