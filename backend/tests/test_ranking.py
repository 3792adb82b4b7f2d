"""
Unit tests for sustainability ranking.
"""
import math

import pytest

from ecoswap.services.recommendation.ranking import (
    carbon_reduction_score,
    rank_by_sustainability,
    score_candidates,
    sustainability_ranking_score,
)


def test_bananas_to_spinach(seed_products):
    bananas = seed_products["prod-002"]
    spinach = seed_products["prod-003"]

    # 1.8 / 2.1 * 60 + 25 organic + 15 produce + (100 - 80) / 5
    assert sustainability_ranking_score(bananas, spinach) == pytest.approx(1.8 / 2.1 * 60 + 25 + 15 + 4)


def test_carbon_component_capped_and_floored(make_product):
    query = make_product(id="q", carbon_intensity=2.0)

    assert carbon_reduction_score(query, make_product(id="c", carbon_intensity=0.0)) == 60.0
    assert carbon_reduction_score(query, make_product(id="c", carbon_intensity=5.0)) == 0.0


def test_zero_carbon_query_is_finite(make_product):
    query = make_product(id="q", carbon_intensity=0.0, is_organic=True, category="Produce")
    candidate = make_product(id="c", carbon_intensity=0.0, is_organic=True, category="Produce")

    score = sustainability_ranking_score(query, candidate)

    assert math.isfinite(score)
    assert score == 15.0


def test_organic_bonus_only_for_upgrade(make_product):
    candidate = make_product(id="c", carbon_intensity=2.0, is_organic=True, category="Meat")
    conventional = make_product(id="q1", carbon_intensity=2.0, is_organic=False, category="Meat")
    organic = make_product(id="q2", carbon_intensity=2.0, is_organic=True, category="Meat")

    # 25 organic + (85 - 70) / 5
    assert sustainability_ranking_score(conventional, candidate) == pytest.approx(28.0)
    assert sustainability_ranking_score(organic, candidate) == 0.0


def test_rank_descending_with_limit(make_product):
    query = make_product(id="q", carbon_intensity=4.0, category="Meat")
    candidates = [
        make_product(id="worse", carbon_intensity=8.0, category="Meat"),
        make_product(id="best", carbon_intensity=0.5, is_organic=True, category="Produce"),
        make_product(id="better", carbon_intensity=2.0, category="Meat"),
    ]

    ranked = rank_by_sustainability(query, candidates)

    assert [p.id for p in ranked] == ["best", "better"]
    scores = [score for _, score in score_candidates(query, candidates)]
    assert scores == sorted(scores, reverse=True)


def test_ties_keep_input_order(make_product):
    query = make_product(id="q", carbon_intensity=4.0, category="Meat")
    first = make_product(id="first", carbon_intensity=2.0, category="Meat")
    second = make_product(id="second", carbon_intensity=2.0, category="Meat")

    assert [p.id for p in rank_by_sustainability(query, [first, second])] == ["first", "second"]
    assert [p.id for p in rank_by_sustainability(query, [second, first])] == ["second", "first"]


def test_worse_candidates_still_ranked(make_product):
    query = make_product(id="q", carbon_intensity=0.5, is_organic=True, category="Meat")
    worse = make_product(id="worse", carbon_intensity=9.0, category="Meat")

    assert [p.id for p in rank_by_sustainability(query, [worse])] == ["worse"]


def test_empty_candidates(make_product):
    assert rank_by_sustainability(make_product(), []) == []
