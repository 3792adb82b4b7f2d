"""
Unit tests for deterministic comparison copy.
"""
import pytest

from ecoswap.services.ai.fallback import (
    FALLBACK_REASONING,
    build_comparison,
    calculate_carbon_savings,
    calculate_eco_credits,
    generate_fallback_recommendations,
)


@pytest.mark.parametrize(
    "product_id,expected",
    [
        ("prod-006", 50),  # 19 + 15 + 10 + 10 = 54, clamped
        ("prod-003", 50),
        ("prod-002", 16),
        ("prod-007", 12),
        ("prod-009", 10),  # floor(40 / 5) = 8, raised to the minimum
    ],
)
def test_eco_credits(seed_products, product_id, expected):
    assert calculate_eco_credits(seed_products[product_id]) == expected


def test_carbon_savings_never_negative(seed_products):
    bananas = seed_products["prod-002"]
    spinach = seed_products["prod-003"]

    assert calculate_carbon_savings(bananas, spinach) == pytest.approx(1.8)
    assert calculate_carbon_savings(spinach, bananas) == 0.0


def test_comparison_lists_benefits(seed_products):
    comparison = build_comparison(seed_products["prod-003"])

    assert comparison.startswith(
        "Local Organic Spinach offers a more sustainable choice with certified organic production, "
        "excellent sustainability rating, low carbon footprint."
    )


def test_comparison_without_benefits(seed_products):
    comparison = build_comparison(seed_products["prod-009"])
    assert "with sustainable practices." in comparison


def test_fallback_response(seed_products):
    bananas = seed_products["prod-002"]
    alternatives = [seed_products["prod-003"], seed_products["prod-001"]]

    response = generate_fallback_recommendations(bananas, alternatives)

    assert response.source == "fallback"
    assert response.reasoning == FALLBACK_REASONING
    assert [r.id for r in response.recommendations] == ["prod-003", "prod-001"]
    first = response.recommendations[0]
    assert first.eco_credits == 50
    assert first.carbon_savings == pytest.approx(1.8)
    assert first.reason_for_recommendation == "Organic and sustainable"


def test_fallback_reason_for_conventional_product(seed_products):
    response = generate_fallback_recommendations(seed_products["prod-011"], [seed_products["prod-010"]])
    assert response.recommendations[0].reason_for_recommendation == "Lower carbon footprint"


def test_fallback_is_deterministic(seed_products):
    original = seed_products["prod-007"]
    alternatives = [seed_products["prod-006"]]

    first = generate_fallback_recommendations(original, alternatives)
    second = generate_fallback_recommendations(original, alternatives)

    assert first.model_dump(by_alias=True) == second.model_dump(by_alias=True)


def test_fallback_empty_alternatives(seed_products):
    response = generate_fallback_recommendations(seed_products["prod-007"], [])
    assert response.recommendations == []
