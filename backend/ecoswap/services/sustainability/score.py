"""
Sustainability score (0-100) derived from carbon intensity, organic status
and category.

score = 50
      + 30 / 20 / 10 / -10 for carbon intensity < 1 / < 3 / < 5 / otherwise
      + 15 if organic
      + 10 if the category is naturally sustainable (Produce, Grains)
clamped to [0, 100].
"""
from enum import Enum
from typing import Union

BASE_SCORE = 50
ORGANIC_BONUS = 15
CATEGORY_BONUS = 10

# (upper bound exclusive, adjustment); anything above the last bound gets CARBON_PENALTY
CARBON_TIERS = (
    (1.0, 30),
    (3.0, 20),
    (5.0, 10),
)
CARBON_PENALTY = -10

NATURALLY_SUSTAINABLE_CATEGORIES = frozenset({"Produce", "Grains"})


def is_naturally_sustainable(category: Union[str, Enum]) -> bool:
    # Compare on the plain value so strings and enum members behave alike.
    value = getattr(category, "value", category)
    return value in NATURALLY_SUSTAINABLE_CATEGORIES


def carbon_adjustment(carbon_intensity: float) -> int:
    for upper_bound, adjustment in CARBON_TIERS:
        if carbon_intensity < upper_bound:
            return adjustment
    return CARBON_PENALTY


def calculate_sustainability_score(
    carbon_intensity: float,
    is_organic: bool,
    category: Union[str, Enum],
) -> int:
    """
    Derive the sustainability score for a product.

    Args:
        carbon_intensity: kg CO2e per unit
        is_organic: Organic certification flag
        category: Product category (plain string or ProductCategory)

    Returns:
        Integer score in [0, 100]
    """
    score = BASE_SCORE + carbon_adjustment(carbon_intensity)
    if is_organic:
        score += ORGANIC_BONUS
    if is_naturally_sustainable(category):
        score += CATEGORY_BONUS
    return max(0, min(100, score))
