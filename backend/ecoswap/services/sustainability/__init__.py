"""
Sustainability score derivation shared by the product model and the ranker.
"""
from .score import (
    NATURALLY_SUSTAINABLE_CATEGORIES,
    calculate_sustainability_score,
    is_naturally_sustainable,
)

__all__ = [
    "NATURALLY_SUSTAINABLE_CATEGORIES",
    "calculate_sustainability_score",
    "is_naturally_sustainable",
]
