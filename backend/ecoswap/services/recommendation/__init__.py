"""Similarity search, sustainability ranking and the two-stage alternatives lookup."""

from .engine import find_sustainable_alternatives, get_detailed_recommendations
from .ranking import rank_by_sustainability, sustainability_ranking_score
from .similarity import calculate_similarity, find_similar_products

__all__ = [
    "calculate_similarity",
    "find_similar_products",
    "find_sustainable_alternatives",
    "get_detailed_recommendations",
    "rank_by_sustainability",
    "sustainability_ranking_score",
]
