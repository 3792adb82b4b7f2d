"""Pydantic models for products and recommendation results."""

from .product import Product, ProductCategory
from .recommendation import (
    ProductRecommendation,
    RecommendationAnalysis,
    RecommendationResponse,
    SimilarityScore,
)

__all__ = [
    "Product",
    "ProductCategory",
    "ProductRecommendation",
    "RecommendationAnalysis",
    "RecommendationResponse",
    "SimilarityScore",
]
