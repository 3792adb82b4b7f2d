"""
Recommendation result models.

SimilarityScore lives only inside a similarity search; the others are
returned to callers and serialized with camelCase aliases.
"""
from typing import List, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .product import Product


class SimilarityScore(BaseModel):
    """A candidate with its similarity to the query and the reasons behind it."""
    product: Product
    score: float
    reasons: List[str] = Field(default_factory=list)


class ProductRecommendation(Product):
    """
    A product plus the comparison copy shown next to it.

    Frozen: built once per request and never edited afterwards.
    """

    model_config = ConfigDict(frozen=True)

    comparison: str
    eco_credits: int = Field(..., ge=10, le=50, alias="ecoCreds")
    carbon_savings: float = Field(..., ge=0)
    reason_for_recommendation: str

    @classmethod
    def from_product(
        cls,
        product: Product,
        comparison: str,
        eco_credits: int,
        carbon_savings: float,
        reason_for_recommendation: str,
    ) -> "ProductRecommendation":
        return cls(
            **product.stored_fields(),
            comparison=comparison,
            eco_credits=eco_credits,
            carbon_savings=carbon_savings,
            reason_for_recommendation=reason_for_recommendation,
        )


class RecommendationResponse(BaseModel):
    """Comparison copy for a set of alternatives."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    recommendations: List[ProductRecommendation] = Field(default_factory=list)
    reasoning: str = ""
    source: Literal["llm", "fallback"] = "fallback"


class RecommendationAnalysis(BaseModel):
    """Summary statistics for one alternatives lookup."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total_candidates: int
    similarity_matches: int
    sustainability_improvements: int
    average_score_improvement: int
