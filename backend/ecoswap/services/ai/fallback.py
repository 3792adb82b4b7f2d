"""
Deterministic comparison copy, used whenever the LLM is unavailable.

Output depends only on the products passed in (no clock, no randomness),
so identical inputs always give identical responses. The same helpers
supply defaults for fields missing from a partially valid LLM response.
"""
import math
from typing import List, Sequence

from ecoswap.models import Product, ProductRecommendation, RecommendationResponse

MIN_ECO_CREDITS = 10
MAX_ECO_CREDITS = 50

FALLBACK_REASONING = (
    "These alternatives have been selected based on their superior sustainability "
    "metrics, including lower carbon footprints and organic certifications."
)

COMPARISON_RATIONALE = (
    "This product helps reduce your environmental impact while maintaining quality and value. "
    "By choosing this alternative, you're supporting eco-friendly practices and contributing "
    "to a more sustainable future. The improved sustainability metrics make this an excellent "
    "choice for environmentally conscious consumers."
)


def clamp_eco_credits(credits: int) -> int:
    return max(MIN_ECO_CREDITS, min(MAX_ECO_CREDITS, credits))


def calculate_eco_credits(product: Product) -> int:
    """
    Eco credits awarded for choosing this product, 10-50.

    floor(score / 5), +15 organic, +10 score above 80, +10 carbon below 1 kg.
    """
    credits = math.floor(product.sustainability_score / 5)
    if product.is_organic:
        credits += 15
    if product.sustainability_score > 80:
        credits += 10
    if product.carbon_intensity < 1:
        credits += 10
    return clamp_eco_credits(credits)


def calculate_carbon_savings(original: Product, alternative: Product) -> float:
    return max(0.0, original.carbon_intensity - alternative.carbon_intensity)


def product_benefits(product: Product) -> List[str]:
    benefits = []
    if product.is_organic:
        benefits.append("certified organic production")
    if product.sustainability_score > 70:
        benefits.append("excellent sustainability rating")
    if product.carbon_intensity < 2:
        benefits.append("low carbon footprint")
    return benefits


def build_comparison(product: Product) -> str:
    benefit_text = ", ".join(product_benefits(product)) or "sustainable practices"
    return f"{product.name} offers a more sustainable choice with {benefit_text}. {COMPARISON_RATIONALE}"


def recommendation_reason(product: Product) -> str:
    return "Organic and sustainable" if product.is_organic else "Lower carbon footprint"


def build_fallback_recommendation(original: Product, alternative: Product) -> ProductRecommendation:
    return ProductRecommendation.from_product(
        alternative,
        comparison=build_comparison(alternative),
        eco_credits=calculate_eco_credits(alternative),
        carbon_savings=calculate_carbon_savings(original, alternative),
        reason_for_recommendation=recommendation_reason(alternative),
    )


def generate_fallback_recommendations(
    original: Product,
    alternatives: Sequence[Product],
) -> RecommendationResponse:
    """Comparison copy for every alternative, built locally."""
    return RecommendationResponse(
        recommendations=[build_fallback_recommendation(original, alt) for alt in alternatives],
        reasoning=FALLBACK_REASONING,
        source="fallback",
    )
