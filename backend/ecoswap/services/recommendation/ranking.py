"""
Sustainability ranking of shortlisted candidates.

Improvement score of a candidate relative to the query product:
    0-60  carbon reduction, proportional to the query's carbon intensity
    25    candidate is organic and the query is not
    15    candidate is in a naturally sustainable category
    0-20  sustainability score gain / 5

Sorted descending; equal scores keep input order.
"""
from typing import List, Sequence, Tuple

from ecoswap.core.logging import get_logger
from ecoswap.models import Product
from ecoswap.services.sustainability import is_naturally_sustainable

logger = get_logger(__name__)

CARBON_WEIGHT = 60.0
ORGANIC_WEIGHT = 25.0
CATEGORY_WEIGHT = 15.0
SCORE_GAIN_CAP = 20.0
SCORE_GAIN_DIVISOR = 5.0

DEFAULT_RANK_LIMIT = 2


def carbon_reduction_score(query: Product, candidate: Product) -> float:
    """
    Share of the query's carbon intensity the candidate saves, scaled to 0..60.

    A zero-carbon query has nothing to reduce, so the component is 0.
    """
    if query.carbon_intensity <= 0:
        return 0.0
    reduction = max(0.0, query.carbon_intensity - candidate.carbon_intensity)
    return min(CARBON_WEIGHT, reduction / query.carbon_intensity * CARBON_WEIGHT)


def sustainability_ranking_score(query: Product, candidate: Product) -> float:
    score = carbon_reduction_score(query, candidate)

    if candidate.is_organic and not query.is_organic:
        score += ORGANIC_WEIGHT

    if is_naturally_sustainable(candidate.category):
        score += CATEGORY_WEIGHT

    improvement = candidate.sustainability_score - query.sustainability_score
    if improvement > 0:
        score += min(SCORE_GAIN_CAP, improvement / SCORE_GAIN_DIVISOR)

    return score


def score_candidates(query: Product, candidates: Sequence[Product]) -> List[Tuple[Product, float]]:
    """Candidates paired with their improvement score, best first."""
    scored = [(c, sustainability_ranking_score(query, c)) for c in candidates]
    scored.sort(key=lambda item: item[1], reverse=True)
    return scored


def rank_by_sustainability(
    query: Product,
    candidates: Sequence[Product],
    limit: int = DEFAULT_RANK_LIMIT,
) -> List[Product]:
    """
    Best `limit` candidates by environmental improvement over the query.

    Args:
        query: Product the user selected
        candidates: Shortlisted products, in similarity order
        limit: Maximum number of results

    Returns:
        Products sorted by improvement score, highest first
    """
    ranked = score_candidates(query, candidates)[:max(limit, 0)]

    for product, score in ranked:
        logger.debug(
            "sustainability_candidate_ranked",
            product_id=query.id,
            candidate_id=product.id,
            ranking_score=round(score, 2),
        )

    logger.debug(
        "sustainability_ranking_completed",
        product_id=query.id,
        candidates_count=len(candidates),
        ranked_count=len(ranked),
    )
    return [product for product, _ in ranked]
