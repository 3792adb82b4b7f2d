"""
Two-stage sustainable alternatives lookup.

1. Similarity search shortlists the top SHORTLIST_SIZE look-alikes
2. Sustainability ranking keeps the best ALTERNATIVES_LIMIT of those

Both stages take the catalog as an argument; nothing is cached between
calls. An empty result means no sustainable alternative exists, not an
error.
"""
import math
from typing import Iterable, List, Tuple

from ecoswap.core.logging import get_logger
from ecoswap.models import Product, RecommendationAnalysis
from ecoswap.services.recommendation.ranking import rank_by_sustainability
from ecoswap.services.recommendation.similarity import (
    find_similar_products,
    score_breakdown,
    similar_products,
)

logger = get_logger(__name__)

SHORTLIST_SIZE = 5
ALTERNATIVES_LIMIT = 2
ANALYSIS_SHORTLIST_SIZE = 10


def find_sustainable_alternatives(query: Product, catalog: Iterable[Product]) -> List[Product]:
    """
    Up to two greener look-alikes of the query product.

    Args:
        query: Product the user selected
        catalog: Full candidate list from the catalog provider

    Returns:
        Alternatives ordered by sustainability improvement (may be empty)
    """
    shortlist = find_similar_products(query, catalog, limit=SHORTLIST_SIZE)
    if not shortlist:
        logger.info("sustainable_alternatives_none", product_id=query.id)
        return []

    logger.debug(
        "sustainable_alternatives_shortlist",
        product_id=query.id,
        shortlist=score_breakdown(shortlist),
    )

    alternatives = rank_by_sustainability(
        query,
        similar_products(shortlist),
        limit=ALTERNATIVES_LIMIT,
    )
    logger.info(
        "sustainable_alternatives_found",
        product_id=query.id,
        shortlist_size=len(shortlist),
        alternative_ids=[p.id for p in alternatives],
    )
    return alternatives


def get_detailed_recommendations(
    query: Product,
    catalog: Iterable[Product],
) -> Tuple[List[Product], RecommendationAnalysis]:
    """Alternatives plus summary statistics about how they were found."""
    catalog = list(catalog)
    alternatives = find_sustainable_alternatives(query, catalog)

    similarity_matches = len(find_similar_products(query, catalog, limit=ANALYSIS_SHORTLIST_SIZE))
    improvements = [alt.sustainability_score - query.sustainability_score for alt in alternatives]
    # Half-up rounding, so 2.5 -> 3 and -2.5 -> -2.
    average_improvement = math.floor(sum(improvements) / len(improvements) + 0.5) if improvements else 0

    analysis = RecommendationAnalysis(
        total_candidates=sum(1 for p in catalog if p.id != query.id),
        similarity_matches=similarity_matches,
        sustainability_improvements=sum(1 for delta in improvements if delta > 0),
        average_score_improvement=average_improvement,
    )
    return alternatives, analysis
