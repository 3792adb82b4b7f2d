"""
Similarity search: shortlist catalog products that resemble a query product.

Additive score per candidate (max 105):
    40  same category
    0-35 description keyword overlap
    0-15 name token overlap
    10  related product type (affinity table)
    5   same brand (exact, case-sensitive)

Candidates scoring MIN_SIMILARITY_SCORE or less are dropped before the
limit is applied. Ties keep catalog order.
"""
import math
import re
from typing import Iterable, List, Optional, Sequence, Tuple

from ecoswap.core.logging import get_logger
from ecoswap.models import Product, SimilarityScore
from ecoswap.services.recommendation.affinity import AffinityGroups, get_affinity_groups

logger = get_logger(__name__)

CATEGORY_WEIGHT = 40
DESCRIPTION_WEIGHT = 35
NAME_WEIGHT = 15
AFFINITY_WEIGHT = 10
BRAND_WEIGHT = 5

MIN_SIMILARITY_SCORE = 15
DEFAULT_SIMILAR_LIMIT = 5

MAX_KEYWORDS = 10
MIN_KEYWORD_LENGTH = 3

STOP_WORDS = frozenset({
    "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for", "of", "with", "by",
    "is", "are", "was", "were", "be", "been", "being", "have", "has", "had", "do", "does", "did",
})

_NON_WORD = re.compile(r"[^\w\s]")


def extract_keywords(text: str) -> List[str]:
    """
    First MAX_KEYWORDS meaningful words of a text.

    Lower-cases, turns punctuation into spaces, drops stop words and words
    shorter than MIN_KEYWORD_LENGTH. Repeated words are kept.
    """
    words = _NON_WORD.sub(" ", text.lower()).split()
    keywords = [w for w in words if len(w) >= MIN_KEYWORD_LENGTH and w not in STOP_WORDS]
    return keywords[:MAX_KEYWORDS]


def keyword_overlap_score(description1: str, description2: str) -> int:
    """
    Keyword overlap scaled to 0..DESCRIPTION_WEIGHT.

    The ratio divides by the longer keyword list, not by the union.
    """
    words1 = extract_keywords(description1)
    words2 = extract_keywords(description2)
    longest = max(len(words1), len(words2))
    if longest == 0:
        return 0

    common = [w for w in words1 if w in words2]
    return math.floor(len(common) / longest * DESCRIPTION_WEIGHT)


def name_similarity_score(name1: str, name2: str) -> int:
    """
    Name token overlap scaled to 0..NAME_WEIGHT.

    A token of the first name matches when it contains, or is contained in,
    any token of the second ("tomato" ~ "tomatoes").
    """
    words1 = name1.lower().split()
    words2 = name2.lower().split()
    longest = max(len(words1), len(words2))
    if longest == 0:
        return 0

    matched = [w1 for w1 in words1 if any(w1 in w2 or w2 in w1 for w2 in words2)]
    return math.floor(len(matched) / longest * NAME_WEIGHT)


def affinity_bonus(
    query: Product,
    candidate: Product,
    affinity_groups: AffinityGroups,
) -> int:
    query_name = query.name.lower()
    candidate_name = candidate.name.lower()
    candidate_description = candidate.description.lower()

    for base_word, related_words in affinity_groups.items():
        if base_word not in query_name:
            continue
        if any(w in candidate_name or w in candidate_description for w in related_words):
            return AFFINITY_WEIGHT
    return 0


def calculate_similarity(
    query: Product,
    candidate: Product,
    affinity_groups: Optional[AffinityGroups] = None,
) -> SimilarityScore:
    """Score one candidate against the query product."""
    if affinity_groups is None:
        affinity_groups = get_affinity_groups()

    score = 0
    reasons: List[str] = []

    if query.category == candidate.category:
        score += CATEGORY_WEIGHT
        reasons.append("Same category")

    keyword_score = keyword_overlap_score(query.description, candidate.description)
    score += keyword_score
    if keyword_score > 10:
        reasons.append("Similar description")

    name_score = name_similarity_score(query.name, candidate.name)
    score += name_score
    if name_score > 5:
        reasons.append("Similar name")

    related_score = affinity_bonus(query, candidate, affinity_groups)
    score += related_score
    if related_score > 0:
        reasons.append("Related product type")

    if query.brand and candidate.brand and query.brand == candidate.brand:
        score += BRAND_WEIGHT
        reasons.append("Same brand")

    return SimilarityScore(product=candidate, score=score, reasons=reasons)


def find_similar_products(
    query: Product,
    catalog: Iterable[Product],
    limit: int = DEFAULT_SIMILAR_LIMIT,
    affinity_groups: Optional[AffinityGroups] = None,
) -> List[SimilarityScore]:
    """
    Most similar catalog products to the query, best first.

    Args:
        query: Product the user selected
        catalog: Candidate products (the query itself is skipped by id)
        limit: Maximum number of results
        affinity_groups: Affinity table override (defaults to the configured one)

    Returns:
        At most `limit` SimilarityScore entries, each scoring above
        MIN_SIMILARITY_SCORE
    """
    if affinity_groups is None:
        affinity_groups = get_affinity_groups()

    scored: List[SimilarityScore] = []
    examined = 0
    for candidate in catalog:
        if candidate.id == query.id:
            continue
        examined += 1
        result = calculate_similarity(query, candidate, affinity_groups)
        if result.score > MIN_SIMILARITY_SCORE:
            scored.append(result)

    # list.sort is stable: equal scores keep catalog order.
    scored.sort(key=lambda s: s.score, reverse=True)
    top = scored[:max(limit, 0)]

    logger.debug(
        "similarity_search_completed",
        product_id=query.id,
        candidates_examined=examined,
        matches=len(scored),
        returned=len(top),
    )
    return top


def similar_products(results: Sequence[SimilarityScore]) -> List[Product]:
    return [r.product for r in results]


def score_breakdown(results: Sequence[SimilarityScore]) -> List[Tuple[str, float, List[str]]]:
    """(product id, score, reasons) triples, for logging and API analysis."""
    return [(r.product.id, r.score, list(r.reasons)) for r in results]
