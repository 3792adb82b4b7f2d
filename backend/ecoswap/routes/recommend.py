"""
Sustainable alternative endpoints.

POST /recommend/alternatives               product (+ optional catalog) -> alternatives
GET  /recommend/{product_id}/alternatives  alternatives + analysis for a catalog product
POST /recommend/copy                       comparison copy for given alternatives
GET  /recommend/{product_id}               alternatives + comparison copy in one call
"""
import time
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Path
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ecoswap.core.logging import get_logger
from ecoswap.core.metrics import record_ranking_score, record_recommendation_outcome
from ecoswap.models import Product, RecommendationAnalysis, RecommendationResponse
from ecoswap.routes.products import load_catalog
from ecoswap.services.ai.copywriter import generate_recommendations
from ecoswap.services.recommendation import (
    find_sustainable_alternatives,
    get_detailed_recommendations,
    sustainability_ranking_score,
)

logger = get_logger(__name__)

router = APIRouter()


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AlternativesRequest(_CamelModel):
    """Query product plus an optional candidate catalog (defaults to the loaded one)."""
    product: Product
    catalog: Optional[List[Product]] = None


class CopyRequest(_CamelModel):
    original_product: Product
    alternatives: List[Product] = Field(default_factory=list)


class AlternativesResponse(_CamelModel):
    product: Product
    alternatives: List[Product]
    analysis: RecommendationAnalysis


class RecommendationDetailResponse(_CamelModel):
    product: Product
    analysis: RecommendationAnalysis
    recommendation: RecommendationResponse


def _record_outcome(query: Product, alternatives: List[Product]) -> None:
    record_recommendation_outcome("found" if alternatives else "none")
    for alternative in alternatives:
        record_ranking_score(sustainability_ranking_score(query, alternative))


def _catalog_product(product_id: str) -> Product:
    product = load_catalog().get(product_id)
    if product is None:
        logger.warning("recommendation_product_not_found", product_id=product_id)
        raise HTTPException(status_code=404, detail=f"Product {product_id} not found")
    return product


@router.post("/alternatives", response_model=List[Product])
async def alternatives(request: AlternativesRequest):
    """
    Up to two more sustainable look-alikes of the given product.

    An empty list means no better alternative exists.
    """
    start_time = time.time()
    catalog = request.catalog if request.catalog is not None else load_catalog().products

    results = find_sustainable_alternatives(request.product, catalog)
    _record_outcome(request.product, results)

    logger.info(
        "alternatives_completed",
        product_id=request.product.id,
        catalog_size=len(catalog),
        results_count=len(results),
        latency_ms=int((time.time() - start_time) * 1000),
    )
    return results


@router.get("/{product_id}/alternatives", response_model=AlternativesResponse)
async def catalog_alternatives(product_id: str = Path(..., description="Product ID")):
    """Alternatives for a catalog product, with lookup statistics."""
    product = _catalog_product(product_id)
    results, analysis = get_detailed_recommendations(product, load_catalog().products)
    _record_outcome(product, results)
    return AlternativesResponse(product=product, alternatives=results, analysis=analysis)


@router.post("/copy", response_model=RecommendationResponse)
async def comparison_copy(request: CopyRequest):
    """
    Comparison copy for alternatives of a product.

    Uses the LLM when configured and reachable, otherwise deterministic
    copy; the "source" field tells which.
    """
    return await generate_recommendations(request.original_product, request.alternatives)


@router.get("/{product_id}", response_model=RecommendationDetailResponse)
async def recommend(product_id: str = Path(..., description="Product ID")):
    """Alternatives and their comparison copy for a catalog product."""
    start_time = time.time()
    product = _catalog_product(product_id)

    results, analysis = get_detailed_recommendations(product, load_catalog().products)
    _record_outcome(product, results)
    recommendation = await generate_recommendations(product, results)

    logger.info(
        "recommendation_completed",
        product_id=product_id,
        results_count=len(results),
        copy_source=recommendation.source,
        latency_ms=int((time.time() - start_time) * 1000),
    )
    return RecommendationDetailResponse(product=product, analysis=analysis, recommendation=recommendation)
