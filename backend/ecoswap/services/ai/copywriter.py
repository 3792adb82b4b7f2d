"""
Comparison copy for sustainable alternatives.

Asks the LLM to explain why each alternative beats the original product.
The result is never an error for the caller:
- no API key -> deterministic fallback (expected degraded mode)
- request failure, open circuit, timeout -> logged, fallback
- unparseable response -> logged, fallback

A response that parses but omits or garbles fields is kept, with the
missing fields filled from the deterministic generator.
"""
import math
from typing import Dict, List, Optional, Sequence

from ecoswap.core.logging import get_logger
from ecoswap.core.metrics import record_copy_source, record_llm_schema_validation_failure
from ecoswap.models import Product, ProductRecommendation, RecommendationResponse
from ecoswap.services.ai.fallback import (
    build_fallback_recommendation,
    clamp_eco_credits,
    generate_fallback_recommendations,
)
from ecoswap.services.ai.llm_client import (
    LLMClient,
    LLMNotConfiguredError,
    extract_message_content,
    get_llm_client,
)
from ecoswap.services.ai.schema import CopyEntry, CopyPayload, SchemaValidationError, parse_copy_payload

logger = get_logger(__name__)

AGENT_NAME = "copywriter"

DEFAULT_LLM_REASONING = "These alternatives offer better sustainability profiles."

SYSTEM_PROMPT = (
    "You are an AI sustainability expert helping users make eco-friendly shopping choices. "
    "You MUST respond with a single JSON object only, no markdown and no commentary."
)


def _describe_product(product: Product) -> str:
    return "\n".join([
        f"   - Name: {product.name}",
        f"   - Description: {product.description}",
        f"   - Price: ${product.price}",
        f"   - Carbon Intensity: {product.carbon_intensity} kg CO2e",
        f"   - Organic: {'Yes' if product.is_organic else 'No'}",
        f"   - Sustainability Score: {product.sustainability_score}/100",
        f"   - Category: {product.category.value}",
    ])


def build_recommendation_prompt(original: Product, alternatives: Sequence[Product]) -> str:
    alternative_blocks = "\n\n".join(
        f"{index}. {alt.name} (productId: {alt.id})\n{_describe_product(alt)}"
        for index, alt in enumerate(alternatives, start=1)
    )
    return (
        "ORIGINAL PRODUCT:\n"
        f"{_describe_product(original)}\n\n"
        "ALTERNATIVE PRODUCTS:\n"
        f"{alternative_blocks}\n\n"
        "TASK:\n"
        "For each alternative product, provide:\n"
        "1. A compelling 80-120 word comparison explaining why this alternative is more sustainable\n"
        "2. Eco credits (10-50 points based on sustainability improvement)\n"
        "3. Carbon savings in kg CO2e compared to the original product\n"
        "4. A brief reason for recommendation (focus on environmental benefits)\n\n"
        "Format your response as JSON:\n"
        '{"recommendations": [{"productId": "product_id", "comparison": "text", '
        '"ecoCreds": number, "carbonSavings": number, "reasonForRecommendation": "text"}], '
        '"reasoning": "Overall explanation of why these alternatives are better"}\n\n'
        "Focus on environmental impact reduction, carbon footprint improvements, "
        "organic and ethical advantages, and long-term environmental value."
    )


def _match_entries(
    payload: CopyPayload,
    alternatives: Sequence[Product],
) -> List[Optional[CopyEntry]]:
    """
    Pair each alternative with its LLM entry: by productId first, then by position.

    A positional entry is skipped only when its productId names another
    alternative; unknown ids ("product_id", "3") still pair by position.
    """
    by_id: Dict[str, CopyEntry] = {}
    for entry in payload.recommendations:
        if entry.product_id and entry.product_id not in by_id:
            by_id[entry.product_id] = entry
    claimed = {p.id for p in alternatives if p.id in by_id}

    matched: List[Optional[CopyEntry]] = []
    for index, product in enumerate(alternatives):
        entry = by_id.get(product.id)
        if entry is None and index < len(payload.recommendations):
            positional = payload.recommendations[index]
            if positional.product_id not in claimed:
                entry = positional
        matched.append(entry)
    return matched


def merge_copy(
    original: Product,
    alternatives: Sequence[Product],
    payload: CopyPayload,
) -> RecommendationResponse:
    """Combine LLM copy with deterministic defaults for anything missing."""
    recommendations: List[ProductRecommendation] = []
    for product, entry in zip(alternatives, _match_entries(payload, alternatives)):
        default = build_fallback_recommendation(original, product)
        if entry is None:
            recommendations.append(default)
            continue

        eco_credits = default.eco_credits
        if entry.eco_credits is not None:
            eco_credits = clamp_eco_credits(math.floor(entry.eco_credits + 0.5))

        carbon_savings = default.carbon_savings
        if entry.carbon_savings is not None:
            carbon_savings = max(0.0, entry.carbon_savings)

        recommendations.append(
            ProductRecommendation.from_product(
                product,
                comparison=entry.comparison or default.comparison,
                eco_credits=eco_credits,
                carbon_savings=carbon_savings,
                reason_for_recommendation=entry.reason_for_recommendation or default.reason_for_recommendation,
            )
        )

    return RecommendationResponse(
        recommendations=recommendations,
        reasoning=payload.reasoning or DEFAULT_LLM_REASONING,
        source="llm",
    )


class RecommendationCopywriter:
    """Writes comparison copy with the LLM, falling back to local templates."""

    def __init__(self, llm_client: Optional[LLMClient] = None):
        self._llm_client = llm_client or get_llm_client()

    async def generate(
        self,
        original: Product,
        alternatives: Sequence[Product],
    ) -> RecommendationResponse:
        if not alternatives:
            return RecommendationResponse(recommendations=[], reasoning="", source="fallback")

        try:
            response = await self._llm_client.chat(
                agent=AGENT_NAME,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": build_recommendation_prompt(original, alternatives)},
                ],
                response_format={"type": "json_object"},
            )
        except LLMNotConfiguredError:
            logger.debug("copy_generation_llm_disabled", product_id=original.id)
            return self._fallback(original, alternatives, reason="not_configured")
        except Exception as exc:
            logger.warning(
                "copy_generation_llm_failed",
                product_id=original.id,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            return self._fallback(original, alternatives, reason="llm_error")

        try:
            payload = parse_copy_payload(extract_message_content(response), agent=AGENT_NAME)
        except SchemaValidationError as exc:
            record_llm_schema_validation_failure(AGENT_NAME)
            logger.warning(
                "copy_generation_invalid_response",
                product_id=original.id,
                error=str(exc),
            )
            return self._fallback(original, alternatives, reason="invalid_response")

        result = merge_copy(original, alternatives, payload)
        record_copy_source(result.source)
        logger.info(
            "copy_generation_completed",
            product_id=original.id,
            source=result.source,
            recommendations=len(result.recommendations),
        )
        return result

    def _fallback(
        self,
        original: Product,
        alternatives: Sequence[Product],
        reason: str,
    ) -> RecommendationResponse:
        result = generate_fallback_recommendations(original, alternatives)
        record_copy_source(result.source)
        logger.info(
            "copy_generation_fallback",
            product_id=original.id,
            reason=reason,
            recommendations=len(result.recommendations),
        )
        return result


_copywriter: Optional[RecommendationCopywriter] = None


def get_copywriter() -> RecommendationCopywriter:
    """Global singleton accessor."""
    global _copywriter
    if _copywriter is None:
        _copywriter = RecommendationCopywriter()
    return _copywriter


async def generate_recommendations(
    original_product: Product,
    alternatives: Sequence[Product],
) -> RecommendationResponse:
    """Comparison copy for the alternatives of one product; never raises for LLM failures."""
    return await get_copywriter().generate(original_product, alternatives)
