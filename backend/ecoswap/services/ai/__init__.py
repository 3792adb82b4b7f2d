"""
LLM-backed comparison copy with a deterministic fallback.
"""
from .copywriter import RecommendationCopywriter, generate_recommendations, get_copywriter
from .fallback import generate_fallback_recommendations
from .llm_client import LLMClient, LLMNotConfiguredError, get_llm_client

__all__ = [
    "LLMClient",
    "LLMNotConfiguredError",
    "RecommendationCopywriter",
    "generate_fallback_recommendations",
    "generate_recommendations",
    "get_copywriter",
    "get_llm_client",
]
