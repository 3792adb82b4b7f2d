"""
Health check endpoints.
"""
from fastapi import APIRouter

from ecoswap.core.logging import get_logger
from ecoswap.services.ai.llm_client import get_llm_client
from ecoswap.services.catalog import get_catalog_service

logger = get_logger(__name__)
router = APIRouter()


@router.get("/")
async def health_check():
    """
    Basic health check endpoint.
    """
    catalog = get_catalog_service()
    return {
        "status": "ok",
        "message": "API is running",
        "catalog_loaded": catalog.is_loaded,
    }


@router.get("/llm")
async def llm_health():
    """
    Copy-generation LLM status.

    Reports configuration and circuit breaker state without calling the
    backend. "degraded" means comparison copy is served by the local
    fallback (no API key, or the circuit is open).
    """
    llm_client = get_llm_client()
    details = llm_client.describe()
    breaker_state = details["circuit_breaker"]["state"]

    if not details["configured"]:
        status = "degraded"
        message = "LLM API key not configured; using fallback comparison copy"
    elif breaker_state == "open":
        status = "degraded"
        message = "LLM circuit breaker open; using fallback comparison copy"
    else:
        status = "ok"
        message = "LLM copy generation available"

    return {"status": status, "message": message, **details}
