"""
Async LLM client for comparison copy generation.

Talks to any OpenAI-compatible /chat/completions endpoint over httpx (the
default base URL is Gemini's OpenAI-compatible API). One request per call,
no retries: callers fall back to deterministic copy on any failure.

Environment configuration:
- LLM_API_BASE: Base URL for the API
- LLM_API_KEY: API key / bearer token (unset = copy generation disabled)
- LLM_MODEL: Model name (default: gemini-1.5-flash)
- LLM_TIMEOUT_SECONDS: Request timeout in seconds (default: 10.0)
- LLM_MAX_TOKENS: Completion token budget (default: 1024)
"""
import os
import time
from typing import Any, Dict, List, Optional

import httpx

from ecoswap.core.circuit_breaker import CircuitBreaker, CircuitBreakerOpenError
from ecoswap.core.logging import get_logger
from ecoswap.core.metrics import record_llm_error, record_llm_request, record_llm_tokens

logger = get_logger(__name__)

DEFAULT_API_BASE = "https://generativelanguage.googleapis.com/v1beta/openai"
DEFAULT_MODEL = "gemini-1.5-flash"


class LLMNotConfiguredError(RuntimeError):
    """No API key configured; copy generation runs in fallback mode."""


class LLMClient:
    """Async HTTP client for chat completions."""

    def __init__(
        self,
        api_base: str,
        api_key: Optional[str],
        model: str,
        timeout_seconds: float = 10.0,
        max_tokens: int = 1024,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_base = api_base.rstrip("/")
        self.api_key = api_key
        self.model = model
        self.timeout_seconds = timeout_seconds
        self.max_tokens = max_tokens
        self._transport = transport

        self.circuit_breaker = CircuitBreaker(
            name="llm_copywriter",
            failure_threshold=0.5,
            time_window_seconds=60,
            open_duration_seconds=30,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def _post(self, path: str, json_payload: Dict[str, Any]) -> httpx.Response:
        """POST and fail on non-2xx, so the breaker counts HTTP errors too."""
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }
        async with httpx.AsyncClient(
            base_url=self.api_base,
            timeout=self.timeout_seconds,
            transport=self._transport,
        ) as client:
            response = await client.post(path, headers=headers, json=json_payload)
        response.raise_for_status()
        return response

    async def chat(
        self,
        agent: str,
        messages: List[Dict[str, str]],
        max_tokens: Optional[int] = None,
        response_format: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Call the chat completion endpoint.

        Args:
            agent: Logical caller name for metrics and logs ("copywriter")
            messages: OpenAI-style chat messages
            max_tokens: Completion budget (defaults to the client's)
            response_format: Optional response_format, e.g. JSON mode

        Returns:
            Decoded JSON response body.

        Raises:
            LLMNotConfiguredError: no API key
            CircuitBreakerOpenError: backend recently failing
            httpx.HTTPError: timeout, transport or non-2xx failure
            ValueError: response body is not JSON
        """
        if not self.is_configured:
            record_llm_error(agent, "missing_api_key")
            raise LLMNotConfiguredError("LLM API key not configured")

        payload: Dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": 0.2,
            "max_tokens": max_tokens or self.max_tokens,
        }
        if response_format:
            payload["response_format"] = response_format

        start = time.time()
        try:
            response: httpx.Response = await self.circuit_breaker.call_async(
                self._post,
                "/chat/completions",
                json_payload=payload,
            )
        except CircuitBreakerOpenError:
            record_llm_error(agent, "circuit_open")
            logger.warning("llm_circuit_open", agent=agent)
            raise
        except httpx.TimeoutException as exc:
            record_llm_error(agent, "timeout")
            logger.warning(
                "llm_timeout",
                agent=agent,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            raise
        except httpx.HTTPStatusError as exc:
            record_llm_error(agent, "http_status")
            logger.warning(
                "llm_http_status_error",
                agent=agent,
                status_code=exc.response.status_code,
                error=str(exc),
            )
            raise
        except httpx.HTTPError as exc:
            record_llm_error(agent, "http_error")
            logger.warning(
                "llm_http_error",
                agent=agent,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            raise
        finally:
            record_llm_request(agent, self.model, (time.time() - start) * 1000.0)

        data = response.json()
        if not isinstance(data, dict):
            raise ValueError("LLM response body is not a JSON object")

        usage = data.get("usage") or {}
        record_llm_tokens(
            agent,
            input_tokens=int(usage.get("prompt_tokens") or 0),
            output_tokens=int(usage.get("completion_tokens") or 0),
        )
        return data

    def describe(self) -> Dict[str, Any]:
        """Configuration summary for health checks (never includes the key)."""
        return {
            "configured": self.is_configured,
            "api_base": self.api_base,
            "model": self.model,
            "timeout_seconds": self.timeout_seconds,
            "circuit_breaker": self.circuit_breaker.get_metrics(),
        }


def extract_message_content(response: Dict[str, Any]) -> str:
    """choices[0].message.content of an OpenAI-style response, or ""."""
    choices = response.get("choices") if isinstance(response, dict) else None
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return ""
    message = choices[0].get("message")
    content = message.get("content") if isinstance(message, dict) else None
    return content if isinstance(content, str) else ""


_llm_client: Optional[LLMClient] = None


def get_llm_client() -> LLMClient:
    """Process-wide LLM client built from environment variables."""
    global _llm_client
    if _llm_client is None:
        _llm_client = LLMClient(
            api_base=os.getenv("LLM_API_BASE", DEFAULT_API_BASE),
            api_key=os.getenv("LLM_API_KEY") or None,
            model=os.getenv("LLM_MODEL", DEFAULT_MODEL),
            timeout_seconds=float(os.getenv("LLM_TIMEOUT_SECONDS", "10.0") or "10.0"),
            max_tokens=int(os.getenv("LLM_MAX_TOKENS", "1024") or "1024"),
        )
    return _llm_client
