"""
Prometheus metrics for the recommendation service.

Metric families:
- RED metrics for the HTTP surface (rate, errors, duration)
- Recommendation outcomes and which path produced the comparison copy
- Copy-generation LLM calls (latency, errors, tokens, schema failures)

Counters use the _total suffix, durations the _seconds suffix.
"""
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    REGISTRY,
    Counter,
    Histogram,
    generate_latest,
)

registry = REGISTRY

# ============================================================================
# RED METRICS
# ============================================================================

http_requests_total = Counter(
    "http_requests_total",
    "Total number of HTTP requests",
    ["method", "endpoint", "status"],
    registry=registry,
)

http_errors_total = Counter(
    "http_errors_total",
    "Total number of HTTP errors",
    ["method", "endpoint", "status_code"],
    registry=registry,
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "endpoint"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
    registry=registry,
)

# ============================================================================
# RECOMMENDATION METRICS
# ============================================================================

recommendation_requests_total = Counter(
    "recommendation_requests_total",
    "Sustainable alternative lookups by outcome",
    ["outcome"],
    registry=registry,
)

recommendation_copy_source_total = Counter(
    "recommendation_copy_source_total",
    "Comparison copy responses by producing path (llm or fallback)",
    ["source"],
    registry=registry,
)

sustainability_ranking_score = Histogram(
    "sustainability_ranking_score",
    "Distribution of sustainability improvement scores of ranked candidates",
    buckets=(0, 10, 20, 40, 60, 80, 100, 120),
    registry=registry,
)

# ============================================================================
# LLM METRICS
# ============================================================================

llm_requests_total = Counter(
    "llm_requests_total",
    "Copy-generation LLM requests",
    ["agent", "model"],
    registry=registry,
)

llm_request_duration_seconds = Histogram(
    "llm_request_duration_seconds",
    "Copy-generation LLM request latency in seconds",
    ["agent", "model"],
    buckets=(0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
    registry=registry,
)

llm_errors_total = Counter(
    "llm_errors_total",
    "Copy-generation LLM errors by type",
    ["agent", "error_type"],
    registry=registry,
)

llm_tokens_total = Counter(
    "llm_tokens_total",
    "Tokens consumed by copy-generation LLM calls",
    ["agent", "direction"],
    registry=registry,
)

llm_schema_validation_failures_total = Counter(
    "llm_schema_validation_failures_total",
    "LLM responses discarded because they did not match the expected schema",
    ["agent"],
    registry=registry,
)


# ============================================================================
# HELPER FUNCTIONS
# ============================================================================

def normalize_endpoint(path: str) -> str:
    """
    Collapse product ids in paths to keep label cardinality bounded.

    Examples:
        /products/prod-001 -> /products/{product_id}
        /recommend/prod-001/alternatives -> /recommend/{product_id}/alternatives
        /recommend/copy -> /recommend/copy
    """
    if "?" in path:
        path = path.split("?")[0]

    parts = path.split("/")
    if len(parts) >= 3 and parts[1] == "products" and parts[2] not in ("", "top"):
        parts[2] = "{product_id}"
    elif len(parts) >= 3 and parts[1] == "recommend" and parts[2] not in ("", "alternatives", "copy"):
        parts[2] = "{product_id}"
    return "/".join(parts)


def record_http_request(
    method: str,
    endpoint: str,
    status_code: int,
    duration_seconds: float,
) -> None:
    """Record RED metrics for a finished HTTP request."""
    normalized_endpoint = normalize_endpoint(endpoint)

    http_requests_total.labels(
        method=method,
        endpoint=normalized_endpoint,
        status=str(status_code),
    ).inc()

    if status_code >= 400:
        http_errors_total.labels(
            method=method,
            endpoint=normalized_endpoint,
            status_code=str(status_code),
        ).inc()

    http_request_duration_seconds.labels(
        method=method,
        endpoint=normalized_endpoint,
    ).observe(duration_seconds)


def record_recommendation_outcome(outcome: str) -> None:
    """outcome is "found" or "none"."""
    recommendation_requests_total.labels(outcome=outcome).inc()


def record_copy_source(source: str) -> None:
    recommendation_copy_source_total.labels(source=source).inc()


def record_ranking_score(score: float) -> None:
    sustainability_ranking_score.observe(score)


def record_llm_request(agent: str, model: str, duration_ms: float) -> None:
    llm_requests_total.labels(agent=agent, model=model).inc()
    llm_request_duration_seconds.labels(agent=agent, model=model).observe(duration_ms / 1000.0)


def record_llm_error(agent: str, error_type: str) -> None:
    llm_errors_total.labels(agent=agent, error_type=error_type).inc()


def record_llm_tokens(agent: str, input_tokens: int, output_tokens: int) -> None:
    if input_tokens:
        llm_tokens_total.labels(agent=agent, direction="input").inc(input_tokens)
    if output_tokens:
        llm_tokens_total.labels(agent=agent, direction="output").inc(output_tokens)


def record_llm_schema_validation_failure(agent: str) -> None:
    llm_schema_validation_failures_total.labels(agent=agent).inc()


def get_metrics() -> bytes:
    """Prometheus text exposition of the registry."""
    return generate_latest(registry)


def get_metrics_content_type() -> str:
    return CONTENT_TYPE_LATEST

