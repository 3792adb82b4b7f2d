"""
Unit tests for Prometheus metrics collection.
"""
from prometheus_client import REGISTRY

from ecoswap.core.metrics import (
    get_metrics,
    get_metrics_content_type,
    normalize_endpoint,
    record_copy_source,
    record_http_request,
    record_llm_error,
    record_llm_schema_validation_failure,
    record_llm_tokens,
    record_recommendation_outcome,
)


def _sample(name, labels):
    return REGISTRY.get_sample_value(name, labels) or 0.0


def test_normalize_endpoint():
    assert normalize_endpoint("/products/prod-001") == "/products/{product_id}"
    assert normalize_endpoint("/products/top") == "/products/top"
    assert normalize_endpoint("/products") == "/products"
    assert normalize_endpoint("/recommend/prod-001") == "/recommend/{product_id}"
    assert normalize_endpoint("/recommend/prod-001/alternatives") == "/recommend/{product_id}/alternatives"
    assert normalize_endpoint("/recommend/alternatives") == "/recommend/alternatives"
    assert normalize_endpoint("/recommend/copy?x=1") == "/recommend/copy"


def test_record_http_request_counts_errors():
    labels = {"method": "GET", "endpoint": "/products/{product_id}", "status": "404"}
    error_labels = {"method": "GET", "endpoint": "/products/{product_id}", "status_code": "404"}
    before = _sample("http_requests_total", labels)
    errors_before = _sample("http_errors_total", error_labels)

    record_http_request("GET", "/products/prod-404", 404, 0.01)

    assert _sample("http_requests_total", labels) == before + 1
    assert _sample("http_errors_total", error_labels) == errors_before + 1


def test_successful_request_is_not_an_error():
    error_labels = {"method": "GET", "endpoint": "/health/", "status_code": "200"}
    record_http_request("GET", "/health/", 200, 0.001)
    assert _sample("http_errors_total", error_labels) == 0.0


def test_recommendation_counters():
    before = _sample("recommendation_requests_total", {"outcome": "none"})
    source_before = _sample("recommendation_copy_source_total", {"source": "fallback"})

    record_recommendation_outcome("none")
    record_copy_source("fallback")

    assert _sample("recommendation_requests_total", {"outcome": "none"}) == before + 1
    assert _sample("recommendation_copy_source_total", {"source": "fallback"}) == source_before + 1


def test_llm_counters():
    error_labels = {"agent": "copywriter", "error_type": "timeout"}
    token_labels = {"agent": "copywriter", "direction": "output"}
    schema_labels = {"agent": "copywriter"}
    errors_before = _sample("llm_errors_total", error_labels)
    tokens_before = _sample("llm_tokens_total", token_labels)
    schema_before = _sample("llm_schema_validation_failures_total", schema_labels)

    record_llm_error("copywriter", "timeout")
    record_llm_tokens("copywriter", input_tokens=0, output_tokens=25)
    record_llm_schema_validation_failure("copywriter")

    assert _sample("llm_errors_total", error_labels) == errors_before + 1
    assert _sample("llm_tokens_total", token_labels) == tokens_before + 25
    assert _sample("llm_schema_validation_failures_total", schema_labels) == schema_before + 1


def test_exposition_format():
    record_recommendation_outcome("found")

    body = get_metrics().decode("utf-8")

    assert "recommendation_requests_total" in body
    assert get_metrics_content_type().startswith("text/plain")
