"""
Prometheus metrics for signature validation and the receiver service.

This module provides:
- Signature validation outcome counter (result)
- HTTP request counter (method, path, status)
- Request latency histogram (method, path)

Metrics are stored in-memory using prometheus-client.
"""

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST


# =============================================================================
# Metric Definitions
# =============================================================================

# result: valid, missing_header, malformed_timestamp, stale_or_future_timestamp,
# malformed_signature, signature_mismatch, body_read_error
signature_validations_total = Counter(
    "signature_validations_total",
    "Total webhook signature validation outcomes",
    labelnames=["result"]
)

http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    labelnames=["method", "path", "status"]
)

request_latency_seconds = Histogram(
    "request_latency_seconds",
    "Request latency in seconds",
    labelnames=["method", "path"]
)


# =============================================================================
# Helper Functions
# =============================================================================

def record_validation_outcome(result: str) -> None:
    """
    Record a signature validation outcome.

    Args:
        result: "valid" or the reason code of the rejection
    """
    signature_validations_total.labels(result=result).inc()


def record_http_request(method: str, path: str, status: int, latency_seconds: float) -> None:
    """
    Record an HTTP request in metrics.

    Args:
        method: HTTP method (GET, POST, etc.)
        path: Request path
        status: HTTP status code
        latency_seconds: Request processing time in seconds
    """
    # Normalize path to avoid high-cardinality labels
    normalized_path = path.split("?")[0]

    http_requests_total.labels(
        method=method,
        path=normalized_path,
        status=str(status)
    ).inc()

    request_latency_seconds.labels(
        method=method,
        path=normalized_path
    ).observe(latency_seconds)


def get_metrics() -> bytes:
    """Generate Prometheus exposition format metrics."""
    return generate_latest()


def get_metrics_content_type() -> str:
    return CONTENT_TYPE_LATEST
