"""HTTP Metrics — Prometheus request counter and latency histogram.

Invariants:
    - One count and one latency observation per finished request, labelled by
      service, status code, method, and route template
    - Route templates (/api/user_id/{user_id}), never raw paths: label cardinality
      stays bounded by the number of routes

Design Decisions:
    - Registered on the prometheus_client default registry; /metrics renders it
    - Latency in milliseconds with 300 / 1200 / 5000 buckets
"""

from prometheus_client import (
    CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest,
)

SERVICE_NAME = "user-items-api"
UNMATCHED_PATH = "unmatched"

REQUESTS = Counter(
    "http_requests_total",
    "HTTP requests processed, partitioned by status code, method and route.",
    ["service", "code", "method", "path"],
)
LATENCY = Histogram(
    "http_request_duration_milliseconds",
    "HTTP request latency in milliseconds.",
    ["service", "code", "method", "path"],
    buckets=(300, 1200, 5000),
)


def observe_request(
    method: str, path: str, status_code: int, duration_ms: float,
) -> None:
    labels = (SERVICE_NAME, str(status_code), method, path)
    REQUESTS.labels(*labels).inc()
    LATENCY.labels(*labels).observe(duration_ms)


def render_latest() -> tuple[bytes, str]:
    """Current exposition text and its content type."""
    return generate_latest(), CONTENT_TYPE_LATEST
