"""Prometheus metrics for payment fetches, stale responses, and badge counts"""

from prometheus_client import Counter, Histogram

# Payments view metrics
payments_fetch_counter = Counter(
    "payments_fetch_total",
    "Payment page fetches",
    ["direction", "outcome"],  # outcome: ok | error | stale
)

payments_fetch_latency_histogram = Histogram(
    "payments_fetch_latency_seconds",
    "Node payments API response time",
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

stale_response_counter = Counter(
    "stale_responses_discarded_total",
    "Responses dropped because a newer request superseded them",
)

# Badge counts
category_count_failure_counter = Counter(
    "category_count_failures_total",
    "Badge count fetches that fell back to 0",
    ["category"],  # all | incoming | outgoing
)

# Price feed
price_feed_failures_counter = Counter(
    "price_feed_failures_total",
    "Failed BTC price lookups",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_fetch(direction: str, outcome: str) -> None:
    """Count one fetch by direction and outcome"""
    payments_fetch_counter.labels(direction=direction, outcome=outcome).inc()
