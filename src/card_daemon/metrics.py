"""
Defines Prometheus metrics for monitoring the hslcard2api application.

This module centralizes the definition of all Counter and Histogram metrics
used to track decode requests, their outcomes and HTTP traffic.
"""

from prometheus_client import Counter, Histogram

# Define Prometheus metrics
DECODE_REQUESTS = Counter(
    "hslcard2api_decode_requests_total", "Total decode requests", ["kind"]
)
SUCCESSFUL_DECODES = Counter(
    "hslcard2api_successful_decodes_total", "Total successful decodes", ["kind"]
)
DECODE_ERRORS = Counter(
    "hslcard2api_decode_errors_total", "Total decode errors", ["kind"]
)
CARD_STATUS_COUNTER = Counter(
    "hslcard2api_card_status_total", "Travel cards by resulting error status", ["status"]
)
DECODE_LATENCY = Histogram(
    "hslcard2api_decode_latency_seconds", "Time spent decoding card data", ["kind"]
)
HTTP_REQUESTS = Counter(
    "hslcard2api_http_requests_total", "Total HTTP requests", ["method", "endpoint", "status_code"]
)
HTTP_LATENCY = Histogram(
    "hslcard2api_http_request_latency_seconds",
    "HTTP request latency in seconds",
    ["method", "endpoint"],
)
