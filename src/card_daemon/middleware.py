"""
Contains custom FastAPI middleware for the hslcard2api application.
"""

import time

from fastapi import Request

from card_daemon.metrics import HTTP_LATENCY, HTTP_REQUESTS


async def prometheus_http_middleware(request: Request, call_next):
    """
    Records the latency and count of each HTTP request, labeled by method,
    endpoint and status code.

    The endpoint label is the request path as the client sent it, router
    prefixes included. None of the card endpoints take path parameters.
    """
    start = time.perf_counter()
    response = await call_next(request)
    elapsed = time.perf_counter() - start

    endpoint = request.url.path
    HTTP_REQUESTS.labels(
        method=request.method, endpoint=endpoint, status_code=response.status_code
    ).inc()
    HTTP_LATENCY.labels(method=request.method, endpoint=endpoint).observe(elapsed)
    return response
