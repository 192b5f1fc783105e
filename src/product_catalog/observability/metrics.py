"""Prometheus metrics for the HTTP layer and the product store."""

from __future__ import annotations

from contextlib import contextmanager
import time
from typing import TYPE_CHECKING

from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest


if TYPE_CHECKING:
    from collections.abc import Generator


REQUEST_LATENCY = Histogram(
    "catalog_request_latency_seconds",
    "HTTP request latency in seconds",
    ["route", "method"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)

REQUEST_COUNT = Counter(
    "catalog_requests_total",
    "Total HTTP requests",
    ["route", "method", "status"],
)

STORE_OPERATION_LATENCY = Histogram(
    "catalog_store_operation_seconds",
    "Product store operation latency, including the full file load and save",
    ["operation"],
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0),
)

STORE_ERRORS = Counter(
    "catalog_store_errors_total",
    "Product store failures by operation and codec error type",
    ["operation", "error_type"],
)


@contextmanager
def track_latency(histogram: Histogram, **labels: str) -> Generator[None, None, None]:
    """Context manager to track operation latency."""
    start = time.perf_counter()
    try:
        yield
    finally:
        histogram.labels(**labels).observe(time.perf_counter() - start)


def get_metrics() -> bytes:
    """Generate Prometheus metrics output."""
    return generate_latest()


def get_metrics_content_type() -> str:
    return CONTENT_TYPE_LATEST
