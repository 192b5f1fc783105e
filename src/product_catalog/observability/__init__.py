"""Observability module for logging, tracing and Prometheus metrics."""

from product_catalog.observability.context import (
    bind_span,
    get_trace_context,
    set_trace_context,
    start_request_context,
    trace_context,
)
from product_catalog.observability.logging import JsonFormatter, configure_logging
from product_catalog.observability.metrics import (
    REQUEST_COUNT,
    REQUEST_LATENCY,
    STORE_ERRORS,
    STORE_OPERATION_LATENCY,
    get_metrics,
    get_metrics_content_type,
    track_latency,
)
from product_catalog.observability.tracing import (
    TraceContextMiddleware,
    configure_trace_exporter,
    create_span,
    get_tracer,
    init_tracing,
    trace_request,
)


__all__ = [
    "REQUEST_COUNT",
    "REQUEST_LATENCY",
    "STORE_ERRORS",
    "STORE_OPERATION_LATENCY",
    "JsonFormatter",
    "TraceContextMiddleware",
    "bind_span",
    "configure_logging",
    "configure_trace_exporter",
    "create_span",
    "get_metrics",
    "get_metrics_content_type",
    "get_trace_context",
    "get_tracer",
    "init_tracing",
    "set_trace_context",
    "start_request_context",
    "trace_context",
    "trace_request",
    "track_latency",
]
