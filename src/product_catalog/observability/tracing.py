"""OpenTelemetry tracing with Starlette middleware."""

from __future__ import annotations

from contextlib import contextmanager
import logging
import time
from typing import TYPE_CHECKING, Any

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter as GrpcOTLPSpanExporter
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter as HttpOTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.trace import SpanKind, Status, StatusCode

from product_catalog.observability.context import bind_span, start_request_context
from product_catalog.observability.metrics import REQUEST_COUNT, REQUEST_LATENCY


if TYPE_CHECKING:
    from collections.abc import Generator

    from opentelemetry.trace import Span, Tracer
    from starlette.requests import Request
    from starlette.responses import Response

    from product_catalog.config import Settings

logger = logging.getLogger(__name__)

_tracer_holder: dict[str, Tracer | None] = {"tracer": None}


def init_tracing(service_name: str = "product-catalog") -> TracerProvider:
    """Install a tracer provider for ``service_name``."""
    resource = Resource.create({"service.name": service_name})
    provider = TracerProvider(resource=resource)
    trace.set_tracer_provider(provider)
    _tracer_holder["tracer"] = trace.get_tracer(__name__)
    logger.info("Tracing initialized for service: %s", service_name)
    return provider


def configure_trace_exporter(settings: Settings, provider: TracerProvider | None = None) -> bool:
    """Attach an OTLP span exporter when ``settings.otlp_enabled``.

    Returns True when an exporter was attached.
    """
    if not settings.otlp_enabled:
        return False

    active_provider = provider or trace.get_tracer_provider()
    if not isinstance(active_provider, TracerProvider):
        active_provider = init_tracing(settings.service_name)

    try:
        if settings.otlp_protocol == "grpc":
            exporter = GrpcOTLPSpanExporter(endpoint=settings.otlp_endpoint, insecure=True)
        else:
            exporter = HttpOTLPSpanExporter(endpoint=settings.otlp_endpoint)
    except Exception as exc:
        logger.error("Failed to configure OTLP exporter: %s", exc, exc_info=True)
        return False

    active_provider.add_span_processor(BatchSpanProcessor(exporter))
    logger.info("OTLP trace export enabled (%s) to %s", settings.otlp_protocol, settings.otlp_endpoint)
    return True


def get_tracer() -> Tracer:
    if _tracer_holder["tracer"] is None:
        _tracer_holder["tracer"] = trace.get_tracer(__name__)
    return _tracer_holder["tracer"]  # type: ignore[return-value]


@contextmanager
def create_span(
    name: str,
    kind: SpanKind = SpanKind.INTERNAL,
    attributes: dict[str, Any] | None = None,
) -> Generator[Span, None, None]:
    """Create a traced span and publish its id to the log context."""
    tracer = get_tracer()
    with tracer.start_as_current_span(name, kind=kind, record_exception=False, set_status_on_exception=False) as span:
        if attributes:
            for key, value in attributes.items():
                span.set_attribute(key, value)

        bind_span(span.get_span_context())

        try:
            yield span
        except Exception as exc:
            span.set_status(Status(StatusCode.ERROR, str(exc)))
            span.record_exception(exc)
            raise


class TraceContextMiddleware:
    """ASGI middleware that seeds the trace context for each HTTP request.

    A well-formed incoming ``x-trace-id`` header is reused so log lines can be
    joined with the caller's trace.
    """

    def __init__(self, app: Any) -> None:
        self.app = app

    async def __call__(self, scope: dict, receive: Any, send: Any) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = dict(scope.get("headers", []))
        start_request_context(headers.get(b"x-trace-id", b"").decode("latin-1") or None)
        await self.app(scope, receive, send)


def _route_label(request: Request) -> str:
    endpoint = request.scope.get("endpoint")
    return getattr(endpoint, "__name__", "unmatched")


async def trace_request(request: Request, call_next: Any) -> Response:
    """HTTP middleware: one server span plus request metrics per request."""
    attributes = {
        "http.method": request.method,
        "http.url": str(request.url),
        "http.target": request.url.path,
    }

    # The route label is only known once the router has matched the request.
    start = time.perf_counter()
    with create_span("http.request", kind=SpanKind.SERVER, attributes=attributes) as span:
        try:
            response: Response = await call_next(request)
        except Exception:
            REQUEST_COUNT.labels(route=_route_label(request), method=request.method, status="500").inc()
            raise
        finally:
            REQUEST_LATENCY.labels(route=_route_label(request), method=request.method).observe(
                time.perf_counter() - start
            )

        route = _route_label(request)
        span.set_attribute("http.route", route)
        span.set_attribute("http.status_code", response.status_code)
        if response.status_code >= 500:
            span.set_status(Status(StatusCode.ERROR, f"HTTP {response.status_code}"))
        REQUEST_COUNT.labels(route=route, method=request.method, status=str(response.status_code)).inc()
        return response
