"""Trace ids stamped on every log line of a catalog request.

``TraceContextMiddleware`` opens one context per HTTP request; ``create_span``
then binds each store span to it, so a line logged inside ``store.update``
carries that span's id next to the request's trace id.
"""

from __future__ import annotations

from contextvars import ContextVar
import re
from typing import TYPE_CHECKING
from uuid import uuid4


if TYPE_CHECKING:
    from opentelemetry.trace import SpanContext


TRACE_ID_RE = re.compile(r"^[0-9a-f]{32}$")

trace_context: ContextVar[dict | None] = ContextVar("catalog_trace_context", default=None)


def generate_trace_id() -> str:
    return uuid4().hex


def generate_span_id() -> str:
    return uuid4().hex[:16]


def get_trace_context() -> dict:
    """Return the ids for the current task.

    Code running outside a request (startup, tests) gets a fresh trace.
    """
    ctx = trace_context.get()
    if not ctx or not ctx.get("trace_id"):
        ctx = {"trace_id": generate_trace_id(), "span_id": generate_span_id()}
        trace_context.set(ctx)
    return ctx


def set_trace_context(trace_id: str, span_id: str, **extra: object) -> None:
    trace_context.set({"trace_id": trace_id, "span_id": span_id, **extra})


def start_request_context(incoming_trace_id: str | None = None) -> dict:
    """Open the context for one HTTP request.

    A caller-supplied id is kept only when it is 32 lowercase hex digits;
    anything else starts a new trace.
    """
    trace_id = incoming_trace_id.strip().lower() if incoming_trace_id else ""
    if not TRACE_ID_RE.match(trace_id):
        trace_id = generate_trace_id()
    set_trace_context(trace_id, generate_span_id())
    return get_trace_context()


def bind_span(span_context: SpanContext) -> None:
    """Point subsequent log lines at ``span_context``; invalid contexts are ignored."""
    if not span_context.is_valid:
        return
    ctx = trace_context.get() or {}
    trace_context.set({**ctx, "span_id": format(span_context.span_id, "016x")})
