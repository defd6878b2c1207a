"""
Trace ID Middleware

Adds a trace_id to every request for log correlation.
"""

import contextvars
from uuid import uuid4

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from ....core.observability.tracing import get_trace_id as get_otel_trace_id


# Context variable for the request-scoped trace id
trace_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("trace_id", default="")


def get_trace_id() -> str:
    """
    Get the current trace ID.

    Returns the trace ID from the current request context,
    or generates a new one if not set.
    """
    return trace_id_var.get() or str(uuid4())


class TraceMiddleware(BaseHTTPMiddleware):
    """
    Middleware that extracts or generates a trace ID.

    Headers:
    - X-Trace-ID: Unique ID for this request (generated if not provided)

    When an OpenTelemetry span is active its trace id is used, so API
    responses and exported spans share one id.
    """

    async def dispatch(self, request: Request, call_next):
        trace_id = (
            request.headers.get("X-Trace-ID")
            or get_otel_trace_id()
            or str(uuid4())
        )
        trace_id_var.set(trace_id)

        # Add to request state for easy access in route handlers
        request.state.trace_id = trace_id

        response = await call_next(request)

        response.headers["X-Trace-ID"] = trace_id
        return response
