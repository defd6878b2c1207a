"""
Observability Module

Provides OpenTelemetry tracing and structured logging.
"""

from .tracing import (
    init_tracing,
    get_tracer,
    get_current_span,
    get_trace_id,
    create_span,
)
from .logging import configure_logging, StructuredFormatter, TraceContextFilter

__all__ = [
    # Tracing
    "init_tracing",
    "get_tracer",
    "get_current_span",
    "get_trace_id",
    "create_span",
    # Logging
    "configure_logging",
    "StructuredFormatter",
    "TraceContextFilter",
]
