"""
Shared API Middleware

Cross-cutting concerns for all API endpoints:
- Error handling with standardized responses
- Trace ID propagation for observability
"""

from .error_handler import register_error_handlers
from .trace import TraceMiddleware, get_trace_id

__all__ = [
    "register_error_handlers",
    "TraceMiddleware",
    "get_trace_id",
]
