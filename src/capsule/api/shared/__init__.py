"""
Shared API Utilities

Common responses, errors and middleware for all API endpoints.
"""

from .responses import (
    ResponseMeta,
    SuccessResponse,
    ErrorDetail,
    ErrorBody,
    ErrorResponse,
)

from .error_codes import (
    ErrorCode,
    get_status_code,
)

from .exceptions import (
    APIException,
    ValidationError,
    NotFoundError,
    UnauthorizedError,
    ForbiddenError,
    DatabaseError,
)

from .middleware import (
    register_error_handlers,
    TraceMiddleware,
    get_trace_id,
)

__all__ = [
    # Responses
    "ResponseMeta",
    "SuccessResponse",
    "ErrorDetail",
    "ErrorBody",
    "ErrorResponse",
    # Error codes
    "ErrorCode",
    "get_status_code",
    # Exceptions
    "APIException",
    "ValidationError",
    "NotFoundError",
    "UnauthorizedError",
    "ForbiddenError",
    "DatabaseError",
    # Middleware
    "register_error_handlers",
    "TraceMiddleware",
    "get_trace_id",
]
