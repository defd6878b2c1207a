"""
Global Error Handler Middleware

Every error leaves the API as `{"error": ErrorBody}` with the request's
trace id, whatever raised it.
"""

import logging
from typing import List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ....core.roster.calendar import CalendarConfigError
from ..error_codes import ErrorCode
from ..exceptions import APIException
from ..responses import ErrorBody, ErrorDetail
from .trace import get_trace_id

logger = logging.getLogger(__name__)


def _request_trace_id(request: Request) -> str:
    return getattr(request.state, "trace_id", None) or get_trace_id()


def _error_response(
    status_code: int,
    code: ErrorCode,
    message: str,
    trace_id: str,
    details: Optional[List[ErrorDetail]] = None,
) -> JSONResponse:
    body = ErrorBody(code=code.value, message=message, details=details, trace_id=trace_id)
    return JSONResponse(status_code=status_code, content={"error": body.model_dump(mode="json")})


def register_error_handlers(app: FastAPI):
    """
    Register all error handlers on the FastAPI app.

    - APIException: its own code and status
    - RequestValidationError: 400 with one detail per bad field
    - CalendarConfigError: 500 CONFIGURATION_ERROR
    - anything else: 500 INTERNAL_ERROR, details kept out of the response
    """

    @app.exception_handler(APIException)
    async def api_exception_handler(request: Request, exc: APIException):
        trace_id = exc.trace_id or _request_trace_id(request)
        logger.warning(
            f"API Error: {exc.code.value} - {exc.message}",
            extra={"trace_id": trace_id, "error_code": exc.code.value, "path": request.url.path}
        )
        return _error_response(exc.status_code, exc.code, exc.message, trace_id, exc.details)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        trace_id = _request_trace_id(request)
        details = [
            ErrorDetail(
                field=".".join(str(loc) for loc in error["loc"]),
                message=error["msg"],
                code=error["type"],
            )
            for error in exc.errors()
        ]
        logger.warning(
            f"Validation Error on {request.url.path}: {len(details)} field(s)",
            extra={"trace_id": trace_id, "errors": [d.model_dump() for d in details]}
        )
        return _error_response(
            400, ErrorCode.VALIDATION_ERROR, "Request validation failed", trace_id, details
        )

    @app.exception_handler(CalendarConfigError)
    async def calendar_exception_handler(request: Request, exc: CalendarConfigError):
        trace_id = _request_trace_id(request)
        logger.error(f"Calendar configuration error: {exc}", extra={"trace_id": trace_id})
        return _error_response(
            500, ErrorCode.CONFIGURATION_ERROR, "Region calendar is misconfigured", trace_id
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        trace_id = _request_trace_id(request)
        logger.error(
            f"Unhandled {type(exc).__name__} on {request.url.path}: {exc}",
            exc_info=exc,
            extra={"trace_id": trace_id}
        )
        return _error_response(500, ErrorCode.INTERNAL_ERROR, "An internal error occurred", trace_id)
