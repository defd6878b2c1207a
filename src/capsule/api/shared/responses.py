"""
Standard API Response Models

Provides consistent response shapes across all endpoints.
"""

from datetime import datetime, timezone
from typing import TypeVar, Generic, Optional, List
from uuid import uuid4

from pydantic import BaseModel, Field, field_serializer


T = TypeVar('T')


def _utcnow() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(timezone.utc)


def _zulu(value: datetime) -> str:
    return value.isoformat().replace("+00:00", "Z")


class ResponseMeta(BaseModel):
    """Metadata included in all responses."""

    trace_id: str = Field(default_factory=lambda: str(uuid4()))
    timestamp: datetime = Field(default_factory=_utcnow)

    @field_serializer("timestamp")
    def _serialize_timestamp(self, value: datetime) -> str:
        return _zulu(value)


class SuccessResponse(BaseModel, Generic[T]):
    """
    Standard success response wrapper.

    Response shape:
    {
        "data": { ... },
        "meta": {
            "trace_id": "abc-123",
            "timestamp": "2026-01-22T12:00:00Z"
        }
    }
    """

    data: T
    meta: ResponseMeta = Field(default_factory=ResponseMeta)

    @classmethod
    def create(cls, data: T, trace_id: Optional[str] = None) -> "SuccessResponse[T]":
        meta = ResponseMeta(trace_id=trace_id or str(uuid4()))
        return cls(data=data, meta=meta)


class ErrorDetail(BaseModel):
    """Detailed error information for validation errors."""

    field: Optional[str] = None
    message: str
    code: Optional[str] = None


class ErrorBody(BaseModel):
    """Error body with code, message, and details."""

    code: str
    message: str
    details: Optional[List[ErrorDetail]] = None
    trace_id: str = Field(default_factory=lambda: str(uuid4()))
    timestamp: datetime = Field(default_factory=_utcnow)

    @field_serializer("timestamp")
    def _serialize_timestamp(self, value: datetime) -> str:
        return _zulu(value)


class ErrorResponse(BaseModel):
    """
    Standard error response.

    Response shape:
    {
        "error": {
            "code": "UNAUTHORIZED",
            "message": "Human-readable error message",
            "details": [...],
            "trace_id": "abc-123",
            "timestamp": "2026-01-22T12:00:00Z"
        }
    }
    """

    error: ErrorBody
