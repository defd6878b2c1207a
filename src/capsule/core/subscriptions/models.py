"""
Subscription Models
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(timezone.utc)


class TargetKind(str, Enum):
    """What a subscription waits for."""
    ENTITY = "entity"
    REGION = "region"


class Subscriber(BaseModel):
    """A user who can receive unlock notifications."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    email: str
    name: Optional[str] = None
    created_at: datetime = Field(default_factory=_utcnow)


class Subscription(BaseModel):
    """
    A subscriber's request to hear about one target unlocking.

    `notified` flips false -> true once, after a successful send.
    `email` is filled in by queries that join the subscriber.
    """

    id: str = Field(default_factory=lambda: str(uuid4()))
    subscriber_id: str
    target_id: str
    target_kind: TargetKind = TargetKind.ENTITY
    notified: bool = False
    created_at: datetime = Field(default_factory=_utcnow)
    email: Optional[str] = None
