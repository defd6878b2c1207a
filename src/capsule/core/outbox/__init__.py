"""
Outbox Pattern Implementation

Durable notification tasks with at-most-once notification per subscription
and bounded, backed-off retries.

Usage:
    from capsule.core.outbox import OutboxWriter, OutboxProcessor

    writer = OutboxWriter(db)
    await writer.enqueue(payload, now)

    processor = OutboxProcessor(db, subscriptions)
    result = await processor.drain(deliver, now)
"""

from .models import (
    MAX_ATTEMPTS,
    MAX_BACKOFF,
    OutboxStatus,
    OutboxTask,
    RegionUnlockedPayload,
    TaskKind,
    TeamUnlockedPayload,
    calculate_backoff,
    parse_payload,
)
from .writer import OutboxWriter
from .processor import DrainResult, OutboxProcessor

__all__ = [
    "MAX_ATTEMPTS",
    "MAX_BACKOFF",
    "OutboxStatus",
    "OutboxTask",
    "RegionUnlockedPayload",
    "TaskKind",
    "TeamUnlockedPayload",
    "calculate_backoff",
    "parse_payload",
    "OutboxWriter",
    "DrainResult",
    "OutboxProcessor",
]
