"""
Outbox Writer

Enqueues notification tasks. One insert per subscription/target pair; the
uniqueness key on (subscription_id, target_id) makes repeated or
concurrent discovery runs converge on a single task.
"""

import logging
from datetime import datetime
from typing import Iterable, List, Optional, Union

from ..database.adapter import DatabaseAdapter, affected_rows
from .models import OutboxTask, RegionUnlockedPayload, TeamUnlockedPayload

logger = logging.getLogger(__name__)

Payload = Union[TeamUnlockedPayload, RegionUnlockedPayload]


class OutboxWriter:
    """
    Writes tasks to the outbox.

    Usage:
        writer = OutboxWriter(db)
        task = await writer.enqueue(payload, now)
        if task is None:
            ...  # a task already exists for this subscription and target
    """

    def __init__(self, db: DatabaseAdapter):
        self._db = db

    async def enqueue(self, payload: Payload, now: datetime) -> Optional[OutboxTask]:
        """
        Write one task for the payload's subscription and target.

        Returns:
            The created OutboxTask, or None when a task for the same
            subscription and target is already in the outbox.
        """
        task = OutboxTask.for_payload(payload, now)

        status = await self._db.execute(
            """
            INSERT INTO outbox_tasks (
                id, kind, subscription_id, target_id, payload,
                status, attempts, created_at, updated_at
            ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9)
            ON CONFLICT (subscription_id, target_id) DO NOTHING
            """,
            task.id,
            task.kind.value,
            task.subscription_id,
            task.target_id,
            task.payload_json(),
            task.status.value,
            task.attempts,
            task.created_at,
            task.updated_at,
        )

        if affected_rows(status) == 0:
            logger.debug(
                "Outbox task already exists: subscription=%s target=%s",
                task.subscription_id, task.target_id
            )
            return None

        logger.debug(
            "Wrote task to outbox: id=%s kind=%s subscription=%s",
            task.id, task.kind.value, task.subscription_id
        )
        return task

    async def enqueue_many(self, payloads: Iterable[Payload], now: datetime) -> List[OutboxTask]:
        """Enqueue each payload in its own write; returns only newly created tasks."""
        created = []
        for payload in payloads:
            task = await self.enqueue(payload, now)
            if task is not None:
                created.append(task)
        return created
