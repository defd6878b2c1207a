"""
Outbox Processor

Drains eligible outbox tasks, one at a time, with attempt bookkeeping and
exponential backoff.

Per task the order is fixed:
1. claim: one conditional UPDATE increments `attempts` and pushes
   `next_retry_at` out by the backoff delay, committed before delivery;
2. deliver;
3. finalize: `sent` (plus the subscription's `notified` flag, in one
   transaction) or a recorded failure.

A crash between 1 and 3 leaves the task `pending` and due again once
`next_retry_at` passes. A crash on the last allowed attempt leaves a
pending task with no attempts left; the next drain after its `next_retry_at`
moves it to `failed`. The claim compares against the `attempts` value that
was read, so two overlapping drains cannot both claim the same attempt.
"""

import logging
from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, List, Optional

from ..database.adapter import DatabaseAdapter, affected_rows
from ..observability.tracing import create_span
from ..security import sanitize_error_message
from ..subscriptions.store import SubscriptionStore
from .models import MAX_ATTEMPTS, OutboxStatus, OutboxTask, calculate_backoff

logger = logging.getLogger(__name__)

Deliver = Callable[[OutboxTask], Awaitable[None]]

ABANDONED_WITHOUT_OUTCOME = "Attempts exhausted; last attempt did not complete"

_TASK_COLUMNS = """
    id, kind, subscription_id, target_id, payload, status, attempts,
    last_error, next_retry_at, created_at, updated_at, sent_at
"""


@dataclass
class DrainResult:
    """Counts from one drain pass."""
    selected: int = 0
    sent: int = 0
    failed: int = 0  # transient and terminal
    dead: int = 0  # terminal only
    skipped: int = 0
    errors: int = 0

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


class OutboxProcessor:
    """
    Processes outbox tasks and records their outcome.

    Features:
    - Selects pending tasks whose retry time has come
    - Claims each task atomically before delivery
    - Marks tasks sent (and the subscription notified) or failed
    - Abandons tasks after max_attempts
    """

    def __init__(
        self,
        db: DatabaseAdapter,
        subscriptions: SubscriptionStore,
        batch_size: int = 100,
        max_attempts: int = MAX_ATTEMPTS,
    ):
        self._db = db
        self._subscriptions = subscriptions
        self.batch_size = batch_size
        self.max_attempts = max_attempts

    async def fetch_eligible(self, now: datetime) -> List[OutboxTask]:
        """Pending tasks under the attempt budget whose retry time is due, oldest first."""
        rows = await self._db.fetch(
            f"""
            SELECT {_TASK_COLUMNS}
            FROM outbox_tasks
            WHERE status = $1
              AND attempts < $2
              AND (next_retry_at IS NULL OR next_retry_at <= $3)
            ORDER BY created_at ASC
            LIMIT $4
            """,
            OutboxStatus.PENDING.value,
            self.max_attempts,
            now,
            self.batch_size
        )
        return [OutboxTask.from_row(row) for row in rows]

    async def claim(self, task: OutboxTask, now: datetime) -> Optional[OutboxTask]:
        """
        Record the upcoming attempt before it is made.

        Returns:
            The task with its new attempt count, or None if another runner
            changed it since it was read.
        """
        next_retry_at = now + calculate_backoff(task.attempts)
        status = await self._db.execute(
            """
            UPDATE outbox_tasks
            SET attempts = attempts + 1, next_retry_at = $1, updated_at = $2
            WHERE id = $3 AND status = $4 AND attempts = $5
            """,
            next_retry_at,
            now,
            task.id,
            OutboxStatus.PENDING.value,
            task.attempts
        )
        if affected_rows(status) != 1:
            return None

        return task.model_copy(update={
            "attempts": task.attempts + 1,
            "next_retry_at": next_retry_at,
            "updated_at": now,
        })

    async def mark_sent(self, task: OutboxTask, now: datetime) -> None:
        """Finalize a delivered task and flag its subscription, in one transaction."""
        async with self._db.transaction() as tx:
            await tx.execute(
                """
                UPDATE outbox_tasks
                SET status = $1, sent_at = $2, updated_at = $3,
                    next_retry_at = NULL, last_error = NULL
                WHERE id = $4
                """,
                OutboxStatus.SENT.value,
                now,
                now,
                task.id
            )
            await self._subscriptions.mark_notified(task.subscription_id, tx=tx)

    async def record_failure(self, task: OutboxTask, error: BaseException, now: datetime) -> OutboxStatus:
        """
        Store the error. The task becomes terminal once its attempts reach
        max_attempts; otherwise it stays pending until next_retry_at.
        """
        if task.attempts >= self.max_attempts:
            status = OutboxStatus.FAILED
        else:
            status = OutboxStatus.PENDING

        await self._db.execute(
            """
            UPDATE outbox_tasks
            SET status = $1, last_error = $2, updated_at = $3
            WHERE id = $4
            """,
            status.value,
            sanitize_error_message(error),
            now,
            task.id
        )
        return status

    async def expire_exhausted(self, now: datetime) -> int:
        """
        Fail pending tasks that have used every attempt without a recorded
        outcome, once their last attempt's retry time has passed.

        Returns:
            Number of tasks moved to `failed`.
        """
        status = await self._db.execute(
            """
            UPDATE outbox_tasks
            SET status = $1, last_error = COALESCE(last_error, $2), updated_at = $3
            WHERE status = $4
              AND attempts >= $5
              AND (next_retry_at IS NULL OR next_retry_at <= $6)
            """,
            OutboxStatus.FAILED.value,
            ABANDONED_WITHOUT_OUTCOME,
            now,
            OutboxStatus.PENDING.value,
            self.max_attempts,
            now
        )
        expired = affected_rows(status)
        if expired:
            logger.error(f"Abandoned {expired} outbox task(s) whose last attempt never completed")
        return expired

    async def process_task(self, task: OutboxTask, deliver: Deliver, now: datetime, result: DrainResult) -> None:
        """Run one task through claim, delivery and finalize."""
        if task.status == OutboxStatus.SENT or task.attempts >= self.max_attempts:
            result.skipped += 1
            return

        try:
            claimed = await self.claim(task, now)
        except Exception as e:
            result.errors += 1
            logger.error(f"Outbox task {task.id}: claim failed: {e}", exc_info=True)
            return

        if claimed is None:
            result.skipped += 1
            logger.info(f"Outbox task {task.id} claimed by another runner, skipping")
            return

        try:
            await deliver(claimed)
        except Exception as e:
            try:
                status = await self.record_failure(claimed, e, now)
            except Exception as store_error:
                result.errors += 1
                logger.error(
                    f"Outbox task {task.id}: failed to record delivery error: {store_error}",
                    exc_info=True
                )
                return

            result.failed += 1
            if status == OutboxStatus.FAILED:
                result.dead += 1
                logger.error(
                    f"Outbox task {task.id} abandoned after {claimed.attempts} attempts: {e}"
                )
            else:
                logger.warning(
                    f"Outbox task {task.id} failed (attempt {claimed.attempts}), "
                    f"retry at {claimed.next_retry_at}: {e}"
                )
            return

        try:
            await self.mark_sent(claimed, now)
        except Exception as e:
            # Delivered but not finalized: the task is retried later and may
            # send a duplicate.
            result.errors += 1
            logger.error(f"Outbox task {task.id}: delivered but finalize failed: {e}", exc_info=True)
            return

        result.sent += 1
        logger.info(f"Delivered outbox task {task.id} (attempt {claimed.attempts})")

    async def drain(self, deliver: Deliver, now: datetime) -> DrainResult:
        """Process every eligible task once, sequentially."""
        result = DrainResult()

        try:
            expired = await self.expire_exhausted(now)
        except Exception as e:
            result.errors += 1
            logger.error(f"Failed to expire exhausted outbox tasks: {e}", exc_info=True)
        else:
            result.failed += expired
            result.dead += expired

        tasks = await self.fetch_eligible(now)
        result.selected = len(tasks)

        for task in tasks:
            with create_span("outbox.process_task", {"task.id": task.id, "task.kind": task.kind.value}):
                await self.process_task(task, deliver, now, result)

        return result

    async def get(self, task_id: str) -> Optional[OutboxTask]:
        row = await self._db.fetchrow(
            f"SELECT {_TASK_COLUMNS} FROM outbox_tasks WHERE id = $1",
            task_id
        )
        return OutboxTask.from_row(row) if row else None

    async def list_tasks(self, status: Optional[OutboxStatus] = None, limit: int = 100) -> List[OutboxTask]:
        if status is None:
            rows = await self._db.fetch(
                f"SELECT {_TASK_COLUMNS} FROM outbox_tasks ORDER BY created_at ASC LIMIT $1",
                limit
            )
        else:
            rows = await self._db.fetch(
                f"""
                SELECT {_TASK_COLUMNS} FROM outbox_tasks
                WHERE status = $1 ORDER BY created_at ASC LIMIT $2
                """,
                status.value,
                limit
            )
        return [OutboxTask.from_row(row) for row in rows]

    async def get_stats(self) -> Dict[str, int]:
        """Get outbox statistics."""
        rows = await self._db.fetch(
            """
            SELECT status, COUNT(*) AS count
            FROM outbox_tasks
            GROUP BY status
            """
        )

        stats = {status.value: 0 for status in OutboxStatus}
        for row in rows:
            stats[row["status"]] = int(row["count"])

        return stats
