"""
Subscription Store

Durable subscriber/target pairs with a one-way `notified` flag.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence, Union

from ..database.adapter import DatabaseAdapter, Transaction, affected_rows, coerce_datetime
from .models import Subscriber, Subscription, TargetKind

logger = logging.getLogger(__name__)

_SUBSCRIPTION_COLUMNS = """
    s.id, s.subscriber_id, s.target_id, s.target_kind, s.notified, s.created_at
"""


def _row_to_subscription(row: Dict[str, Any]) -> Subscription:
    return Subscription(
        id=row["id"],
        subscriber_id=row["subscriber_id"],
        target_id=row["target_id"],
        target_kind=TargetKind(row["target_kind"]),
        notified=bool(row["notified"]),
        created_at=coerce_datetime(row["created_at"]),
        email=row.get("email"),
    )


class SubscriptionStore:
    """
    Reads and writes subscriptions.

    The dispatcher only needs find_unnotified() and mark_notified(); the
    remaining operations back the subscribe/unsubscribe flows of the app.
    """

    def __init__(self, db: DatabaseAdapter):
        self._db = db

    async def upsert_subscriber(self, subscriber: Subscriber) -> Subscriber:
        """Insert a subscriber or update the email/name of an existing one."""
        await self._db.execute(
            """
            INSERT INTO subscribers (id, email, name, created_at)
            VALUES ($1, $2, $3, $4)
            ON CONFLICT (id) DO UPDATE SET email = EXCLUDED.email, name = EXCLUDED.name
            """,
            subscriber.id,
            subscriber.email,
            subscriber.name,
            subscriber.created_at,
        )
        return subscriber

    async def subscribe(
        self,
        subscriber_id: str,
        target_id: str,
        target_kind: TargetKind = TargetKind.ENTITY,
    ) -> Subscription:
        """
        Subscribe to a target. Subscribing twice returns the existing row.
        """
        subscription = Subscription(
            subscriber_id=subscriber_id,
            target_id=target_id,
            target_kind=target_kind,
        )
        await self._db.execute(
            """
            INSERT INTO subscriptions (id, subscriber_id, target_id, target_kind, notified, created_at)
            VALUES ($1, $2, $3, $4, $5, $6)
            ON CONFLICT (subscriber_id, target_id) DO NOTHING
            """,
            subscription.id,
            subscription.subscriber_id,
            subscription.target_id,
            subscription.target_kind.value,
            False,
            subscription.created_at,
        )
        existing = await self.find(subscriber_id, target_id)
        return existing or subscription

    async def unsubscribe(self, subscriber_id: str, target_id: str) -> bool:
        status = await self._db.execute(
            "DELETE FROM subscriptions WHERE subscriber_id = $1 AND target_id = $2",
            subscriber_id,
            target_id,
        )
        return affected_rows(status) > 0

    async def get(self, subscription_id: str) -> Optional[Subscription]:
        row = await self._db.fetchrow(
            f"SELECT {_SUBSCRIPTION_COLUMNS} FROM subscriptions s WHERE s.id = $1",
            subscription_id,
        )
        return _row_to_subscription(row) if row else None

    async def find(self, subscriber_id: str, target_id: str) -> Optional[Subscription]:
        row = await self._db.fetchrow(
            f"""
            SELECT {_SUBSCRIPTION_COLUMNS} FROM subscriptions s
            WHERE s.subscriber_id = $1 AND s.target_id = $2
            """,
            subscriber_id,
            target_id,
        )
        return _row_to_subscription(row) if row else None

    async def list_for_subscriber(
        self,
        subscriber_id: str,
        target_kind: Optional[TargetKind] = None,
    ) -> List[Subscription]:
        if target_kind is None:
            rows = await self._db.fetch(
                f"""
                SELECT {_SUBSCRIPTION_COLUMNS} FROM subscriptions s
                WHERE s.subscriber_id = $1 ORDER BY s.created_at
                """,
                subscriber_id,
            )
        else:
            rows = await self._db.fetch(
                f"""
                SELECT {_SUBSCRIPTION_COLUMNS} FROM subscriptions s
                WHERE s.subscriber_id = $1 AND s.target_kind = $2 ORDER BY s.created_at
                """,
                subscriber_id,
                target_kind.value,
            )
        return [_row_to_subscription(row) for row in rows]

    async def find_unnotified(self, target_ids: Sequence[str]) -> List[Subscription]:
        """
        Subscriptions whose target is in `target_ids` and not yet notified,
        joined with the subscriber's email.
        """
        if not target_ids:
            return []

        placeholders = ", ".join(f"${i}" for i in range(2, len(target_ids) + 2))
        rows = await self._db.fetch(
            f"""
            SELECT {_SUBSCRIPTION_COLUMNS}, u.email
            FROM subscriptions s
            JOIN subscribers u ON u.id = s.subscriber_id
            WHERE s.notified = $1 AND s.target_id IN ({placeholders})
            ORDER BY s.created_at
            """,
            False,
            *target_ids,
        )
        return [_row_to_subscription(row) for row in rows]

    async def mark_notified(
        self,
        subscription_id: str,
        tx: Optional[Transaction] = None,
    ) -> bool:
        """
        Set `notified = true`. Marking an already-notified subscription is a
        no-op. Returns True when the flag changed.
        """
        conn: Union[DatabaseAdapter, Transaction] = tx or self._db
        status = await conn.execute(
            "UPDATE subscriptions SET notified = $1 WHERE id = $2 AND notified = $3",
            True,
            subscription_id,
            False,
        )
        changed = affected_rows(status) > 0
        if changed:
            logger.debug(f"Subscription {subscription_id} marked notified")
        return changed
