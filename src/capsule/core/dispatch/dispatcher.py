"""
Notification Dispatcher

One dispatch cycle = discovery, then drain, strictly in that order.

Discovery turns "target X is unlocked and subscriber S has not been told"
into a durable outbox task. Drain delivers eligible tasks through the
notifier. Neither phase holds state between cycles; everything a later
cycle needs is in the database.
"""

import logging
from datetime import datetime
from typing import List, Optional, Union

from pydantic import BaseModel, Field

from ..database.adapter import DatabaseAdapter
from ..notifier.base import Notifier
from ..notifier.templates import render
from ..observability.tracing import create_span
from ..outbox.models import OutboxTask, RegionUnlockedPayload, TeamUnlockedPayload
from ..outbox.processor import DrainResult, OutboxProcessor
from ..outbox.writer import OutboxWriter
from ..roster.models import Region
from ..roster.scheduler import UnlockScheduler
from ..subscriptions.models import Subscription, TargetKind
from ..subscriptions.store import SubscriptionStore

logger = logging.getLogger(__name__)

MSG_NOTHING_UNLOCKED = "No teams unlocked"
MSG_NO_PENDING = "No pending notifications"
MSG_DONE = "Dispatch complete"

Payload = Union[TeamUnlockedPayload, RegionUnlockedPayload]


class DiscoveryResult(BaseModel):
    unlocked_targets: int = 0
    new_targets: int = 0
    subscriptions_found: int = 0
    enqueued: int = 0
    errors: int = 0
    message: str = MSG_DONE


class DispatchSummary(BaseModel):
    """Counts reported for one dispatch cycle."""

    unlocked_targets: int = Field(
        0, description="Teams unlocked at the run instant, including ones notified in earlier runs"
    )
    new_targets: int = Field(
        0, description="Distinct teams or regions with at least one task enqueued in this run"
    )
    subscriptions_found: int = 0
    enqueued: int = 0
    sent: int = 0
    failed: int = 0
    dead: int = 0
    skipped: int = 0
    errors: int = 0
    message: str = MSG_DONE

    @classmethod
    def combine(cls, discovery: DiscoveryResult, drain: DrainResult) -> "DispatchSummary":
        return cls(
            unlocked_targets=discovery.unlocked_targets,
            new_targets=discovery.new_targets,
            subscriptions_found=discovery.subscriptions_found,
            enqueued=discovery.enqueued,
            sent=drain.sent,
            failed=drain.failed,
            dead=drain.dead,
            skipped=drain.skipped,
            errors=discovery.errors + drain.errors,
            message=discovery.message,
        )


class Dispatcher:
    """
    Runs discovery and drain.

    Usage:
        dispatcher = Dispatcher(scheduler, store, writer, processor, notifier, base_url)
        summary = await dispatcher.run(now)
    """

    def __init__(
        self,
        scheduler: UnlockScheduler,
        subscriptions: SubscriptionStore,
        writer: OutboxWriter,
        processor: OutboxProcessor,
        notifier: Notifier,
        app_base_url: str,
    ):
        self.scheduler = scheduler
        self.subscriptions = subscriptions
        self.writer = writer
        self.processor = processor
        self.notifier = notifier
        self.app_base_url = app_base_url

    # ------------------------------------------------------------------
    # Discovery
    # ------------------------------------------------------------------

    def build_payload(self, subscription: Subscription, now: datetime) -> Optional[Payload]:
        """Snapshot the target as it is now. None if the target is unknown."""
        if subscription.target_kind == TargetKind.REGION:
            try:
                region = Region(subscription.target_id)
            except ValueError:
                return None
            return RegionUnlockedPayload(
                subscription_id=subscription.id,
                subscriber_id=subscription.subscriber_id,
                email=subscription.email or "",
                region=region.value,
                kickoff_date=self.scheduler.calendar.kickoff(region),
                unlocked_count=self.scheduler.region_unlock_count(region, now),
            )

        team = self.scheduler.get_team(subscription.target_id)
        if team is None:
            return None
        return TeamUnlockedPayload(
            subscription_id=subscription.id,
            subscriber_id=subscription.subscriber_id,
            email=subscription.email or "",
            team_id=team.id,
            team_name=team.name,
            team_tag=team.tag,
            region=team.region.value,
            unlock_date=self.scheduler.unlock_date(team),
        )

    async def discover(self, now: datetime) -> DiscoveryResult:
        result = DiscoveryResult()

        entity_ids = self.scheduler.unlocked_entity_ids(now)
        region_ids = self.scheduler.unlocked_region_ids(now)
        result.unlocked_targets = len(entity_ids)
        if not entity_ids:
            result.message = MSG_NOTHING_UNLOCKED
            return result

        found = await self.subscriptions.find_unnotified(entity_ids + region_ids)
        entity_set = set(entity_ids)
        region_set = set(region_ids)
        pending: List[Subscription] = [
            s for s in found
            if (s.target_kind == TargetKind.ENTITY and s.target_id in entity_set)
            or (s.target_kind == TargetKind.REGION and s.target_id in region_set)
        ]
        result.subscriptions_found = len(pending)
        if not pending:
            result.message = MSG_NO_PENDING
            return result

        new_targets = set()
        for subscription in pending:
            payload = self.build_payload(subscription, now)
            if payload is None:
                logger.warning(
                    f"Subscription {subscription.id} targets unknown "
                    f"{subscription.target_kind.value} {subscription.target_id!r}, skipping"
                )
                continue
            try:
                task = await self.writer.enqueue(payload, now)
            except Exception as e:
                result.errors += 1
                logger.error(f"Failed to enqueue subscription {subscription.id}: {e}", exc_info=True)
                continue

            if task is not None:
                result.enqueued += 1
                new_targets.add(subscription.target_id)

        result.new_targets = len(new_targets)

        logger.info(
            f"Discovery: {result.unlocked_targets} unlocked ({result.new_targets} new), "
            f"{result.subscriptions_found} un-notified, {result.enqueued} enqueued"
        )
        return result

    # ------------------------------------------------------------------
    # Drain
    # ------------------------------------------------------------------

    async def deliver(self, task: OutboxTask) -> None:
        message = render(task.payload, self.app_base_url)
        await self.notifier.send_message(task.payload.email, message)

    async def drain(self, now: datetime) -> DrainResult:
        result = await self.processor.drain(self.deliver, now)
        logger.info(
            f"Drain: {result.selected} eligible, {result.sent} sent, "
            f"{result.failed} failed ({result.dead} abandoned), {result.skipped} skipped"
        )
        return result

    async def run(self, now: datetime) -> DispatchSummary:
        """One full cycle. Drain runs even when discovery finds nothing new."""
        with create_span("dispatch.run", {"dispatch.now": now.isoformat()}) as span:
            discovery = await self.discover(now)
            drained = await self.drain(now)
            summary = DispatchSummary.combine(discovery, drained)

            span.set_attribute("dispatch.enqueued", summary.enqueued)
            span.set_attribute("dispatch.sent", summary.sent)
            span.set_attribute("dispatch.failed", summary.failed)
            return summary


def build_dispatcher(
    db: DatabaseAdapter,
    scheduler: UnlockScheduler,
    notifier: Notifier,
    app_base_url: str,
    batch_size: int = 100,
) -> Dispatcher:
    """Wire a dispatcher over one database."""
    subscriptions = SubscriptionStore(db)
    return Dispatcher(
        scheduler=scheduler,
        subscriptions=subscriptions,
        writer=OutboxWriter(db),
        processor=OutboxProcessor(db, subscriptions, batch_size=batch_size),
        notifier=notifier,
        app_base_url=app_base_url,
    )
