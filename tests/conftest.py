"""
Shared Test Fixtures

Every test that touches storage gets its own in-memory SQLite database with
the schema applied.
"""

from datetime import datetime, timezone
from typing import List, Optional

import pytest

from capsule.core.database import DatabaseAdapter, DatabaseBackend, DatabaseConfig, apply_schema
from capsule.core.dispatch import Dispatcher, build_dispatcher
from capsule.core.notifier import DeliveryError, Notifier
from capsule.core.outbox import OutboxProcessor, OutboxWriter
from capsule.core.roster import TEAMS, UnlockScheduler, default_calendar
from capsule.core.subscriptions import Subscriber, SubscriptionStore


class SentMessage:
    def __init__(self, to: str, subject: str, text: str, html: str):
        self.to = to
        self.subject = subject
        self.text = text
        self.html = html


class FakeNotifier(Notifier):
    """Records sends; fails the first `fail_times` calls (or every call)."""

    def __init__(self, fail_times: int = 0, fail_always: bool = False, error: Optional[BaseException] = None):
        self.sent: List[SentMessage] = []
        self.calls = 0
        self.fail_times = fail_times
        self.fail_always = fail_always
        self.error = error

    @property
    def name(self) -> str:
        return "fake"

    async def send(self, to: str, subject: str, text: str, html: str) -> None:
        self.calls += 1
        if self.error is not None:
            raise self.error
        if self.fail_always or self.calls <= self.fail_times:
            raise DeliveryError(f"simulated failure #{self.calls}")
        self.sent.append(SentMessage(to, subject, text, html))


# Americas window opens 2026-01-04; index 5 (Leviatán) unlocks on 2026-01-08.
AMERICAS_DAY_FIVE = datetime(2026, 1, 8, 12, 0, tzinfo=timezone.utc)
BEFORE_ANY_UNLOCK = datetime(2026, 1, 3, 12, 0, tzinfo=timezone.utc)
OVERRIDE_DAY = datetime(2026, 1, 22, 6, 0, tzinfo=timezone.utc)


@pytest.fixture
def scheduler() -> UnlockScheduler:
    return UnlockScheduler(default_calendar(), TEAMS)


@pytest.fixture
async def db():
    adapter = DatabaseAdapter(DatabaseConfig(backend=DatabaseBackend.SQLITE, sqlite_path=":memory:"))
    await adapter.connect()
    await apply_schema(adapter)
    yield adapter
    await adapter.disconnect()


@pytest.fixture
def store(db) -> SubscriptionStore:
    return SubscriptionStore(db)


@pytest.fixture
def writer(db) -> OutboxWriter:
    return OutboxWriter(db)


@pytest.fixture
def processor(db, store) -> OutboxProcessor:
    return OutboxProcessor(db, store)


@pytest.fixture
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture
def dispatcher(db, scheduler, notifier) -> Dispatcher:
    return build_dispatcher(db, scheduler, notifier, app_base_url="https://capsule.test")


@pytest.fixture
async def subscriber(store) -> Subscriber:
    return await store.upsert_subscriber(Subscriber(email="fan@example.com", name="Fan"))
