"""
Outbox Models

Notification tasks and their typed payloads. Each task kind carries its own
payload model; the `kind` field is the discriminator.
"""

from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Annotated, Any, Dict, Literal, Optional, Union
from uuid import uuid4

from pydantic import BaseModel, Field, TypeAdapter

from ..database.adapter import coerce_datetime

MAX_ATTEMPTS = 5
MAX_BACKOFF = timedelta(hours=24)


def _utcnow() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(timezone.utc)


def calculate_backoff(attempts: int) -> timedelta:
    """
    Delay before the next attempt, given the attempts already made.

    2**attempts hours, capped at 24 hours.
    """
    exponent = min(max(attempts, 0), 5)
    return min(MAX_BACKOFF, timedelta(hours=2 ** exponent))


class OutboxStatus(str, Enum):
    """Status of an outbox task."""
    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"  # Exceeded max attempts


class TaskKind(str, Enum):
    """Closed set of notification task kinds."""
    TEAM_UNLOCKED = "team_unlocked"
    REGION_UNLOCKED = "region_unlocked"


class TeamUnlockedPayload(BaseModel):
    """Snapshot taken when a team subscription is enqueued."""

    kind: Literal["team_unlocked"] = "team_unlocked"
    subscription_id: str
    subscriber_id: str
    email: str
    team_id: str
    team_name: str
    team_tag: str
    region: str
    unlock_date: datetime

    @property
    def target_id(self) -> str:
        return self.team_id


class RegionUnlockedPayload(BaseModel):
    """Snapshot taken when a region subscription is enqueued."""

    kind: Literal["region_unlocked"] = "region_unlocked"
    subscription_id: str
    subscriber_id: str
    email: str
    region: str
    kickoff_date: datetime
    unlocked_count: int

    @property
    def target_id(self) -> str:
        return self.region


TaskPayload = Annotated[
    Union[TeamUnlockedPayload, RegionUnlockedPayload],
    Field(discriminator="kind"),
]

_payload_adapter: TypeAdapter = TypeAdapter(TaskPayload)


def parse_payload(raw: Union[str, bytes, dict]) -> Union[TeamUnlockedPayload, RegionUnlockedPayload]:
    """Parse a stored payload into its typed variant."""
    if isinstance(raw, (str, bytes)):
        return _payload_adapter.validate_json(raw)
    return _payload_adapter.validate_python(raw)


class OutboxTask(BaseModel):
    """A row in the outbox_tasks table."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    kind: TaskKind
    payload: TaskPayload
    subscription_id: str
    target_id: str

    status: OutboxStatus = OutboxStatus.PENDING
    attempts: int = 0
    last_error: Optional[str] = None
    next_retry_at: Optional[datetime] = None

    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)
    sent_at: Optional[datetime] = None

    @classmethod
    def for_payload(
        cls,
        payload: Union[TeamUnlockedPayload, RegionUnlockedPayload],
        now: Optional[datetime] = None,
    ) -> "OutboxTask":
        now = now or _utcnow()
        return cls(
            kind=TaskKind(payload.kind),
            payload=payload,
            subscription_id=payload.subscription_id,
            target_id=payload.target_id,
            created_at=now,
            updated_at=now,
        )

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "OutboxTask":
        return cls(
            id=row["id"],
            kind=TaskKind(row["kind"]),
            payload=parse_payload(row["payload"]),
            subscription_id=row["subscription_id"],
            target_id=row["target_id"],
            status=OutboxStatus(row["status"]),
            attempts=int(row["attempts"]),
            last_error=row.get("last_error"),
            next_retry_at=coerce_datetime(row.get("next_retry_at")),
            created_at=coerce_datetime(row["created_at"]),
            updated_at=coerce_datetime(row["updated_at"]),
            sent_at=coerce_datetime(row.get("sent_at")),
        )

    def payload_json(self) -> str:
        return self.payload.model_dump_json()

    @property
    def is_terminal(self) -> bool:
        return self.status == OutboxStatus.SENT or self.attempts >= MAX_ATTEMPTS

    def is_eligible(self, now: datetime) -> bool:
        """Pending, under the attempt budget, and due."""
        if self.status != OutboxStatus.PENDING or self.attempts >= MAX_ATTEMPTS:
            return False
        return self.next_retry_at is None or self.next_retry_at <= now
