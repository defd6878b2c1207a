"""
Schema

DDL shared by the SQLite and PostgreSQL backends. Every statement is
idempotent so the schema can be applied on each startup.
"""

import logging
from typing import List

from .adapter import DatabaseAdapter

logger = logging.getLogger(__name__)

SCHEMA_STATEMENTS: List[str] = [
    """
    CREATE TABLE IF NOT EXISTS subscribers (
        id TEXT PRIMARY KEY,
        email TEXT NOT NULL,
        name TEXT,
        created_at TIMESTAMPTZ NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS subscriptions (
        id TEXT PRIMARY KEY,
        subscriber_id TEXT NOT NULL REFERENCES subscribers(id) ON DELETE CASCADE,
        target_id TEXT NOT NULL,
        target_kind TEXT NOT NULL,
        notified BOOLEAN NOT NULL DEFAULT FALSE,
        created_at TIMESTAMPTZ NOT NULL,
        CONSTRAINT uq_subscriber_target UNIQUE (subscriber_id, target_id)
    )
    """,
    """
    CREATE INDEX IF NOT EXISTS ix_subscriptions_target_notified
        ON subscriptions (target_id, notified)
    """,
    """
    CREATE TABLE IF NOT EXISTS outbox_tasks (
        id TEXT PRIMARY KEY,
        kind TEXT NOT NULL,
        subscription_id TEXT NOT NULL,
        target_id TEXT NOT NULL,
        payload TEXT NOT NULL,
        status TEXT NOT NULL DEFAULT 'pending',
        attempts INTEGER NOT NULL DEFAULT 0,
        last_error TEXT,
        next_retry_at TIMESTAMPTZ,
        created_at TIMESTAMPTZ NOT NULL,
        updated_at TIMESTAMPTZ NOT NULL,
        sent_at TIMESTAMPTZ,
        CONSTRAINT uq_outbox_subscription_target UNIQUE (subscription_id, target_id)
    )
    """,
    """
    CREATE INDEX IF NOT EXISTS ix_outbox_status_created_at
        ON outbox_tasks (status, created_at)
    """,
]


async def apply_schema(db: DatabaseAdapter) -> None:
    """Create tables and indexes that do not exist yet."""
    for statement in SCHEMA_STATEMENTS:
        await db.execute(statement)
    logger.info(f"Schema applied ({len(SCHEMA_STATEMENTS)} statements)")
