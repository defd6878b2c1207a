"""
Database abstraction layer supporting SQLite and PostgreSQL.

Usage:
    from capsule.core.database import DatabaseAdapter, DatabaseConfig

    db = DatabaseAdapter(DatabaseConfig())
    await db.connect()
    await apply_schema(db)

    rows = await db.fetch("SELECT * FROM outbox_tasks WHERE status = $1", "pending")
"""

from .adapter import (
    DATABASE_ERRORS,
    DatabaseAdapter,
    DatabaseBackend,
    DatabaseConfig,
    Transaction,
    affected_rows,
    coerce_datetime,
)
from .schema import apply_schema, SCHEMA_STATEMENTS

__all__ = [
    "DATABASE_ERRORS",
    "DatabaseAdapter",
    "DatabaseBackend",
    "DatabaseConfig",
    "Transaction",
    "affected_rows",
    "coerce_datetime",
    "apply_schema",
    "SCHEMA_STATEMENTS",
]
