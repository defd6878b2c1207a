#!/usr/bin/env python3
"""
Dispatch Runner

Runs one dispatch cycle (discovery, then drain) and exits. Meant to be
invoked by an external scheduler, in place of calling the HTTP trigger.

Usage:
    capsule-dispatch --init-db
    capsule-dispatch --at 2026-01-10T12:00:00Z

Exit codes:
    0  cycle completed
    1  configuration or store failure; nothing was reported
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from datetime import datetime, timezone
from typing import Optional, Sequence

from .. import __version__
from ..core.config import CapsuleSettings
from ..core.database.adapter import DATABASE_ERRORS, DatabaseAdapter
from ..core.database.schema import apply_schema
from ..core.dispatch.dispatcher import DispatchSummary, build_dispatcher
from ..core.notifier import Notifier, build_notifier
from ..core.observability import configure_logging, init_tracing
from ..core.roster.calendar import CalendarConfigError, load_calendar
from ..core.roster.scheduler import UnlockScheduler
from ..core.roster.teams import TEAMS

logger = logging.getLogger(__name__)


def parse_instant(value: str) -> datetime:
    """ISO-8601 instant; a trailing Z and naive values are read as UTC."""
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"not an ISO-8601 instant: {value!r}") from e
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


async def run_once(
    settings: CapsuleSettings,
    now: datetime,
    init_db: bool = False,
    notifier: Optional[Notifier] = None,
    db: Optional[DatabaseAdapter] = None,
) -> DispatchSummary:
    """Connect, optionally create the schema, run one cycle, disconnect."""
    scheduler = UnlockScheduler(load_calendar(settings.calendar_path), TEAMS)
    db = db or DatabaseAdapter(settings.database)
    notifier = notifier or build_notifier(settings)

    try:
        await db.connect()
        if init_db:
            await apply_schema(db)
        dispatcher = build_dispatcher(
            db,
            scheduler,
            notifier,
            app_base_url=settings.app_base_url,
            batch_size=settings.drain_batch_size,
        )
        return await dispatcher.run(now)
    finally:
        await notifier.close()
        await db.disconnect()


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Capsule dispatch runner: one discovery + drain cycle")
    parser.add_argument("--init-db", action="store_true", help="Create tables before running")
    parser.add_argument(
        "--at",
        type=parse_instant,
        default=None,
        help="Evaluate unlocks and retries at this instant instead of now (ISO-8601)",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    args = parser.parse_args(argv)

    settings = CapsuleSettings()
    configure_logging(
        level=settings.log_level,
        structured=settings.log_structured,
        stream=sys.stderr,
    )
    if settings.otel_endpoint:
        init_tracing(service_version=__version__, otlp_endpoint=settings.otel_endpoint)

    now = args.at or datetime.now(timezone.utc)

    try:
        summary = asyncio.run(run_once(settings, now, init_db=args.init_db))
    except CalendarConfigError as e:
        logger.error(f"Invalid region calendar: {e}")
        return 1
    except DATABASE_ERRORS as e:
        logger.error(f"Dispatch aborted by store error: {e}", exc_info=True)
        return 1

    sys.stdout.write(json.dumps(summary.model_dump()) + "\n")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
