#!/usr/bin/env python3
"""
Capsule Dispatch API
====================

FastAPI app exposing the cron trigger, the schedule read API and health
probes.

Usage:
    capsule-api                      # Start API server on port 8090
    capsule-api --host 0.0.0.0 --port 9000

Endpoints:
    GET|POST /api/cron/notify          - Run one dispatch cycle
    GET  /api/schedule/teams           - Unlock state of every team
    GET  /api/schedule/teams/{id}      - Unlock state of one team
    GET  /api/schedule/regions         - Unlock and lock state per region
    GET  /health, /health/live, /health/ready
"""

import argparse
import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Callable, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

from ... import __version__
from ...core.config import CapsuleSettings
from ...core.database.adapter import DatabaseAdapter
from ...core.database.schema import apply_schema
from ...core.dispatch.dispatcher import build_dispatcher
from ...core.notifier import Notifier, build_notifier
from ...core.observability import configure_logging, init_tracing
from ...core.roster.calendar import load_calendar
from ...core.roster.scheduler import UnlockScheduler
from ...core.roster.teams import TEAMS
from ..shared.middleware import register_error_handlers, TraceMiddleware
from ..shared.routers.health import router as health_router
from ..shared.security import SecurityMiddleware
from .routers.cron import router as cron_router
from .routers.schedule import router as schedule_router

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# OBSERVABILITY INITIALIZATION
# =============================================================================

def init_observability(settings: CapsuleSettings) -> None:
    """Initialize logging and, when an endpoint is configured, tracing."""
    configure_logging(
        level=settings.log_level,
        structured=settings.log_structured,
        service_name="capsule-backend"
    )

    if settings.otel_endpoint:
        init_tracing(
            service_name="capsule-backend",
            service_version=__version__,
            otlp_endpoint=settings.otel_endpoint,
        )


# =============================================================================
# LIFESPAN
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan - startup and shutdown."""
    db: DatabaseAdapter = app.state.db
    notifier: Notifier = app.state.notifier

    await db.connect()
    await apply_schema(db)
    logger.info(f"Capsule dispatch API started ({app.state.settings!r})")

    yield

    await notifier.close()
    await db.disconnect()
    logger.info("Capsule dispatch API stopped")


# =============================================================================
# FASTAPI APP
# =============================================================================

def create_app(
    settings: Optional[CapsuleSettings] = None,
    db: Optional[DatabaseAdapter] = None,
    notifier: Optional[Notifier] = None,
    scheduler: Optional[UnlockScheduler] = None,
    clock: Optional[Callable[[], datetime]] = None,
) -> FastAPI:
    """
    Build the API. Every collaborator can be injected; the rest come from
    the environment.

    Raises:
        CalendarConfigError: If CAPSULE_CALENDAR_PATH points at an invalid calendar.
    """
    settings = settings or CapsuleSettings()
    db = db or DatabaseAdapter(settings.database)
    notifier = notifier or build_notifier(settings)
    scheduler = scheduler or UnlockScheduler(load_calendar(settings.calendar_path), TEAMS)

    app = FastAPI(
        title="Capsule Dispatch API",
        description="Unlock scheduling and notification dispatch",
        version=__version__,
        lifespan=lifespan
    )

    app.state.settings = settings
    app.state.db = db
    app.state.notifier = notifier
    app.state.scheduler = scheduler
    app.state.clock = clock or _utcnow
    app.state.dispatcher = build_dispatcher(
        db,
        scheduler,
        notifier,
        app_base_url=settings.app_base_url,
        batch_size=settings.drain_batch_size,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.app_base_url],
        allow_credentials=False,
        allow_methods=["GET", "POST"],
        allow_headers=["Authorization", "Content-Type"],
    )

    register_error_handlers(app)
    app.add_middleware(TraceMiddleware)

    app.include_router(health_router)
    app.include_router(cron_router)
    app.include_router(schedule_router)

    app.add_middleware(SecurityMiddleware)

    return app


def main():
    parser = argparse.ArgumentParser(description="Capsule Dispatch API")
    parser.add_argument("--host", default=os.getenv("API_HOST", "127.0.0.1"))
    parser.add_argument("--port", type=int, default=int(os.getenv("API_PORT", "8090")))
    args = parser.parse_args()

    settings = CapsuleSettings()
    init_observability(settings)

    uvicorn.run(create_app(settings), host=args.host, port=args.port, log_config=None)


if __name__ == "__main__":
    main()
