"""
Health Check Endpoints

Provides health, readiness, and liveness endpoints for container orchestration.
"""

from datetime import datetime, timezone
from typing import Dict, Any

from fastapi import APIRouter, Request, Response

from .... import __version__
from ....core.outbox.processor import OutboxProcessor
from ....core.subscriptions.store import SubscriptionStore

router = APIRouter(tags=["health"])


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("/health")
async def health_check() -> Dict[str, Any]:
    """
    Basic health check.

    Returns 200 if the service is running.
    """
    return {
        "status": "healthy",
        "timestamp": _now_iso(),
        "version": __version__,
    }


@router.get("/health/live")
async def liveness_check() -> Dict[str, str]:
    """
    Liveness probe.

    Returns 200 if the process is alive.
    """
    return {"status": "alive"}


@router.get("/health/ready")
async def readiness_check(request: Request, response: Response) -> Dict[str, Any]:
    """
    Readiness probe.

    Checks database connectivity and reports outbox status counts.
    """
    checks: Dict[str, Any] = {}
    all_healthy = True

    db = request.app.state.db
    try:
        await db.fetchrow("SELECT 1")
        checks["database"] = "healthy"
    except Exception as e:
        checks["database"] = f"unhealthy: {str(e)[:100]}"
        all_healthy = False

    if all_healthy:
        try:
            processor = OutboxProcessor(db, SubscriptionStore(db))
            checks["outbox"] = await processor.get_stats()
        except Exception as e:
            checks["outbox"] = f"unavailable: {str(e)[:100]}"
            all_healthy = False

    if not all_healthy:
        response.status_code = 503

    return {
        "status": "ready" if all_healthy else "not_ready",
        "checks": checks,
        "timestamp": _now_iso(),
    }
