"""
Request dependencies for the dispatch API.

Everything a route needs lives on app.state, set once by create_app().
"""

from datetime import datetime
from typing import Callable, Optional

from fastapi import Header, Request

from ...core.config import CapsuleSettings
from ...core.dispatch.dispatcher import Dispatcher
from ...core.roster.scheduler import UnlockScheduler
from ..shared.security import check_cron_secret

Clock = Callable[[], datetime]


def get_settings(request: Request) -> CapsuleSettings:
    return request.app.state.settings


def get_scheduler(request: Request) -> UnlockScheduler:
    return request.app.state.scheduler


def get_dispatcher(request: Request) -> Dispatcher:
    return request.app.state.dispatcher


def get_clock(request: Request) -> Clock:
    return request.app.state.clock


def get_trace_id(request: Request) -> Optional[str]:
    return getattr(request.state, "trace_id", None)


async def verify_cron_secret(
    request: Request,
    authorization: Optional[str] = Header(None),
) -> None:
    """Reject the trigger before anything touches the database."""
    check_cron_secret(get_settings(request), authorization)
