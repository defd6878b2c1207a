"""
Cron Trigger

One dispatch cycle per call. Scheduled by an external cron (GET or POST).
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends

from ....core.database.adapter import DATABASE_ERRORS
from ....core.dispatch.dispatcher import Dispatcher, DispatchSummary
from ....core.security import sanitize_error_message
from ...shared.exceptions import DatabaseError
from ...shared.responses import ErrorResponse, SuccessResponse
from ..dependencies import Clock, get_clock, get_dispatcher, get_trace_id, verify_cron_secret

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/cron", tags=["cron"])

TRIGGER_ERRORS = {
    401: {"model": ErrorResponse, "description": "Missing or wrong cron secret"},
    403: {"model": ErrorResponse, "description": "No cron secret configured in production"},
    500: {"model": ErrorResponse, "description": "Store unavailable"},
}


async def _run_cycle(
    dispatcher: Dispatcher,
    clock: Clock,
    trace_id: Optional[str],
) -> SuccessResponse[DispatchSummary]:
    now = clock()
    try:
        summary = await dispatcher.run(now)
    except DATABASE_ERRORS as e:
        logger.error(f"Dispatch cycle aborted by store error: {e}", exc_info=True)
        raise DatabaseError(f"Dispatch aborted: {sanitize_error_message(e)}", trace_id=trace_id)

    logger.info(
        f"Dispatch cycle at {now.isoformat()}: {summary.message}",
        extra={"summary": summary.model_dump()}
    )
    return SuccessResponse[DispatchSummary].create(summary, trace_id=trace_id)


@router.get(
    "/notify",
    response_model=SuccessResponse[DispatchSummary],
    dependencies=[Depends(verify_cron_secret)],
    responses=TRIGGER_ERRORS,
)
async def notify_get(
    dispatcher: Dispatcher = Depends(get_dispatcher),
    clock: Clock = Depends(get_clock),
    trace_id: Optional[str] = Depends(get_trace_id),
):
    """Run discovery and drain once."""
    return await _run_cycle(dispatcher, clock, trace_id)


@router.post(
    "/notify",
    response_model=SuccessResponse[DispatchSummary],
    dependencies=[Depends(verify_cron_secret)],
    responses=TRIGGER_ERRORS,
)
async def notify_post(
    dispatcher: Dispatcher = Depends(get_dispatcher),
    clock: Clock = Depends(get_clock),
    trace_id: Optional[str] = Depends(get_trace_id),
):
    """Same as GET, for schedulers that only POST."""
    return await _run_cycle(dispatcher, clock, trace_id)
