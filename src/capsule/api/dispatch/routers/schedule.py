"""
Schedule Read API

Unlock and lock state of teams and regions at an instant (default: now).
"""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from ....core.roster.models import Region, Team
from ....core.roster.scheduler import UnlockScheduler
from ...shared.exceptions import NotFoundError, ValidationError
from ...shared.responses import SuccessResponse
from ..dependencies import Clock, get_clock, get_scheduler, get_trace_id

router = APIRouter(prefix="/api/schedule", tags=["schedule"])


class TeamSchedule(BaseModel):
    id: str
    name: str
    tag: str
    region: str
    index: int
    is_unlocked: bool
    unlocked_today: bool
    unlock_date: datetime
    days_until_unlock: int


class RegionSchedule(BaseModel):
    region: str
    kickoff_date: datetime
    unlocked_count: int
    total_teams: int
    is_locked: bool
    lock_date: datetime
    hours_until_lock: int


def _team_schedule(scheduler: UnlockScheduler, team: Team, now: datetime) -> TeamSchedule:
    status = scheduler.unlock_status(team, now)
    return TeamSchedule(
        id=team.id,
        name=team.name,
        tag=team.tag,
        region=team.region.value,
        index=team.index,
        is_unlocked=status.is_unlocked,
        unlocked_today=scheduler.is_unlocked_today(team, now),
        unlock_date=status.unlock_date,
        days_until_unlock=status.days_until_unlock,
    )


def _parse_region(value: str) -> Region:
    for region in Region:
        if region.value.lower() == value.lower():
            return region
    raise ValidationError(f"Unknown region '{value}'")


@router.get("/teams", response_model=SuccessResponse[List[TeamSchedule]])
async def list_teams(
    at: Optional[datetime] = Query(None, description="Instant to evaluate (default: now)"),
    region: Optional[str] = Query(None, description="Only teams of this region"),
    scheduler: UnlockScheduler = Depends(get_scheduler),
    clock: Clock = Depends(get_clock),
    trace_id: Optional[str] = Depends(get_trace_id),
):
    now = at or clock()
    teams = scheduler.teams
    if region:
        wanted = _parse_region(region)
        teams = [team for team in teams if team.region == wanted]
    data = [_team_schedule(scheduler, team, now) for team in teams]
    return SuccessResponse[List[TeamSchedule]].create(data, trace_id=trace_id)


@router.get("/teams/{team_id}", response_model=SuccessResponse[TeamSchedule])
async def get_team(
    team_id: str,
    at: Optional[datetime] = Query(None, description="Instant to evaluate (default: now)"),
    scheduler: UnlockScheduler = Depends(get_scheduler),
    clock: Clock = Depends(get_clock),
    trace_id: Optional[str] = Depends(get_trace_id),
):
    team = scheduler.get_team(team_id)
    if team is None:
        raise NotFoundError("Team", team_id, trace_id=trace_id)
    data = _team_schedule(scheduler, team, at or clock())
    return SuccessResponse[TeamSchedule].create(data, trace_id=trace_id)


@router.get("/regions", response_model=SuccessResponse[List[RegionSchedule]])
async def list_regions(
    at: Optional[datetime] = Query(None, description="Instant to evaluate (default: now)"),
    scheduler: UnlockScheduler = Depends(get_scheduler),
    clock: Clock = Depends(get_clock),
    trace_id: Optional[str] = Depends(get_trace_id),
):
    now = at or clock()
    data = []
    for region in Region:
        lock = scheduler.region_lock_status(region, now)
        data.append(RegionSchedule(
            region=region.value,
            kickoff_date=scheduler.calendar.kickoff(region),
            unlocked_count=scheduler.region_unlock_count(region, now),
            total_teams=sum(1 for team in scheduler.teams if team.region == region),
            is_locked=lock.is_locked,
            lock_date=lock.lock_date,
            hours_until_lock=lock.hours_until_lock,
        ))
    return SuccessResponse[List[RegionSchedule]].create(data, trace_id=trace_id)
