"""
Roster and Unlock Scheduling

Usage:
    from capsule.core.roster import UnlockScheduler, TEAMS, load_calendar

    scheduler = UnlockScheduler(load_calendar(), TEAMS)
    unlocked = scheduler.unlocked_entity_ids(now)
"""

from .models import Region, Team, UnlockStatus, RegionLockStatus
from .teams import TEAMS, KICKOFF_DATES, LOCK_DATES, get_team
from .calendar import (
    CalendarConfigError,
    OverrideWindow,
    RegionCalendar,
    default_calendar,
    load_calendar,
)
from .scheduler import UnlockScheduler, UNLOCK_LEAD_DAYS, validate_roster

__all__ = [
    "Region",
    "Team",
    "UnlockStatus",
    "RegionLockStatus",
    "TEAMS",
    "KICKOFF_DATES",
    "LOCK_DATES",
    "get_team",
    "CalendarConfigError",
    "OverrideWindow",
    "RegionCalendar",
    "default_calendar",
    "load_calendar",
    "UnlockScheduler",
    "UNLOCK_LEAD_DAYS",
    "validate_roster",
]
