"""
Unlock Scheduler

Pure functions of (team, region calendar, now). No clock is read here and
nothing is cached: calling any method twice with the same instant returns
the same answer.

Teams of a region unlock one per day, starting UNLOCK_LEAD_DAYS before the
region's kickoff, in ascending index order. The global override window,
when active, unlocks every team and unlocks every region before any date
arithmetic happens.
"""

from collections import defaultdict
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional, Sequence, Set

from .calendar import CalendarConfigError, RegionCalendar
from .models import Region, RegionLockStatus, Team, UnlockStatus

UNLOCK_LEAD_DAYS = 12
TEAMS_PER_REGION = 12
ONE_DAY = timedelta(days=1)
ONE_HOUR = timedelta(hours=1)


def _as_utc(now: datetime) -> datetime:
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now.astimezone(timezone.utc)


def validate_roster(teams: Iterable[Team]) -> None:
    """
    Check that every region holds distinct indices in 1..TEAMS_PER_REGION.

    Raises:
        CalendarConfigError: On duplicate team ids or bad indices.
    """
    seen_ids: Set[str] = set()
    indices: Dict[Region, Set[int]] = defaultdict(set)
    for team in teams:
        if team.id in seen_ids:
            raise CalendarConfigError(f"Duplicate team id: {team.id}")
        seen_ids.add(team.id)
        if not 1 <= team.index <= TEAMS_PER_REGION:
            raise CalendarConfigError(
                f"Team {team.id} index {team.index} outside 1..{TEAMS_PER_REGION}"
            )
        if team.index in indices[team.region]:
            raise CalendarConfigError(
                f"Duplicate index {team.index} in region {team.region.value}"
            )
        indices[team.region].add(team.index)


class UnlockScheduler:
    """
    Computes unlock and lock state for a roster against a region calendar.

    Usage:
        scheduler = UnlockScheduler(load_calendar(), TEAMS)
        scheduler.is_unlocked(team, now)
        scheduler.unlocked_entity_ids(now)
    """

    def __init__(self, calendar: RegionCalendar, teams: Sequence[Team]):
        validate_roster(teams)
        self.calendar = calendar
        self.teams: List[Team] = list(teams)

    # ------------------------------------------------------------------
    # Override
    # ------------------------------------------------------------------

    def is_global_override_active(self, now: datetime) -> bool:
        window = self.calendar.global_override
        return window is not None and window.contains(_as_utc(now))

    # ------------------------------------------------------------------
    # Teams
    # ------------------------------------------------------------------

    def unlock_window_start(self, region: Region) -> datetime:
        """First unlock day of a region (the index-1 team unlocks here)."""
        return self.calendar.kickoff(region) - UNLOCK_LEAD_DAYS * ONE_DAY

    def _elapsed_days(self, team: Team, now: datetime) -> int:
        # Day 1 is the first unlock day; earlier instants give 0 or negatives.
        return (_as_utc(now) - self.unlock_window_start(team.region)) // ONE_DAY + 1

    def unlock_date(self, team: Team) -> datetime:
        """Instant at which the team unlocks under the ordinary formula."""
        return self.unlock_window_start(team.region) + (team.index - 1) * ONE_DAY

    def is_unlocked(self, team: Team, now: datetime) -> bool:
        if self.is_global_override_active(now):
            return True
        return self._elapsed_days(team, now) >= team.index

    def unlock_status(self, team: Team, now: datetime) -> UnlockStatus:
        now = _as_utc(now)
        if self.is_global_override_active(now):
            return UnlockStatus(is_unlocked=True, unlock_date=now, days_until_unlock=0)

        elapsed = self._elapsed_days(team, now)
        return UnlockStatus(
            is_unlocked=elapsed >= team.index,
            unlock_date=self.unlock_date(team),
            days_until_unlock=max(0, team.index - elapsed),
        )

    def is_unlocked_today(self, team: Team, now: datetime) -> bool:
        """True on the exact day the team unlocks (always true under the override)."""
        if self.is_global_override_active(now):
            return True
        return self._elapsed_days(team, now) == team.index

    def unlocked_entity_ids(self, now: datetime) -> List[str]:
        return [team.id for team in self.teams if self.is_unlocked(team, now)]

    # ------------------------------------------------------------------
    # Regions
    # ------------------------------------------------------------------

    def region_unlock_count(self, region: Region, now: datetime) -> int:
        return sum(
            1 for team in self.teams
            if team.region == region and self.is_unlocked(team, now)
        )

    def unlocked_region_ids(self, now: datetime) -> List[str]:
        """Regions with at least one unlocked team."""
        return [
            region.value for region in Region
            if self.region_unlock_count(region, now) > 0
        ]

    def is_region_locked(self, region: Region, now: datetime) -> bool:
        if self.is_global_override_active(now):
            return False
        return _as_utc(now) >= self.calendar.lock_date(region)

    def region_lock_status(self, region: Region, now: datetime) -> RegionLockStatus:
        now = _as_utc(now)
        if self.is_global_override_active(now):
            end = self.calendar.global_override.end
            return RegionLockStatus(
                is_locked=False,
                lock_date=end,
                hours_until_lock=max(0, (end - now) // ONE_HOUR),
            )

        lock_date = self.calendar.lock_date(region)
        is_locked = now >= lock_date
        return RegionLockStatus(
            is_locked=is_locked,
            lock_date=lock_date,
            hours_until_lock=0 if is_locked else max(0, (lock_date - now) // ONE_HOUR),
        )

    def get_team(self, team_id: str) -> Optional[Team]:
        for team in self.teams:
            if team.id == team_id:
                return team
        return None
