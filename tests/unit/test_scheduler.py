"""
Tests for the unlock scheduler.
"""

from datetime import date, datetime, timedelta, timezone

import pytest

from capsule.core.roster import (
    TEAMS,
    CalendarConfigError,
    Region,
    RegionCalendar,
    Team,
    UnlockScheduler,
    get_team,
    validate_roster,
)

from ..conftest import AMERICAS_DAY_FIVE, BEFORE_ANY_UNLOCK, OVERRIDE_DAY


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


def _no_override_calendar() -> RegionCalendar:
    return RegionCalendar(
        kickoff_dates={
            Region.AMERICAS: date(2026, 1, 16),
            Region.EMEA: date(2026, 1, 20),
            Region.PACIFIC: date(2026, 1, 22),
            Region.CHINA: date(2026, 1, 22),
        },
        global_override=None,
    )


class TestRoster:
    """Roster shape."""

    def test_twelve_teams_per_region(self):
        for region in Region:
            indices = sorted(t.index for t in TEAMS if t.region == region)
            assert indices == list(range(1, 13))

    def test_roster_validates(self):
        validate_roster(TEAMS)

    def test_duplicate_index_rejected(self):
        teams = [
            Team(id="a", name="A", tag="A", region=Region.EMEA, index=1),
            Team(id="b", name="B", tag="B", region=Region.EMEA, index=1),
        ]
        with pytest.raises(CalendarConfigError):
            validate_roster(teams)

    def test_index_out_of_range_rejected(self):
        with pytest.raises(CalendarConfigError):
            validate_roster([Team(id="a", name="A", tag="A", region=Region.EMEA, index=13)])

    def test_get_team(self):
        assert get_team("sen").name == "Sentinels"
        assert get_team("nope") is None


class TestTeamUnlocks:
    """Day-by-day unlocking within a region."""

    def test_nothing_unlocked_before_window(self, scheduler):
        assert scheduler.unlocked_entity_ids(BEFORE_ANY_UNLOCK) == []

    def test_first_team_unlocks_at_window_start(self, scheduler):
        sen = get_team("sen")
        window_start = utc(2026, 1, 4)

        assert not scheduler.is_unlocked(sen, window_start - timedelta(microseconds=1))
        assert scheduler.is_unlocked(sen, window_start)
        assert scheduler.unlock_date(sen) == window_start

    def test_index_five_unlocks_on_day_five(self, scheduler):
        lev = get_team("lev")
        assert lev.index == 5
        assert scheduler.is_unlocked(lev, AMERICAS_DAY_FIVE)
        assert not scheduler.is_unlocked(get_team("kru"), AMERICAS_DAY_FIVE)

    def test_unlocked_ids_on_day_five(self, scheduler):
        unlocked = scheduler.unlocked_entity_ids(AMERICAS_DAY_FIVE)
        # Americas day 5, EMEA day 1
        assert unlocked == ["sen", "nrg", "c9", "100t", "lev", "fnc"]

    def test_unlock_status(self, scheduler):
        envy = get_team("envy")
        status = scheduler.unlock_status(envy, utc(2026, 1, 4, 9))

        assert status.is_unlocked is False
        assert status.unlock_date == utc(2026, 1, 15)
        assert status.days_until_unlock == 11

    def test_unlock_status_when_unlocked(self, scheduler):
        status = scheduler.unlock_status(get_team("sen"), AMERICAS_DAY_FIVE)
        assert status.is_unlocked is True
        assert status.days_until_unlock == 0

    def test_is_unlocked_today(self, scheduler):
        sen = get_team("sen")
        assert scheduler.is_unlocked_today(sen, utc(2026, 1, 4, 23, 59))
        assert not scheduler.is_unlocked_today(sen, utc(2026, 1, 5))

    def test_naive_instants_are_utc(self, scheduler):
        sen = get_team("sen")
        assert scheduler.is_unlocked(sen, datetime(2026, 1, 4, 0, 0))

    def test_deterministic(self, scheduler):
        first = scheduler.unlocked_entity_ids(AMERICAS_DAY_FIVE)
        second = scheduler.unlocked_entity_ids(AMERICAS_DAY_FIVE)
        assert first == second


class TestMonotonicity:
    """Once unlocked, a team stays unlocked; lower indices unlock first."""

    @pytest.fixture
    def plain(self) -> UnlockScheduler:
        return UnlockScheduler(_no_override_calendar(), TEAMS)

    def test_unlocked_set_only_grows(self, plain):
        previous = set()
        instant = utc(2026, 1, 1)
        while instant < utc(2026, 2, 1):
            current = set(plain.unlocked_entity_ids(instant))
            assert previous <= current
            previous = current
            instant += timedelta(hours=7)
        assert len(previous) == len(TEAMS)

    def test_lower_index_unlocks_no_later(self, plain):
        instant = utc(2026, 1, 13, 5)
        for team in TEAMS:
            if plain.is_unlocked(team, instant):
                lower = [t for t in TEAMS if t.region == team.region and t.index < team.index]
                assert all(plain.is_unlocked(t, instant) for t in lower)


class TestGlobalOverride:
    """Override window unlocks everything and keeps regions open."""

    def test_all_teams_unlocked(self, scheduler):
        assert len(scheduler.unlocked_entity_ids(OVERRIDE_DAY)) == len(TEAMS)

    def test_window_is_half_open(self, scheduler):
        assert scheduler.is_global_override_active(utc(2026, 1, 22))
        assert not scheduler.is_global_override_active(utc(2026, 1, 23))

    def test_status_under_override(self, scheduler):
        status = scheduler.unlock_status(get_team("xlg"), OVERRIDE_DAY)
        assert status.is_unlocked is True
        assert status.unlock_date == OVERRIDE_DAY
        assert status.days_until_unlock == 0

    def test_regions_unlocked_under_override(self, scheduler):
        for region in Region:
            assert scheduler.is_region_locked(region, OVERRIDE_DAY) is False

        status = scheduler.region_lock_status(Region.AMERICAS, OVERRIDE_DAY)
        assert status.lock_date == utc(2026, 1, 23)
        assert status.hours_until_lock == 18

    def test_regions_lock_again_after_window(self, scheduler):
        assert scheduler.is_region_locked(Region.AMERICAS, utc(2026, 1, 23))


class TestRegions:
    """Region counts and locks."""

    def test_region_unlock_count(self, scheduler):
        assert scheduler.region_unlock_count(Region.AMERICAS, AMERICAS_DAY_FIVE) == 5
        assert scheduler.region_unlock_count(Region.EMEA, AMERICAS_DAY_FIVE) == 1
        assert scheduler.region_unlock_count(Region.PACIFIC, AMERICAS_DAY_FIVE) == 0

    def test_unlocked_region_ids(self, scheduler):
        assert scheduler.unlocked_region_ids(AMERICAS_DAY_FIVE) == ["Americas", "EMEA"]

    def test_region_lock_at_kickoff(self, scheduler):
        assert not scheduler.is_region_locked(Region.AMERICAS, utc(2026, 1, 15, 23, 59))
        assert scheduler.is_region_locked(Region.AMERICAS, utc(2026, 1, 16))

    def test_hours_until_lock(self, scheduler):
        status = scheduler.region_lock_status(Region.AMERICAS, utc(2026, 1, 15, 12))
        assert status.is_locked is False
        assert status.hours_until_lock == 12

        locked = scheduler.region_lock_status(Region.AMERICAS, utc(2026, 1, 17))
        assert locked.is_locked is True
        assert locked.hours_until_lock == 0
