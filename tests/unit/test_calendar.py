"""
Tests for region calendar loading and validation.
"""

import json
from datetime import date, datetime, timezone

import pytest

from capsule.core.roster import CalendarConfigError, Region, default_calendar, load_calendar


def _write(tmp_path, payload) -> str:
    path = tmp_path / "calendar.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return str(path)


KICKOFFS = {
    "Americas": "2026-03-01",
    "EMEA": "2026-03-02",
    "Pacific": "2026-03-03",
    "China": "2026-03-04",
}


class TestDefaultCalendar:

    def test_season_kickoffs(self):
        calendar = default_calendar()
        assert calendar.kickoff(Region.AMERICAS) == datetime(2026, 1, 16, tzinfo=timezone.utc)
        assert calendar.kickoff_dates[Region.CHINA] == date(2026, 1, 22)

    def test_lock_dates_default_to_kickoff(self):
        calendar = default_calendar()
        for region in Region:
            assert calendar.lock_date(region) == calendar.kickoff(region)

    def test_load_without_path_returns_default(self):
        assert load_calendar(None) == default_calendar()


class TestLoadCalendar:

    def test_load_from_file(self, tmp_path):
        calendar = load_calendar(_write(tmp_path, {"kickoff_dates": KICKOFFS}))

        assert calendar.kickoff(Region.PACIFIC) == datetime(2026, 3, 3, tzinfo=timezone.utc)
        assert calendar.lock_dates == calendar.kickoff_dates
        assert calendar.global_override is None

    def test_explicit_lock_dates_and_override(self, tmp_path):
        payload = {
            "kickoff_dates": KICKOFFS,
            "lock_dates": {**KICKOFFS, "Americas": "2026-03-05"},
            "global_override": {
                "start": "2026-03-10T00:00:00Z",
                "end": "2026-03-11T00:00:00Z",
            },
        }
        calendar = load_calendar(_write(tmp_path, payload))

        assert calendar.lock_dates[Region.AMERICAS] == date(2026, 3, 5)
        assert calendar.global_override.contains(datetime(2026, 3, 10, 12, tzinfo=timezone.utc))

    def test_missing_region_rejected(self, tmp_path):
        kickoffs = dict(KICKOFFS)
        del kickoffs["China"]
        with pytest.raises(CalendarConfigError):
            load_calendar(_write(tmp_path, {"kickoff_dates": kickoffs}))

    def test_inverted_override_rejected(self, tmp_path):
        payload = {
            "kickoff_dates": KICKOFFS,
            "global_override": {
                "start": "2026-03-11T00:00:00Z",
                "end": "2026-03-10T00:00:00Z",
            },
        }
        with pytest.raises(CalendarConfigError):
            load_calendar(_write(tmp_path, payload))

    def test_naive_override_rejected(self, tmp_path):
        payload = {
            "kickoff_dates": KICKOFFS,
            "global_override": {"start": "2026-03-10T00:00:00", "end": "2026-03-11T00:00:00"},
        }
        with pytest.raises(CalendarConfigError):
            load_calendar(_write(tmp_path, payload))

    def test_unreadable_file(self, tmp_path):
        with pytest.raises(CalendarConfigError):
            load_calendar(str(tmp_path / "missing.json"))

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "calendar.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(CalendarConfigError):
            load_calendar(str(path))
