"""
Region Calendar

Kickoff and lock dates per region plus the optional global override window.
Loaded and validated once at startup; a malformed calendar raises
CalendarConfigError instead of failing later inside a dispatch run.
"""

import json
import logging
from datetime import date, datetime, time, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel, ValidationError, field_validator, model_validator

from .models import Region
from .teams import GLOBAL_UNLOCK_END, GLOBAL_UNLOCK_START, KICKOFF_DATES, LOCK_DATES

logger = logging.getLogger(__name__)


class CalendarConfigError(ValueError):
    """Raised when the region calendar or roster is malformed."""


def _utc_midnight(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


class OverrideWindow(BaseModel):
    """Half-open interval [start, end) during which every team is unlocked."""

    start: datetime
    end: datetime

    @field_validator("start", "end")
    @classmethod
    def _require_timezone(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            raise ValueError("override window bounds must carry a timezone")
        return value.astimezone(timezone.utc)

    @model_validator(mode="after")
    def _check_order(self) -> "OverrideWindow":
        if self.end <= self.start:
            raise ValueError("override window end must be after its start")
        return self

    def contains(self, now: datetime) -> bool:
        return self.start <= now < self.end


class RegionCalendar(BaseModel):
    """Kickoff and lock dates for every region."""

    kickoff_dates: Dict[Region, date]
    lock_dates: Dict[Region, date]
    global_override: Optional[OverrideWindow] = None

    @model_validator(mode="before")
    @classmethod
    def _default_lock_dates(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("lock_dates"):
            data = {**data, "lock_dates": data.get("kickoff_dates")}
        return data

    @model_validator(mode="after")
    def _check_regions(self) -> "RegionCalendar":
        for field_name in ("kickoff_dates", "lock_dates"):
            missing = [r.value for r in Region if r not in getattr(self, field_name)]
            if missing:
                raise ValueError(f"{field_name} missing regions: {', '.join(missing)}")
        return self

    def kickoff(self, region: Region) -> datetime:
        """Kickoff instant (UTC midnight) for a region."""
        return _utc_midnight(self.kickoff_dates[region])

    def lock_date(self, region: Region) -> datetime:
        """Instant (UTC midnight) after which the region is locked."""
        return _utc_midnight(self.lock_dates[region])


def default_calendar() -> RegionCalendar:
    """Build the calendar for the current season."""
    return RegionCalendar(
        kickoff_dates={region: date.fromisoformat(day) for region, day in KICKOFF_DATES.items()},
        lock_dates={region: date.fromisoformat(day) for region, day in LOCK_DATES.items()},
        global_override=OverrideWindow(
            start=datetime.fromisoformat(GLOBAL_UNLOCK_START),
            end=datetime.fromisoformat(GLOBAL_UNLOCK_END),
        ),
    )


def load_calendar(path: Optional[str] = None) -> RegionCalendar:
    """
    Load the region calendar.

    Args:
        path: Optional JSON file with "kickoff_dates", "lock_dates" and
            "global_override" keys. The built-in season calendar is used
            when no path is given.

    Raises:
        CalendarConfigError: If the file is missing, unreadable or invalid.
    """
    if not path:
        return default_calendar()

    config_path = Path(path).expanduser()
    try:
        with config_path.open("r", encoding="utf-8") as handle:
            payload = json.load(handle)
    except (OSError, json.JSONDecodeError) as e:
        raise CalendarConfigError(f"Cannot read calendar {config_path}: {e}") from e

    try:
        calendar = RegionCalendar.model_validate(payload)
    except ValidationError as e:
        raise CalendarConfigError(f"Invalid calendar {config_path}: {e}") from e

    logger.info(f"Loaded region calendar from {config_path}")
    return calendar
