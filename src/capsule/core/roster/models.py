"""
Roster Models

Static team and region types. Unlock timing is derived from the region
calendar and never stored on a team.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class Region(str, Enum):
    """Competitive regions, each with its own kickoff."""
    AMERICAS = "Americas"
    EMEA = "EMEA"
    PACIFIC = "Pacific"
    CHINA = "China"


@dataclass(frozen=True)
class Team:
    """A team in the season roster. `index` is its 1-based unlock position in the region."""
    id: str
    name: str
    tag: str
    region: Region
    index: int


@dataclass(frozen=True)
class UnlockStatus:
    """Unlock state of a team at one instant."""
    is_unlocked: bool
    unlock_date: datetime
    days_until_unlock: int

    def to_dict(self) -> dict:
        return {
            "is_unlocked": self.is_unlocked,
            "unlock_date": self.unlock_date.isoformat(),
            "days_until_unlock": self.days_until_unlock,
        }


@dataclass(frozen=True)
class RegionLockStatus:
    """Lock state of a region at one instant."""
    is_locked: bool
    lock_date: datetime
    hours_until_lock: int

    def to_dict(self) -> dict:
        return {
            "is_locked": self.is_locked,
            "lock_date": self.lock_date.isoformat(),
            "hours_until_lock": self.hours_until_lock,
        }
