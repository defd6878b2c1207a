"""
Capsule Core Package

Unlock scheduling, persistence, outbox delivery and notification dispatch.
"""

from . import database
from . import roster

__all__ = ["database", "roster"]
