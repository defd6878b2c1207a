"""
Dispatch API Routers
"""

from .cron import router as cron_router
from .schedule import router as schedule_router

__all__ = ["cron_router", "schedule_router"]
