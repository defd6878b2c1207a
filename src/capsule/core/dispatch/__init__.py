"""
Dispatch Module

Discovery and drain of unlock notifications.
"""

from .dispatcher import (
    Dispatcher,
    DispatchSummary,
    DiscoveryResult,
    build_dispatcher,
    MSG_DONE,
    MSG_NO_PENDING,
    MSG_NOTHING_UNLOCKED,
)

__all__ = [
    "Dispatcher",
    "DispatchSummary",
    "DiscoveryResult",
    "build_dispatcher",
    "MSG_DONE",
    "MSG_NO_PENDING",
    "MSG_NOTHING_UNLOCKED",
]
