"""
Capsule Backend

Time-gated team unlocking and unlock-notification dispatch.
"""

__version__ = "1.0.0"
