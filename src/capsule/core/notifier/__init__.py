"""
Notifier Module

Email delivery adapters and message templates.
"""

import logging

from ..config import CapsuleSettings
from .base import DeliveryError, Notifier, RenderedMessage
from .log import LoggingNotifier
from .resend import ResendNotifier
from .templates import render

logger = logging.getLogger(__name__)


def build_notifier(settings: CapsuleSettings) -> Notifier:
    """Resend when an API key is configured, otherwise the logging notifier."""
    if settings.resend_api_key:
        return ResendNotifier(
            api_key=settings.resend_api_key,
            sender=settings.email_from,
            api_url=settings.resend_api_url,
            timeout=settings.send_timeout,
        )
    logger.warning("RESEND_API_KEY not set, emails will be logged only")
    return LoggingNotifier()


__all__ = [
    "DeliveryError",
    "Notifier",
    "RenderedMessage",
    "LoggingNotifier",
    "ResendNotifier",
    "render",
    "build_notifier",
]
