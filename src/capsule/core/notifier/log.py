"""
Logging Notifier

Used when no email API key is configured: logs the message instead of
sending it.
"""

import logging

from .base import Notifier

logger = logging.getLogger(__name__)


class LoggingNotifier(Notifier):

    @property
    def name(self) -> str:
        return "log"

    async def send(self, to: str, subject: str, text: str, html: str) -> None:
        logger.info(f"[MOCK EMAIL] To: {to} | Subject: {subject}")
