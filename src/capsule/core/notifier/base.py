"""
Notifier Interface

Delivery of a rendered email. Adapters raise DeliveryError on any failure;
the outbox processor records it and schedules a retry.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


class DeliveryError(RuntimeError):
    """A notification could not be delivered."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class RenderedMessage:
    """Subject and bodies for one notification."""
    subject: str
    text: str
    html: str


class Notifier(ABC):
    """Abstract base for notification channels."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Channel name for logs."""
        pass

    @abstractmethod
    async def send(self, to: str, subject: str, text: str, html: str) -> None:
        """
        Deliver one message.

        Raises:
            DeliveryError: If the message was not accepted.
        """
        pass

    async def send_message(self, to: str, message: RenderedMessage) -> None:
        await self.send(to, message.subject, message.text, message.html)

    async def close(self) -> None:
        """Release any held resources."""
        return None
