"""
Resend Email Notifier

Sends through the Resend HTTP API. The adapter owns its client and the
send timeout; every failure surfaces as DeliveryError.
"""

import logging
from typing import Optional

import httpx

from .base import DeliveryError, Notifier

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.resend.com/emails"


class ResendNotifier(Notifier):
    """Email delivery via Resend."""

    def __init__(
        self,
        api_key: str,
        sender: str,
        api_url: str = DEFAULT_API_URL,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._api_url = api_url
        self._sender = sender
        self._client = httpx.AsyncClient(
            timeout=timeout,
            transport=transport,
            headers={"Authorization": f"Bearer {api_key}"},
        )

    @property
    def name(self) -> str:
        return "resend"

    async def send(self, to: str, subject: str, text: str, html: str) -> None:
        payload = {
            "from": self._sender,
            "to": [to],
            "subject": subject,
            "text": text,
            "html": html,
        }

        try:
            resp = await self._client.post(self._api_url, json=payload)
        except httpx.TimeoutException as e:
            raise DeliveryError(f"Resend request timed out: {e}") from e
        except httpx.HTTPError as e:
            raise DeliveryError(f"Resend request failed: {e}") from e

        if resp.status_code < 200 or resp.status_code >= 300:
            raise DeliveryError(
                f"Resend rejected message: HTTP {resp.status_code}: {resp.text[:200]}",
                status_code=resp.status_code,
            )

        logger.info(f"Email sent via Resend (subject={subject!r})")

    async def close(self) -> None:
        await self._client.aclose()
