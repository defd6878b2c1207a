"""
Application Settings

Environment-driven configuration for the dispatch API and worker.
"""

import os
from typing import Optional

from .database.adapter import DatabaseConfig


def _env_flag(name: str, default: bool) -> bool:
    """Parse truthy flag values from the environment."""
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class CapsuleSettings:
    """Runtime settings loaded from environment variables."""

    def __init__(self):
        self.environment = os.getenv("ENVIRONMENT", "development").lower()
        self.cron_secret: Optional[str] = os.getenv("CRON_SECRET") or None

        # Email delivery
        self.resend_api_key: Optional[str] = os.getenv("RESEND_API_KEY") or None
        self.resend_api_url = os.getenv("RESEND_API_URL", "https://api.resend.com/emails")
        self.email_from = os.getenv("EMAIL_FROM", "VCT Capsule <notifications@resend.dev>")
        self.app_base_url = os.getenv("APP_BASE_URL", "http://localhost:3000")
        self.send_timeout = float(os.getenv("SEND_TIMEOUT_SECONDS", "10"))

        # Dispatch
        self.drain_batch_size = int(os.getenv("DRAIN_BATCH_SIZE", "100"))
        self.calendar_path: Optional[str] = os.getenv("CAPSULE_CALENDAR_PATH") or None

        # Observability
        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()
        self.log_structured = _env_flag("LOG_STRUCTURED", True)
        self.otel_endpoint: Optional[str] = os.getenv("OTEL_ENDPOINT") or None

        self.database = DatabaseConfig()

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def __repr__(self) -> str:
        return (
            f"CapsuleSettings(environment={self.environment}, "
            f"cron_secret={'set' if self.cron_secret else 'unset'}, "
            f"email={'resend' if self.resend_api_key else 'log'}, "
            f"database={self.database!r})"
        )
