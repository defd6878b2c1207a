"""
Security Middleware and Utilities

Response hardening headers and the bearer-secret check guarding the cron
trigger.
"""

import logging
from typing import Callable, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from ...core.config import CapsuleSettings
from ...core.security import secrets_match
from .exceptions import ForbiddenError, UnauthorizedError

logger = logging.getLogger(__name__)


class SecurityMiddleware(BaseHTTPMiddleware):
    """
    Security middleware for production hardening.

    Features:
    - Security headers
    - Server header removal
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Cache-Control"] = "no-store"

        # Remove server header if present
        if "server" in response.headers:
            del response.headers["server"]

        return response


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Return the token of an `Authorization: Bearer <token>` header."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def check_cron_secret(settings: CapsuleSettings, authorization: Optional[str]) -> None:
    """
    Authorize a trigger call.

    A configured secret is always required. Without one, production refuses
    every call and other environments let it through with a warning.

    Raises:
        UnauthorizedError: Missing or wrong bearer secret.
        ForbiddenError: Production with no secret configured.
    """
    if not settings.cron_secret:
        if settings.is_production:
            logger.error("CRON_SECRET is not configured; refusing trigger in production")
            raise ForbiddenError("Trigger is disabled: no secret configured")
        logger.warning("CRON_SECRET is not configured; trigger is unauthenticated")
        return

    if not secrets_match(extract_bearer_token(authorization), settings.cron_secret):
        raise UnauthorizedError("Invalid or missing trigger secret")
