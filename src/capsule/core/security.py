"""
Security Utilities

Error-message sanitizing for anything persisted or returned to clients,
and constant-time secret comparison for the cron trigger.
"""

import hmac
import re
from typing import Optional

MAX_ERROR_LENGTH = 500


def sanitize_error_message(error: BaseException) -> str:
    """
    Sanitize an error message before it is stored or returned.

    Removes sensitive information like:
    - File paths
    - Database connection strings
    - Bearer tokens and API keys
    """
    message = str(error) or type(error).__name__

    # Remove file paths
    message = re.sub(r'/[\w/.-]+\.py', '[file]', message)
    message = re.sub(r'line \d+', 'line [N]', message)

    # Remove connection strings
    message = re.sub(r'postgres(?:ql)?://[^@\s]+@[^/\s]+/\w+', '[database]', message)

    # Remove potential secrets
    message = re.sub(r'Bearer\s+[\w.-]+', 'Bearer [REDACTED]', message)
    message = re.sub(r're_[A-Za-z0-9_]{8,}', '[REDACTED]', message)
    message = re.sub(r'password[=:][^\s,;]+', 'password=[REDACTED]', message, flags=re.IGNORECASE)
    message = re.sub(r'secret[=:][^\s,;]+', 'secret=[REDACTED]', message, flags=re.IGNORECASE)
    message = re.sub(r'key[=:][^\s,;]+', 'key=[REDACTED]', message, flags=re.IGNORECASE)

    if len(message) > MAX_ERROR_LENGTH:
        message = message[:MAX_ERROR_LENGTH - 3] + "..."

    return message


def secrets_match(provided: Optional[str], expected: Optional[str]) -> bool:
    """Compare two secrets in constant time. Missing values never match."""
    if not provided or not expected:
        return False
    return hmac.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))
