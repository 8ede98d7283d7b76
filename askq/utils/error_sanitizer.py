"""
Error message sanitization.

Failure reasons end up in the responses sheet and in admin email, so any
credential that leaked into an exception string (query strings, auth
headers, the raw key itself) is masked before the message leaves the
component that produced it.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from askq.observability.logging import get_logger

logger = get_logger(__name__)

MASK = "[REDACTED]"

# shorter literals would mask ordinary words
MIN_SECRET_LENGTH = 8

# Credential shapes that show up in requests/urllib3 error text
SENSITIVE_PATTERNS = [
    r"(?<=[?&]key=)[^&\s'\"]+",
    r"(?<=x-goog-api-key: )[^\s'\"]+",
    r"AIza[0-9A-Za-z_-]{10,}",
    r"(?<=Bearer )[A-Za-z0-9._-]+",
]


def sanitize_error_message(message: str, secrets: Iterable[str | None] = ()) -> str:
    """
    Mask credentials in an error message, keeping the rest readable.

    Args:
        message: The original error text
        secrets: Literal values that must never appear (e.g. the API key in use)

    Returns:
        The message with every secret and credential-shaped token replaced by MASK
    """
    if not message:
        return message

    sanitized = message
    for secret in secrets:
        if secret and len(secret) >= MIN_SECRET_LENGTH:
            sanitized = sanitized.replace(secret, MASK)
    for pattern in SENSITIVE_PATTERNS:
        sanitized = re.sub(pattern, MASK, sanitized)

    if sanitized != message:
        logger.warning("Sanitized credential material from an error message")
    return sanitized
