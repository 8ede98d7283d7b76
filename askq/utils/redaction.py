"""
Redaction helpers for log events.

Student emails and prompt text never go into logs verbatim; a stable hash
keeps log lines correlatable across the processor and dispatcher.
"""

from __future__ import annotations

from hashlib import sha256


def redact(value: str | None) -> str:
    """
    Return a stable hash representation of a sensitive string.
    """
    if not value:
        return "hash:missing"
    digest = sha256(value.encode("utf-8")).hexdigest()[:12]
    return f"hash:{digest}"


def preview(text: str | None, max_length: int = 40) -> str:
    """
    First N characters plus a short hash, for prompts in debug logs.

    Example:
        "Tell me about photosynthesis and how..." (h:7a8b9c)
    """
    if not text:
        return "(empty)"

    visible = text[:max_length] + "..." if len(text) > max_length else text
    digest = sha256(text.encode("utf-8")).hexdigest()[:6]
    return f"{visible} (h:{digest})"
