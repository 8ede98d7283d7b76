"""
Module: types
Purpose: Tagged result of one generation call.
Dependencies: none

The AI client never raises; callers match on the two variants.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class GenerationSuccess:
    """Model produced non-empty text (already trimmed)."""

    text: str

    ok = True


@dataclass(frozen=True)
class GenerationFailure:
    """Anything else. ``reason`` is kept verbatim for diagnostics."""

    reason: str
    status_code: int | None = None

    ok = False


GenerationResult = Union[GenerationSuccess, GenerationFailure]
