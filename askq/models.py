"""
Module: models
Purpose: Submission status values and the typed view of one responses row.
Dependencies: none (leaf module)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class SubmissionStatus(str, Enum):
    """Status cell values.

    Extends str so the raw value is what gets written to the sheet.
    """

    NONE = ""
    GENERATING = "Generating"
    GENERATED = "Generated"
    SENT = "Sent"
    ERROR_INVALID_EMAIL = "Error-InvalidEmail"
    ERROR_API_KEY_MISSING = "Error-ApiKeyMissing"
    ERROR_AI_FAILED = "Error-AiFailed"
    ERROR_SCRIPT_FAILED = "Error-ScriptFailed"
    ERROR_SEND_FAILED = "Error-SendFailed"

    @property
    def is_error(self) -> bool:
        return self.value.startswith("Error-")

    @property
    def is_terminal(self) -> bool:
        return self not in (SubmissionStatus.NONE, SubmissionStatus.GENERATING)


def cell_text(value: Any) -> str:
    """Normalize a sheet cell to trimmed text (None and missing cells become '')."""
    if value is None:
        return ""
    return str(value).strip()


def is_checked(value: Any) -> bool:
    """Checkbox semantics: boolean True, or the string TRUE in any case."""
    if isinstance(value, bool):
        return value
    return cell_text(value).upper() == "TRUE"


def is_valid_email(email: str | None) -> bool:
    """Shallow check: anything containing '@' passes."""
    return bool(email) and "@" in email


@dataclass(frozen=True)
class SubmissionRow:
    """Fields of one responses row, read through a ResolvedSchema."""

    row_number: int
    status: str
    prompt: str
    email: str
    ai_response: str
    error_details: str
    student_name: str
    send_requested: bool

    @property
    def ready_to_send(self) -> bool:
        return bool(self.email and self.ai_response and self.prompt)

    def missing_for_send(self) -> list[str]:
        missing = []
        if not self.email:
            missing.append("email")
        if not self.ai_response:
            missing.append("ai_response")
        if not self.prompt:
            missing.append("prompt")
        return missing
