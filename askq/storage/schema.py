"""
Header-name schema resolution for the responses sheet.

The header row is read once per event and turned into a ResolvedSchema
(name -> 0-based index). Every later cell access goes through the schema,
so a missing column surfaces exactly once, as MissingColumnsError.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from askq.config import ColumnNames
from askq.errors import MissingColumnsError
from askq.models import SubmissionRow, cell_text, is_checked


@dataclass(frozen=True)
class ResolvedSchema:
    """0-based column indices for one responses sheet."""

    status: int
    prompt: int
    email: int
    ai_response: int
    send_requested: int
    error_details: int | None
    student_name: int | None

    @property
    def has_error_details(self) -> bool:
        return self.error_details is not None

    def read(self, row_number: int, values: Sequence[Any]) -> SubmissionRow:
        """Project raw row values onto a SubmissionRow. Short rows read as blank."""

        def at(index: int | None) -> Any:
            if index is None or index >= len(values):
                return None
            return values[index]

        return SubmissionRow(
            row_number=row_number,
            status=cell_text(at(self.status)),
            prompt=cell_text(at(self.prompt)),
            email=cell_text(at(self.email)),
            ai_response=cell_text(at(self.ai_response)),
            error_details=cell_text(at(self.error_details)),
            student_name=cell_text(at(self.student_name)),
            send_requested=is_checked(at(self.send_requested)),
        )


def resolve_schema(
    header: Sequence[Any],
    columns: ColumnNames,
    student_name_column: int | None = None,
) -> ResolvedSchema:
    """
    Map configured header names to column indices.

    Args:
        header: Raw header row values (exact-match comparison after trimming)
        columns: Configured header names
        student_name_column: 1-based positional column for the student name

    Raises:
        MissingColumnsError: If any required header is absent (lists all of them)
    """
    index: dict[str, int] = {}
    for position, name in enumerate(header):
        text = cell_text(name)
        # first occurrence wins when a header is duplicated
        if text and text not in index:
            index[text] = position

    missing = [name for name in columns.required() if name not in index]
    if missing:
        raise MissingColumnsError(missing)

    student_index = None
    if student_name_column and student_name_column > 0:
        student_index = student_name_column - 1

    return ResolvedSchema(
        status=index[columns.status],
        prompt=index[columns.prompt],
        email=index[columns.email],
        ai_response=index[columns.ai_response],
        send_requested=index[columns.send_requested],
        error_details=index.get(columns.error_details),
        student_name=student_index,
    )
