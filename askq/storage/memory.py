"""List-backed stores for tests and local dry runs."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from askq.errors import SettingsRecordMissingError


class InMemoryRowStore:
    """
    Sheet held as a list of lists; ``rows[0]`` is the header.

    Every write is appended to ``writes`` as ``(row, column, value)`` so
    tests can assert exactly which cells a pass touched.
    """

    def __init__(self, header: list[Any], rows: list[list[Any]] | None = None):
        self._data: list[list[Any]] = [list(header)] + [list(r) for r in rows or []]
        self.writes: list[tuple[int, int, Any]] = []

    def header(self) -> list[Any]:
        return list(self._data[0])

    def row(self, row_number: int) -> list[Any]:
        if row_number < 2 or row_number > len(self._data):
            raise IndexError(f"Row {row_number} out of range")
        return list(self._data[row_number - 1])

    def rows(self) -> Iterator[tuple[int, list[Any]]]:
        for offset, values in enumerate(self._data[1:]):
            yield offset + 2, list(values)

    def write_cell(self, row_number: int, column_index: int, value: Any) -> None:
        if row_number < 2 or row_number > len(self._data):
            raise IndexError(f"Row {row_number} out of range")
        values = self._data[row_number - 1]
        if column_index >= len(values):
            values.extend([""] * (column_index + 1 - len(values)))
        values[column_index] = value
        self.writes.append((row_number, column_index, value))

    def append(self, values: list[Any]) -> int:
        """Add a row the way a form submission would; returns its row number."""
        self._data.append(list(values))
        return len(self._data)

    def cell(self, row_number: int, header_name: str) -> Any:
        """Lookup by header text (test convenience)."""
        column = self._data[0].index(header_name)
        values = self._data[row_number - 1]
        return values[column] if column < len(values) else ""


class InMemorySettingsStore:
    """Settings record with one value. ``InMemorySettingsStore(exists=False)`` models a missing tab."""

    def __init__(self, value: str | None = None, exists: bool = True, sheet_name: str = "Settings"):
        self._value = value
        self._exists = exists
        self.sheet_name = sheet_name

    def exists(self) -> bool:
        return self._exists

    def read(self) -> str | None:
        if not self._exists:
            raise SettingsRecordMissingError(self.sheet_name)
        if self._value is None or not str(self._value).strip():
            return None
        return str(self._value)

    def write(self, value: str) -> None:
        if not self._exists:
            raise SettingsRecordMissingError(self.sheet_name)
        self._value = value
