"""Storage protocols shared by the in-memory and Google Sheets backends."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class RowStore(Protocol):
    """
    Row-oriented store keyed by 1-based row number, header at row 1.

    Column indices passed to ``write_cell`` are 0-based, as produced by
    ResolvedSchema.
    """

    def header(self) -> list[Any]: ...

    def row(self, row_number: int) -> list[Any]: ...

    def rows(self) -> Iterator[tuple[int, list[Any]]]:
        """Yield ``(row_number, values)`` for every data row (header excluded)."""
        ...

    def write_cell(self, row_number: int, column_index: int, value: Any) -> None: ...


@runtime_checkable
class SettingsStore(Protocol):
    """The singleton settings record holding the master prompt."""

    def exists(self) -> bool: ...

    def read(self) -> str | None:
        """Cell text, or None when blank. Only valid when ``exists()``."""
        ...

    def write(self, value: str) -> None: ...
