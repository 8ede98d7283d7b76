"""Google Sheets backend (Sheets API v4)

Reads and writes the form-responses tab and the settings tab of one
spreadsheet through a service account. Values are read UNFORMATTED so
checkbox cells come back as real booleans.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from askq.errors import ConfigurationError, SettingsRecordMissingError
from askq.observability.logging import get_logger

logger = get_logger(__name__)

SHEETS_SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]


def column_letter(column_index: int) -> str:
    """0-based column index to A1 letters (0 -> A, 25 -> Z, 26 -> AA)."""
    if column_index < 0:
        raise ValueError(f"Column index must be >= 0, got {column_index}")
    letters = ""
    n = column_index + 1
    while n:
        n, remainder = divmod(n - 1, 26)
        letters = chr(ord("A") + remainder) + letters
    return letters


def quote_sheet(sheet_name: str) -> str:
    """Sheet name quoted for A1 ranges (embedded quotes doubled)."""
    return "'" + sheet_name.replace("'", "''") + "'"


def build_sheets_service(service_account_file: str) -> Any:
    """
    Build an authenticated Sheets API service

    Raises:
        ConfigurationError: If no service account file is configured
    """
    if not service_account_file:
        raise ConfigurationError(
            "GOOGLE_SERVICE_ACCOUNT_FILE is not set; cannot reach Google Sheets"
        )
    credentials = service_account.Credentials.from_service_account_file(
        service_account_file, scopes=SHEETS_SCOPES
    )
    return build("sheets", "v4", credentials=credentials, cache_discovery=False)


class _SheetsBase:
    def __init__(self, spreadsheet_id: str, service: Any = None, service_account_file: str = ""):
        if not spreadsheet_id:
            raise ConfigurationError("ASKQ_SPREADSHEET_ID is not set")
        self.spreadsheet_id = spreadsheet_id
        self.service_account_file = service_account_file
        self._service = service

    @property
    def service(self) -> Any:
        if self._service is None:
            self._service = build_sheets_service(self.service_account_file)
        return self._service

    def _get_values(self, a1_range: str) -> list[list[Any]]:
        response = (
            self.service.spreadsheets()
            .values()
            .get(
                spreadsheetId=self.spreadsheet_id,
                range=a1_range,
                valueRenderOption="UNFORMATTED_VALUE",
            )
            .execute()
        )
        return response.get("values", [])

    def _update_value(self, a1_range: str, value: Any) -> None:
        (
            self.service.spreadsheets()
            .values()
            .update(
                spreadsheetId=self.spreadsheet_id,
                range=a1_range,
                valueInputOption="RAW",
                body={"values": [[value]]},
            )
            .execute()
        )


class GoogleSheetsRowStore(_SheetsBase):
    """RowStore over one tab of a spreadsheet."""

    def __init__(
        self,
        spreadsheet_id: str,
        sheet_name: str,
        service: Any = None,
        service_account_file: str = "",
    ):
        super().__init__(spreadsheet_id, service, service_account_file)
        self.sheet_name = sheet_name

    def header(self) -> list[Any]:
        values = self._get_values(f"{quote_sheet(self.sheet_name)}!1:1")
        return list(values[0]) if values else []

    def row(self, row_number: int) -> list[Any]:
        values = self._get_values(f"{quote_sheet(self.sheet_name)}!{row_number}:{row_number}")
        return list(values[0]) if values else []

    def rows(self) -> Iterator[tuple[int, list[Any]]]:
        values = self._get_values(quote_sheet(self.sheet_name))
        # one read for the whole pass; the dispatcher writes back cell by cell
        for offset, row_values in enumerate(values[1:]):
            yield offset + 2, list(row_values)

    def write_cell(self, row_number: int, column_index: int, value: Any) -> None:
        a1 = f"{quote_sheet(self.sheet_name)}!{column_letter(column_index)}{row_number}"
        self._update_value(a1, value)
        logger.debug("Wrote %s", a1)


class GoogleSheetsSettingsStore(_SheetsBase):
    """SettingsStore backed by a single cell on a dedicated tab."""

    def __init__(
        self,
        spreadsheet_id: str,
        sheet_name: str,
        cell: str,
        service: Any = None,
        service_account_file: str = "",
    ):
        super().__init__(spreadsheet_id, service, service_account_file)
        self.sheet_name = sheet_name
        self.cell = cell

    def exists(self) -> bool:
        try:
            metadata = (
                self.service.spreadsheets()
                .get(spreadsheetId=self.spreadsheet_id, fields="sheets.properties.title")
                .execute()
            )
        except HttpError as e:
            logger.error("Failed to read spreadsheet metadata: %s", e)
            raise
        titles = [s.get("properties", {}).get("title") for s in metadata.get("sheets", [])]
        return self.sheet_name in titles

    def read(self) -> str | None:
        if not self.exists():
            raise SettingsRecordMissingError(self.sheet_name)
        values = self._get_values(f"{quote_sheet(self.sheet_name)}!{self.cell}")
        if not values or not values[0]:
            return None
        text = str(values[0][0])
        return text if text.strip() else None

    def write(self, value: str) -> None:
        if not self.exists():
            raise SettingsRecordMissingError(self.sheet_name)
        self._update_value(f"{quote_sheet(self.sheet_name)}!{self.cell}", value)
        logger.info("Master prompt updated in %s!%s", self.sheet_name, self.cell)
