"""
Exception taxonomy for AskQ.

ConfigurationError is fatal for the single triggering event and never
retried. ValidationError is terminal for one row. RemoteServiceError and
TransportError describe Gemini failures; the AI client converts both into a
GenerationFailure instead of raising. DeliveryError is a failed student email
and is contained per row by the dispatcher.
"""

from __future__ import annotations


class AskQError(Exception):
    """Base class for all AskQ errors."""


class ConfigurationError(AskQError):
    """Deployment is missing something an event needs (columns, settings, secrets)."""


class MissingColumnsError(ConfigurationError):
    """Required header names are absent from the responses sheet."""

    def __init__(self, missing: list[str]):
        self.missing = list(missing)
        super().__init__(f"Missing required columns: {', '.join(self.missing)}")


class SettingsRecordMissingError(ConfigurationError):
    """The settings sheet/record itself does not exist."""

    def __init__(self, sheet_name: str):
        self.sheet_name = sheet_name
        super().__init__(f"Settings sheet '{sheet_name}' not found")


class MasterPromptMissingError(ConfigurationError):
    """The settings record exists but its master prompt cell is empty."""

    def __init__(self, sheet_name: str, cell: str):
        self.sheet_name = sheet_name
        self.cell = cell
        super().__init__(f"Master prompt is empty (sheet '{sheet_name}', cell {cell})")


class ValidationError(AskQError):
    """Row data failed a guard."""


class InvalidEmailError(ValidationError):
    def __init__(self, email: str | None):
        self.email = email
        super().__init__(f"Invalid email address: '{email or ''}'")


class RemoteServiceError(AskQError):
    """Gemini answered, but not with usable text (non-2xx, safety block, bad shape)."""


class TransportError(AskQError):
    """The request never produced an HTTP response."""


class DeliveryError(AskQError):
    """Mail transport could not deliver a message."""
