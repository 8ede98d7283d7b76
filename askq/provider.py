"""
Config/secrets provider.

Resolves the Gemini API key from a secret store and the master prompt from
the settings record. Absence of the key is reported, not raised: callers
branch on ``None``.
"""

from __future__ import annotations

import os
from typing import Protocol

from askq.errors import SettingsRecordMissingError
from askq.infrastructure.env import ensure_env_loaded
from askq.notifications.admin import AdminNotifier
from askq.observability.logging import get_logger
from askq.observability.telemetry import counter
from askq.storage.stores import SettingsStore

logger = get_logger(__name__)


class SecretStore(Protocol):
    def get_secret(self, name: str) -> str | None: ...


class EnvSecretStore:
    """Secrets from the process environment (``.env`` loaded first)."""

    def get_secret(self, name: str) -> str | None:
        ensure_env_loaded()
        return os.getenv(name)


class DictSecretStore:
    """Fixed mapping, for tests and scripted runs."""

    def __init__(self, values: dict[str, str] | None = None):
        self.values = dict(values or {})

    def get_secret(self, name: str) -> str | None:
        return self.values.get(name)


class ConfigProvider:
    def __init__(
        self,
        secrets: SecretStore,
        settings: SettingsStore,
        notifier: AdminNotifier,
        api_key_secret_name: str,
    ):
        self.secrets = secrets
        self.settings = settings
        self.notifier = notifier
        self.api_key_secret_name = api_key_secret_name

    def get_api_key(self) -> str | None:
        """
        Read the Gemini API key.

        Returns:
            The key, or None if the secret is missing or blank

        Side Effects:
            - Logs at CRITICAL level when missing
            - Notifies the admin when missing (if an admin address is configured)
        """
        value = self.secrets.get_secret(self.api_key_secret_name)
        if value and value.strip():
            return value.strip()

        counter("provider.api_key_missing")
        logger.critical(
            "API key secret '%s' is not set; AI generation is unavailable",
            self.api_key_secret_name,
        )
        self.notifier.notify(
            "API key missing",
            f"The secret '{self.api_key_secret_name}' is not set. "
            "Student prompts cannot be sent to the AI until it is configured.",
        )
        return None

    def get_master_prompt(self) -> str | None:
        """
        Read the master prompt from the settings record.

        Returns:
            The prompt text, or None if the designated cell is blank

        Raises:
            SettingsRecordMissingError: If the settings record does not exist
        """
        if not self.settings.exists():
            raise SettingsRecordMissingError(getattr(self.settings, "sheet_name", "Settings"))
        return self.settings.read()

    def set_master_prompt(self, text: str) -> None:
        """
        Administrative action: overwrite the master prompt.

        Raises:
            SettingsRecordMissingError: If the settings record does not exist
        """
        if not self.settings.exists():
            raise SettingsRecordMissingError(getattr(self.settings, "sheet_name", "Settings"))
        self.settings.write(text)
        logger.info("Master prompt updated (%d chars)", len(text))

    def api_key_present(self) -> bool:
        """Presence check without logging or notifying (health/status reporting)."""
        value = self.secrets.get_secret(self.api_key_secret_name)
        return bool(value and value.strip())
