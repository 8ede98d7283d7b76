"""Construct the AskQ object graph from an AskQConfig."""

from __future__ import annotations

from dataclasses import dataclass

from askq.config import AskQConfig, load_config
from askq.llm.gemini import GeminiClient
from askq.notifications.admin import AdminNotifier
from askq.notifications.mailer import MailTransport, SmtpMailer
from askq.pipeline.dispatcher import BatchDispatcher, UserNotice
from askq.pipeline.processor import Generator, SubmissionProcessor
from askq.provider import ConfigProvider, EnvSecretStore, SecretStore
from askq.storage.sheets import GoogleSheetsRowStore, GoogleSheetsSettingsStore, build_sheets_service
from askq.storage.stores import RowStore, SettingsStore


@dataclass
class Services:
    config: AskQConfig
    store: RowStore
    settings: SettingsStore
    provider: ConfigProvider
    notifier: AdminNotifier
    transport: MailTransport
    processor: SubmissionProcessor
    dispatcher: BatchDispatcher


def assemble(
    config: AskQConfig,
    store: RowStore,
    settings: SettingsStore,
    transport: MailTransport,
    client: Generator,
    secrets: SecretStore,
    user_notice: UserNotice | None = None,
) -> Services:
    """Wire components around already-built adapters (used by tests and ``build_services``)."""
    notifier = AdminNotifier(transport, config.admin_email)
    provider = ConfigProvider(secrets, settings, notifier, config.api_key_secret_name)
    processor = SubmissionProcessor(config, store, provider, client, notifier)
    dispatcher = BatchDispatcher(config, store, transport, notifier, user_notice)
    return Services(
        config=config,
        store=store,
        settings=settings,
        provider=provider,
        notifier=notifier,
        transport=transport,
        processor=processor,
        dispatcher=dispatcher,
    )


def build_services(config: AskQConfig | None = None, user_notice: UserNotice | None = None) -> Services:
    """
    Production wiring: Google Sheets stores, SMTP mailer, Gemini REST client,
    secrets from the environment.

    Raises:
        ConfigurationError: If the spreadsheet or service account is not configured
    """
    config = config or load_config()
    service = build_sheets_service(config.service_account_file)
    store = GoogleSheetsRowStore(config.spreadsheet_id, config.responses_sheet, service=service)
    settings = GoogleSheetsSettingsStore(
        config.spreadsheet_id,
        config.settings_sheet,
        config.master_prompt_cell,
        service=service,
    )
    transport = SmtpMailer(config.smtp, timeout=config.http_timeout_seconds)
    return assemble(
        config,
        store,
        settings,
        transport,
        GeminiClient(config),
        EnvSecretStore(),
        user_notice,
    )
