"""Centralized configuration for AskQ.

Defaults live as typed module constants; ``load_config()`` overlays
environment variables (``.env`` loaded via python-dotenv) and returns an
``AskQConfig`` that is passed explicitly into every component.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from askq.infrastructure.env import get_float_env, get_int_env, get_optional_env

# --- App ---
APP_VERSION: str = "0.1.0"

# --- Gemini ---
DEFAULT_GEMINI_MODEL: str = "gemini-2.0-flash"
DEFAULT_GEMINI_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_TEMPERATURE: float = 0.7
DEFAULT_MAX_OUTPUT_TOKENS: int = 512
DEFAULT_HTTP_TIMEOUT: float = 30.0
DEFAULT_API_KEY_SECRET: str = "GEMINI_API_KEY"

# --- Sheets ---
DEFAULT_RESPONSES_SHEET: str = "Form Responses 1"
DEFAULT_SETTINGS_SHEET: str = "Settings"
DEFAULT_MASTER_PROMPT_CELL: str = "B1"
DEFAULT_STUDENT_NAME_COLUMN: int = 3  # 1-based, column C of the form responses

# --- Columns (exact header text) ---
COLUMN_STATUS: str = "Status"
COLUMN_PROMPT: str = "Ask AI"
COLUMN_EMAIL: str = "Email address"
COLUMN_AI_RESPONSE: str = "AI Response"
COLUMN_ERROR_DETAILS: str = "Error Details"
COLUMN_SEND_REQUESTED: str = "Send Email?"

# --- Mail ---
DEFAULT_EMAIL_SUBJECT: str = "Your AI Response"
DEFAULT_FROM_NAME: str = "AskQ"
AI_FAILURE_PLACEHOLDER: str = "AI generation failed. Your teacher has been notified."


@dataclass(frozen=True)
class ColumnNames:
    """Header names used to resolve the responses sheet schema."""

    status: str = COLUMN_STATUS
    prompt: str = COLUMN_PROMPT
    email: str = COLUMN_EMAIL
    ai_response: str = COLUMN_AI_RESPONSE
    error_details: str = COLUMN_ERROR_DETAILS
    send_requested: str = COLUMN_SEND_REQUESTED

    def required(self) -> list[str]:
        """Headers whose absence aborts an event (Error Details is optional)."""
        return [self.status, self.prompt, self.email, self.ai_response, self.send_requested]


@dataclass(frozen=True)
class SmtpSettings:
    host: str = "smtp.gmail.com"
    port: int = 587
    user: str = ""
    password: str = ""
    from_email: str = ""
    from_name: str = DEFAULT_FROM_NAME

    @property
    def enabled(self) -> bool:
        return all([self.host, self.user, self.password, self.from_email])


@dataclass(frozen=True)
class AskQConfig:
    """
    Everything a deployment can tune.

    Fields:
        admin_email: Fixed address for administrative notifications; empty
            disables the channel.
        api_key_secret_name: Name of the secret holding the Gemini key.
        student_name_column: 1-based positional column for the student name.
        response_placeholder: Written to the AI Response cell when generation fails.
    """

    admin_email: str = ""
    api_key_secret_name: str = DEFAULT_API_KEY_SECRET
    gemini_model: str = DEFAULT_GEMINI_MODEL
    gemini_base_url: str = DEFAULT_GEMINI_BASE_URL
    temperature: float = DEFAULT_TEMPERATURE
    max_output_tokens: int = DEFAULT_MAX_OUTPUT_TOKENS
    http_timeout_seconds: float = DEFAULT_HTTP_TIMEOUT
    spreadsheet_id: str = ""
    service_account_file: str = ""
    responses_sheet: str = DEFAULT_RESPONSES_SHEET
    settings_sheet: str = DEFAULT_SETTINGS_SHEET
    master_prompt_cell: str = DEFAULT_MASTER_PROMPT_CELL
    student_name_column: int = DEFAULT_STUDENT_NAME_COLUMN
    email_subject: str = DEFAULT_EMAIL_SUBJECT
    response_placeholder: str = AI_FAILURE_PLACEHOLDER
    columns: ColumnNames = field(default_factory=ColumnNames)
    smtp: SmtpSettings = field(default_factory=SmtpSettings)


def load_smtp_settings() -> SmtpSettings:
    user = get_optional_env("SMTP_USER")
    return SmtpSettings(
        host=get_optional_env("SMTP_HOST", "smtp.gmail.com"),
        port=get_int_env("SMTP_PORT", 587),
        user=user,
        password=get_optional_env("SMTP_PASSWORD"),
        from_email=get_optional_env("SMTP_FROM_EMAIL", user),
        from_name=get_optional_env("SMTP_FROM_NAME", DEFAULT_FROM_NAME),
    )


def load_config() -> AskQConfig:
    """Build configuration from the environment, falling back to module defaults."""
    return AskQConfig(
        admin_email=get_optional_env("ASKQ_ADMIN_EMAIL"),
        api_key_secret_name=get_optional_env("ASKQ_API_KEY_SECRET", DEFAULT_API_KEY_SECRET),
        gemini_model=get_optional_env("GEMINI_MODEL", DEFAULT_GEMINI_MODEL),
        gemini_base_url=get_optional_env("GEMINI_BASE_URL", DEFAULT_GEMINI_BASE_URL),
        temperature=get_float_env("GEMINI_TEMPERATURE", DEFAULT_TEMPERATURE),
        max_output_tokens=get_int_env("GEMINI_MAX_TOKENS", DEFAULT_MAX_OUTPUT_TOKENS),
        http_timeout_seconds=get_float_env("ASKQ_HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT),
        spreadsheet_id=get_optional_env("ASKQ_SPREADSHEET_ID"),
        service_account_file=get_optional_env("GOOGLE_SERVICE_ACCOUNT_FILE"),
        responses_sheet=get_optional_env("ASKQ_RESPONSES_SHEET", DEFAULT_RESPONSES_SHEET),
        settings_sheet=get_optional_env("ASKQ_SETTINGS_SHEET", DEFAULT_SETTINGS_SHEET),
        master_prompt_cell=get_optional_env("ASKQ_MASTER_PROMPT_CELL", DEFAULT_MASTER_PROMPT_CELL),
        student_name_column=get_int_env("ASKQ_STUDENT_NAME_COLUMN", DEFAULT_STUDENT_NAME_COLUMN),
        email_subject=get_optional_env("ASKQ_EMAIL_SUBJECT", DEFAULT_EMAIL_SUBJECT),
        smtp=load_smtp_settings(),
    )


def get_config_status(config: AskQConfig, api_key_present: bool) -> dict[str, object]:
    """Configuration summary safe to print or return over HTTP (no secret values)."""
    return {
        "version": APP_VERSION,
        "admin_email_set": bool(config.admin_email),
        "api_key_secret": config.api_key_secret_name,
        "api_key_present": api_key_present,
        "gemini_model": config.gemini_model,
        "spreadsheet_id_set": bool(config.spreadsheet_id),
        "responses_sheet": config.responses_sheet,
        "settings_sheet": config.settings_sheet,
        "master_prompt_cell": config.master_prompt_cell,
        "smtp_enabled": config.smtp.enabled,
        "smtp_host": config.smtp.host,
        "smtp_port": config.smtp.port,
        "smtp_password_set": bool(config.smtp.password),
    }
