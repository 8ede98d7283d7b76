"""
Submission processor: one form submission, one row, one pass.

Flow:
1) Resolve the header schema; missing columns abort without touching the row
2) status = Generating (before any validation, so the row shows it was picked up)
3) Email guard -> Error-InvalidEmail
4) API key -> Error-ApiKeyMissing
5) Master prompt + Gemini call -> Generated | Error-AiFailed
6) Anything else -> Error-ScriptFailed

No exception escapes ``process``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from askq.config import AskQConfig
from askq.errors import (
    ConfigurationError,
    InvalidEmailError,
    MasterPromptMissingError,
    MissingColumnsError,
)
from askq.llm.types import GenerationFailure, GenerationResult
from askq.models import SubmissionRow, SubmissionStatus, is_valid_email
from askq.notifications.admin import AdminNotifier
from askq.observability.logging import get_logger
from askq.observability.telemetry import counter, log_event
from askq.provider import ConfigProvider
from askq.storage.schema import ResolvedSchema, resolve_schema
from askq.storage.stores import RowStore
from askq.utils.redaction import redact

logger = get_logger(__name__)


class Generator(Protocol):
    def generate(self, prompt_text: str, master_prompt: str, api_key: str) -> GenerationResult: ...


@dataclass(frozen=True)
class ProcessingOutcome:
    """What one ``process`` call did. ``status`` is None when the row was not touched."""

    row_number: int
    status: SubmissionStatus | None
    error: str | None = None

    @property
    def aborted(self) -> bool:
        return self.status is None


class SubmissionProcessor:
    def __init__(
        self,
        config: AskQConfig,
        store: RowStore,
        provider: ConfigProvider,
        client: Generator,
        notifier: AdminNotifier,
    ):
        self.config = config
        self.store = store
        self.provider = provider
        self.client = client
        self.notifier = notifier

    def process(self, row_number: int) -> ProcessingOutcome:
        """
        Run the submission lifecycle for one row.

        Side Effects:
            - Writes Status / AI Response / Error Details cells of ``row_number``
            - Calls Gemini at most once
            - Sends admin notifications on configuration, validation and AI failures
        """
        try:
            schema = resolve_schema(
                self.store.header(), self.config.columns, self.config.student_name_column
            )
        except MissingColumnsError as e:
            logger.error("Row %d not processed: %s", row_number, e)
            counter("processor.aborted")
            self.notifier.notify(
                "Missing required columns",
                f"A form submission (row {row_number}) could not be processed.\n\n{e}",
            )
            return ProcessingOutcome(row_number, None, str(e))
        except Exception as e:
            # header unreadable: nothing is known about the row, so leave it alone
            logger.exception("Row %d not processed: could not read header", row_number)
            counter("processor.aborted")
            self.notifier.notify(
                "Submission processing failed",
                f"Could not read the responses header for row {row_number}: {e}",
            )
            return ProcessingOutcome(row_number, None, str(e))

        try:
            self._write_status(row_number, schema, SubmissionStatus.GENERATING)
            row = schema.read(row_number, self.store.row(row_number))
            return self._generate(row, schema)
        except Exception as e:
            logger.exception("Row %d failed during processing", row_number)
            return self._script_failed(row_number, schema, e)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _generate(self, row: SubmissionRow, schema: ResolvedSchema) -> ProcessingOutcome:
        if not is_valid_email(row.email):
            detail = str(InvalidEmailError(row.email))
            self._write_error(row.row_number, schema, SubmissionStatus.ERROR_INVALID_EMAIL, detail)
            self.notifier.notify(
                "Invalid email address",
                f"Row {row.row_number} has an invalid email address: '{row.email}'. "
                "No AI request was made.",
            )
            return self._finish(row.row_number, SubmissionStatus.ERROR_INVALID_EMAIL, detail)

        api_key = self.provider.get_api_key()
        if api_key is None:
            detail = f"API key secret '{self.config.api_key_secret_name}' is not set"
            self._write_error(row.row_number, schema, SubmissionStatus.ERROR_API_KEY_MISSING, detail)
            return self._finish(row.row_number, SubmissionStatus.ERROR_API_KEY_MISSING, detail)

        master_prompt = self.provider.get_master_prompt()
        if master_prompt is None:
            raise MasterPromptMissingError(self.config.settings_sheet, self.config.master_prompt_cell)

        log_event(
            "processor.generate",
            row=row.row_number,
            email=redact(row.email),
            prompt_chars=len(row.prompt),
        )
        result = self.client.generate(row.prompt, master_prompt, api_key)

        if isinstance(result, GenerationFailure):
            self._write_error(
                row.row_number,
                schema,
                SubmissionStatus.ERROR_AI_FAILED,
                result.reason,
                ai_response=self.config.response_placeholder,
            )
            self.notifier.notify(
                "AI generation failed",
                f"Row {row.row_number}: the AI request failed.\n\n{result.reason}",
            )
            return self._finish(row.row_number, SubmissionStatus.ERROR_AI_FAILED, result.reason)

        self.store.write_cell(row.row_number, schema.ai_response, result.text)
        if schema.error_details is not None:
            self.store.write_cell(row.row_number, schema.error_details, "")
        self._write_status(row.row_number, schema, SubmissionStatus.GENERATED)
        return self._finish(row.row_number, SubmissionStatus.GENERATED)

    def _script_failed(
        self, row_number: int, schema: ResolvedSchema, error: Exception
    ) -> ProcessingOutcome:
        detail = str(error) or type(error).__name__
        try:
            self._write_error(row_number, schema, SubmissionStatus.ERROR_SCRIPT_FAILED, detail)
        except Exception:
            logger.exception("Row %d: could not record Error-ScriptFailed", row_number)

        kind = "Configuration error" if isinstance(error, ConfigurationError) else "Script error"
        self.notifier.notify(
            "Submission processing failed",
            f"Row {row_number}: {kind} while processing a submission.\n\n{detail}",
        )
        return self._finish(row_number, SubmissionStatus.ERROR_SCRIPT_FAILED, detail)

    # ------------------------------------------------------------------
    # Cell writes
    # ------------------------------------------------------------------

    def _write_status(self, row_number: int, schema: ResolvedSchema, status: SubmissionStatus) -> None:
        self.store.write_cell(row_number, schema.status, status.value)

    def _write_error(
        self,
        row_number: int,
        schema: ResolvedSchema,
        status: SubmissionStatus,
        detail: str,
        ai_response: str | None = None,
    ) -> None:
        if ai_response is not None:
            self.store.write_cell(row_number, schema.ai_response, ai_response)
        if schema.error_details is not None:
            self.store.write_cell(row_number, schema.error_details, detail)
        self._write_status(row_number, schema, status)

    def _finish(
        self, row_number: int, status: SubmissionStatus, error: str | None = None
    ) -> ProcessingOutcome:
        if status.is_error:
            counter(f"processor.error.{status.value}")
            logger.warning("Row %d -> %s: %s", row_number, status.value, error)
        else:
            counter("processor.generated")
            logger.info("Row %d -> %s", row_number, status.value)
        return ProcessingOutcome(row_number, status, error)
