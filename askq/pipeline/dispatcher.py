"""
Batch dispatcher: email the answers the teacher ticked in "Send Email?".

Rows are handled strictly in order, each inside its own fault boundary. A
ticked row missing email, answer or prompt is skipped and keeps its tick;
every row where a send was attempted gets the tick cleared afterwards,
whatever the outcome.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

from askq.config import AskQConfig
from askq.errors import MissingColumnsError
from askq.models import SubmissionRow, SubmissionStatus
from askq.notifications.admin import AdminNotifier
from askq.notifications.mailer import MailTransport
from askq.observability.logging import get_logger
from askq.observability.telemetry import counter, log_event
from askq.storage.schema import ResolvedSchema, resolve_schema
from askq.storage.stores import RowStore
from askq.utils.redaction import redact

logger = get_logger(__name__)

UserNotice = Callable[[str], None]


@dataclass
class DispatchSummary:
    sent: list[int] = field(default_factory=list)
    failed: list[int] = field(default_factory=list)
    skipped: list[int] = field(default_factory=list)
    error: str | None = None

    @property
    def notice(self) -> str:
        counts = (
            f"Sent: {len(self.sent)}, Failed: {len(self.failed)}, Skipped: {len(self.skipped)}."
        )
        if self.error:
            if self.sent or self.failed or self.skipped:
                return f"Email sending aborted: {self.error}. {counts}"
            return f"Email sending aborted: {self.error}"
        return f"Email sending complete. {counts}"


def compose_email_body(row: SubmissionRow) -> str:
    greeting = f"Hi {row.student_name}," if row.student_name else "Hi there,"
    return (
        f"{greeting}\n\n"
        "Here is the response to your question.\n\n"
        f"Your question:\n{row.prompt}\n\n"
        f"Response:\n{row.ai_response}\n"
    )


class BatchDispatcher:
    def __init__(
        self,
        config: AskQConfig,
        store: RowStore,
        transport: MailTransport,
        notifier: AdminNotifier,
        user_notice: UserNotice | None = None,
    ):
        self.config = config
        self.store = store
        self.transport = transport
        self.notifier = notifier
        self.user_notice = user_notice or (lambda message: logger.info("%s", message))

    def send_selected(self) -> DispatchSummary:
        """
        One pass over every data row.

        Returns:
            DispatchSummary; its ``notice`` has already been surfaced exactly once

        Side Effects:
            - Sends one email per ticked, complete row
            - Writes Status (and Error Details on failure), clears Send Email?
            - Notifies the admin about each failed send, and once if the sheet cannot be read
        """
        summary = DispatchSummary()
        try:
            schema = resolve_schema(
                self.store.header(), self.config.columns, self.config.student_name_column
            )
        except MissingColumnsError as e:
            logger.error("Send pass aborted: %s", e)
            self.notifier.notify("Missing required columns", f"Send Selected Answers aborted.\n\n{e}")
            return self._abort(summary, e)
        except Exception as e:
            logger.exception("Send pass aborted: could not read the responses header")
            self.notifier.notify(
                "Email sending failed",
                f"Send Selected Answers aborted: the responses sheet could not be read.\n\n{e}",
            )
            return self._abort(summary, e)

        try:
            self._send_pass(schema, summary)
        except Exception as e:
            logger.exception("Send pass aborted while reading rows")
            self.notifier.notify(
                "Email sending failed",
                "Send Selected Answers stopped part way: the responses sheet could not be read."
                f"\n\nSent before the failure: {len(summary.sent)}.\n\n{e}",
            )
            return self._abort(summary, e)

        log_event(
            "dispatcher.done",
            sent=len(summary.sent),
            failed=len(summary.failed),
            skipped=len(summary.skipped),
        )
        self.user_notice(summary.notice)
        return summary

    def _abort(self, summary: DispatchSummary, error: Exception) -> DispatchSummary:
        counter("dispatcher.aborted")
        summary.error = str(error) or type(error).__name__
        self.user_notice(summary.notice)
        return summary

    def _send_pass(self, schema: ResolvedSchema, summary: DispatchSummary) -> None:
        for row_number, values in self.store.rows():
            row = schema.read(row_number, values)
            if not row.send_requested:
                continue

            if not row.ready_to_send:
                logger.warning(
                    "Row %d skipped, missing: %s", row_number, ", ".join(row.missing_for_send())
                )
                counter("dispatcher.skipped")
                summary.skipped.append(row_number)
                continue

            self._send_row(row, schema, summary)

    def _send_row(self, row: SubmissionRow, schema: ResolvedSchema, summary: DispatchSummary) -> None:
        try:
            self.transport.send_email(row.email, self.config.email_subject, compose_email_body(row))
        except Exception as e:
            counter("dispatcher.failed")
            summary.failed.append(row.row_number)
            logger.error("Row %d send failed: %s", row.row_number, e)
            self._record_failure(row, schema, e)
        else:
            counter("dispatcher.sent")
            summary.sent.append(row.row_number)
            logger.info("Row %d sent to %s", row.row_number, redact(row.email))
            try:
                self.store.write_cell(row.row_number, schema.status, SubmissionStatus.SENT.value)
            except Exception:
                # delivered; only the bookkeeping write failed
                logger.exception("Row %d: email delivered but Sent status not recorded", row.row_number)
        finally:
            try:
                self.store.write_cell(row.row_number, schema.send_requested, False)
            except Exception:
                logger.exception("Row %d: could not clear Send Email? flag", row.row_number)

    def _record_failure(self, row: SubmissionRow, schema: ResolvedSchema, error: Exception) -> None:
        detail = f"Email send failed: {error}"
        try:
            if schema.error_details is not None:
                self.store.write_cell(row.row_number, schema.error_details, detail)
            self.store.write_cell(
                row.row_number, schema.status, SubmissionStatus.ERROR_SEND_FAILED.value
            )
        except Exception:
            logger.exception("Row %d: could not record Error-SendFailed", row.row_number)
        self.notifier.notify(
            "Email send failed",
            f"Row {row.row_number}: sending the AI response failed.\n\n{error}",
        )
