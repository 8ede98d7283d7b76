"""Tests for the per-submission status state machine"""

from __future__ import annotations

from unittest.mock import Mock

import pytest

from askq.llm.types import GenerationFailure, GenerationSuccess
from askq.models import SubmissionStatus
from askq.observability.telemetry import get_counter
from askq.provider import DictSecretStore
from askq.storage.memory import InMemoryRowStore, InMemorySettingsStore
from askq.wiring import assemble

ADMIN = "admin@school.test"


def test_happy_path_writes_generating_then_generated(services, store, generator, transport):
    outcome = services.processor.process(2)

    assert outcome.status is SubmissionStatus.GENERATED
    assert outcome.error is None
    assert store.cell(2, "Status") == "Generated"
    assert store.cell(2, "AI Response") == "Plants turn light into sugar."

    status_writes = [value for (_, column, value) in store.writes if column == 4]
    assert status_writes == ["Generating", "Generated"]

    assert generator.calls == [
        ("Tell me about photosynthesis", "You are a friendly science tutor.", "test-key")
    ]
    assert transport.sent == []
    assert get_counter("processor.generated") == 1


def test_success_clears_previous_error_details(services, store, make_row):
    row = store.append(make_row(status="Error-AiFailed", error_details="blocked: SAFETY"))

    services.processor.process(row)

    assert store.cell(row, "Error Details") == ""


def test_invalid_email_skips_ai_and_notifies(services, store, generator, transport, make_row):
    row = store.append(make_row(email="not-an-email"))

    outcome = services.processor.process(row)

    assert outcome.status is SubmissionStatus.ERROR_INVALID_EMAIL
    assert store.cell(row, "Status") == "Error-InvalidEmail"
    assert "not-an-email" in store.cell(row, "Error Details")
    assert generator.calls == []

    notices = transport.to(ADMIN)
    assert len(notices) == 1
    assert "not-an-email" in notices[0][2]


def test_blank_email_is_invalid(services, store, generator, make_row):
    row = store.append(make_row(email=""))

    assert services.processor.process(row).status is SubmissionStatus.ERROR_INVALID_EMAIL
    assert generator.calls == []


def test_invalid_email_still_marks_generating_first(services, store, make_row):
    row = store.append(make_row(email="nobody"))

    services.processor.process(row)

    status_writes = [v for (r, c, v) in store.writes if r == row and c == 4]
    assert status_writes == ["Generating", "Error-InvalidEmail"]


def test_missing_api_key(config, store, settings, transport, generator):
    services = assemble(config, store, settings, transport, generator, DictSecretStore())

    outcome = services.processor.process(2)

    assert outcome.status is SubmissionStatus.ERROR_API_KEY_MISSING
    assert store.cell(2, "Status") == "Error-ApiKeyMissing"
    assert generator.calls == []
    assert len(transport.to(ADMIN)) == 1


def test_ai_failure_writes_placeholder_and_reason(config, store, settings, transport, secrets):
    failing = Mock()
    failing.generate.return_value = GenerationFailure(
        reason="API request failed with status 500: Internal error", status_code=500
    )
    services = assemble(config, store, settings, transport, failing, secrets)

    outcome = services.processor.process(2)

    assert outcome.status is SubmissionStatus.ERROR_AI_FAILED
    assert store.cell(2, "Status") == "Error-AiFailed"
    assert store.cell(2, "AI Response") == config.response_placeholder
    assert "500" in store.cell(2, "Error Details")
    assert "500" in transport.to(ADMIN)[0][2]


def test_safety_block_is_ai_failure(config, store, settings, transport, secrets):
    failing = Mock()
    failing.generate.return_value = GenerationFailure(reason="blocked: SAFETY")
    services = assemble(config, store, settings, transport, failing, secrets)

    services.processor.process(2)

    assert store.cell(2, "Status") == "Error-AiFailed"
    assert store.cell(2, "Error Details") == "blocked: SAFETY"


def test_unexpected_client_exception_is_script_failed(config, store, settings, transport, secrets):
    exploding = Mock()
    exploding.generate.side_effect = RuntimeError("client exploded")
    services = assemble(config, store, settings, transport, exploding, secrets)

    outcome = services.processor.process(2)

    assert outcome.status is SubmissionStatus.ERROR_SCRIPT_FAILED
    assert store.cell(2, "Status") == "Error-ScriptFailed"
    assert "client exploded" in store.cell(2, "Error Details")
    assert len(transport.to(ADMIN)) == 1


def test_missing_master_prompt_is_script_failed(config, store, transport, generator, secrets):
    services = assemble(config, store, InMemorySettingsStore(""), transport, generator, secrets)

    outcome = services.processor.process(2)

    assert outcome.status is SubmissionStatus.ERROR_SCRIPT_FAILED
    assert "cell B1" in store.cell(2, "Error Details")
    assert generator.calls == []


def test_missing_settings_record_is_script_failed(config, store, transport, generator, secrets):
    settings = InMemorySettingsStore(exists=False)
    services = assemble(config, store, settings, transport, generator, secrets)

    outcome = services.processor.process(2)

    assert outcome.status is SubmissionStatus.ERROR_SCRIPT_FAILED
    assert "Settings" in store.cell(2, "Error Details")


def test_empty_prompt_is_sent_as_is(services, store, generator, make_row):
    row = store.append(make_row(prompt=""))

    services.processor.process(row)

    assert generator.calls[0][0] == ""
    assert store.cell(row, "Status") == "Generated"


def test_missing_columns_abort_without_writes(config, settings, transport, generator, secrets, header, make_row):
    header.remove("AI Response")
    store = InMemoryRowStore(header, [make_row()[:5] + make_row()[6:]])
    services = assemble(config, store, settings, transport, generator, secrets)

    outcome = services.processor.process(2)

    assert outcome.aborted
    assert "AI Response" in outcome.error
    assert store.writes == []
    assert generator.calls == []
    assert "AI Response" in transport.to(ADMIN)[0][2]
    assert get_counter("processor.aborted") == 1


def test_missing_error_details_column_still_records_status(config, settings, transport, secrets, make_row):
    header = ["Timestamp", "Email address", "Student Name", "Ask AI", "Status", "AI Response", "Send Email?"]
    values = make_row(email="bad")
    store = InMemoryRowStore(header, [values[:6] + values[7:]])
    services = assemble(config, store, settings, transport, Mock(), secrets)

    services.processor.process(2)

    assert store.cell(2, "Status") == "Error-InvalidEmail"


def test_out_of_range_row_is_script_failed(services, store, transport):
    outcome = services.processor.process(40)

    assert outcome.status is SubmissionStatus.ERROR_SCRIPT_FAILED
    assert store.writes == []
    assert len(transport.to(ADMIN)) == 1


def test_admin_mail_failure_does_not_change_outcome(
    config, store, settings, generator, secrets, make_row, transport_factory
):
    transport = transport_factory(fail_for={ADMIN})
    services = assemble(config, store, settings, transport, generator, secrets)
    row = store.append(make_row(email="nope"))

    outcome = services.processor.process(row)

    assert outcome.status is SubmissionStatus.ERROR_INVALID_EMAIL
    assert get_counter("admin_notify.failed") == 1


@pytest.mark.parametrize(
    "result,expected",
    [
        (GenerationSuccess(text="ok"), "Generated"),
        (GenerationFailure(reason="unexpected response structure"), "Error-AiFailed"),
    ],
)
def test_reprocessing_a_row_overwrites_status(config, store, settings, transport, secrets, result, expected):
    client = Mock()
    client.generate.return_value = result
    services = assemble(config, store, settings, transport, client, secrets)

    services.processor.process(2)
    services.processor.process(2)

    assert store.cell(2, "Status") == expected
    assert client.generate.call_count == 2
