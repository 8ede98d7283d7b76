"""
Pytest configuration for AskQ tests

Provides an in-memory responses sheet, fake mail transport and fake Gemini
client so no test touches the network.
"""

from __future__ import annotations

import pytest

from askq.config import AskQConfig
from askq.errors import DeliveryError
from askq.llm.types import GenerationResult, GenerationSuccess
from askq.observability.telemetry import reset_counters
from askq.provider import DictSecretStore
from askq.storage.memory import InMemoryRowStore, InMemorySettingsStore
from askq.wiring import assemble

HEADER = [
    "Timestamp",
    "Email address",
    "Student Name",
    "Ask AI",
    "Status",
    "AI Response",
    "Error Details",
    "Send Email?",
]

ADMIN_EMAIL = "admin@school.test"
MASTER_PROMPT = "You are a friendly science tutor."


def make_row(
    email: str = "student@example.com",
    name: str = "Ada",
    prompt: str = "Tell me about photosynthesis",
    status: str = "",
    ai_response: str = "",
    error_details: str = "",
    send: object = False,
) -> list[object]:
    return ["2026-10-19 09:00:00", email, name, prompt, status, ai_response, error_details, send]


class FakeTransport:
    """Records every message; addresses in ``fail_for`` raise DeliveryError."""

    def __init__(self, fail_for: set[str] | None = None):
        self.sent: list[tuple[str, str, str]] = []
        self.fail_for = set(fail_for or ())

    def send_email(self, to_email: str, subject: str, body: str) -> None:
        if to_email in self.fail_for:
            raise DeliveryError(f"550 mailbox unavailable: {to_email}")
        self.sent.append((to_email, subject, body))

    def to(self, address: str) -> list[tuple[str, str, str]]:
        return [m for m in self.sent if m[0] == address]


class FakeGenerator:
    """Returns a fixed result and records (prompt, master_prompt, api_key)."""

    def __init__(self, result: GenerationResult | None = None):
        self.result = result or GenerationSuccess(text="Plants turn light into sugar.")
        self.calls: list[tuple[str, str, str]] = []

    def generate(self, prompt_text: str, master_prompt: str, api_key: str) -> GenerationResult:
        self.calls.append((prompt_text, master_prompt, api_key))
        return self.result


@pytest.fixture(autouse=True)
def _clean_counters():
    reset_counters()
    yield
    reset_counters()


@pytest.fixture
def config():
    return AskQConfig(admin_email=ADMIN_EMAIL)


@pytest.fixture
def store():
    return InMemoryRowStore(HEADER, [make_row()])


@pytest.fixture
def settings():
    return InMemorySettingsStore(MASTER_PROMPT)


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def transport_factory():
    return FakeTransport


@pytest.fixture
def generator():
    return FakeGenerator()


@pytest.fixture
def secrets():
    return DictSecretStore({"GEMINI_API_KEY": "test-key"})


@pytest.fixture
def notices():
    return []


@pytest.fixture
def services(config, store, settings, transport, generator, secrets, notices):
    return assemble(
        config,
        store,
        settings,
        transport,
        generator,
        secrets,
        user_notice=notices.append,
    )


@pytest.fixture(name="make_row")
def make_row_fixture():
    return make_row


@pytest.fixture
def header():
    return list(HEADER)
