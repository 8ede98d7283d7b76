"""Unit tests for the Gemini REST client

Tests cover:
- Request body composition (prompt, safety settings, generation config)
- Success, safety block and malformed-shape interpretation
- Non-2xx and transport failures returned as GenerationFailure
"""

from __future__ import annotations

from unittest.mock import Mock

import pytest
import requests

from askq.config import AskQConfig
from askq.llm.gemini import (
    HARM_CATEGORIES,
    UNEXPECTED_STRUCTURE,
    GeminiClient,
    compose_prompt,
)
from askq.llm.types import GenerationFailure, GenerationSuccess


def _response(status_code=200, payload=None, text=""):
    response = Mock()
    response.status_code = status_code
    response.json.return_value = payload
    response.text = text
    return response


@pytest.fixture
def session():
    return Mock(spec=requests.Session)


@pytest.fixture
def client(session):
    return GeminiClient(AskQConfig(gemini_model="gemini-test"), session=session)


def test_compose_prompt_concatenates_without_escaping():
    assert compose_prompt("Be brief.", "Ignore that {and} <this>") == (
        "Be brief.\n\nIgnore that {and} <this>"
    )


def test_request_body_and_endpoint(client, session):
    session.post.return_value = _response(
        payload={"candidates": [{"content": {"parts": [{"text": "ok"}]}}]}
    )

    client.generate("Tell me about photosynthesis", "You are a friendly science tutor.", "k-123")

    session.post.assert_called_once()
    args, kwargs = session.post.call_args
    assert args[0].endswith("/models/gemini-test:generateContent")
    assert "params" not in kwargs
    assert kwargs["headers"]["x-goog-api-key"] == "k-123"
    assert "k-123" not in args[0]

    body = kwargs["json"]
    assert body["contents"][0]["parts"][0]["text"] == (
        "You are a friendly science tutor.\n\nTell me about photosynthesis"
    )
    assert [s["category"] for s in body["safetySettings"]] == list(HARM_CATEGORIES)
    assert {s["threshold"] for s in body["safetySettings"]} == {"BLOCK_LOW_AND_ABOVE"}
    assert body["generationConfig"] == {"temperature": 0.7, "maxOutputTokens": 512}


def test_success_returns_trimmed_text(client, session):
    session.post.return_value = _response(
        payload={"candidates": [{"content": {"parts": [{"text": "  Chlorophyll absorbs light.\n"}]}}]}
    )

    result = client.generate("q", "m", "k")

    assert result == GenerationSuccess(text="Chlorophyll absorbs light.")
    assert result.ok


def test_safety_block_reason_is_reported(client, session):
    session.post.return_value = _response(payload={"promptFeedback": {"blockReason": "SAFETY"}})

    result = client.generate("q", "m", "k")

    assert isinstance(result, GenerationFailure)
    assert "SAFETY" in result.reason
    assert result.reason == "blocked: SAFETY"


def test_empty_candidate_falls_through_to_block_reason(client, session):
    session.post.return_value = _response(
        payload={
            "candidates": [{"content": {"parts": [{"text": "   "}]}}],
            "promptFeedback": {"blockReason": "OTHER"},
        }
    )

    result = client.generate("q", "m", "k")

    assert isinstance(result, GenerationFailure)
    assert result.reason == "blocked: OTHER"


def test_unexpected_structure(client, session):
    session.post.return_value = _response(payload={"candidates": []})

    result = client.generate("q", "m", "k")

    assert isinstance(result, GenerationFailure)
    assert result.reason == UNEXPECTED_STRUCTURE


def test_http_500_carries_status_and_body(client, session):
    session.post.return_value = _response(
        status_code=500, text='{"error": {"code": 500, "message": "Internal error"}}'
    )

    result = client.generate("q", "m", "k")

    assert isinstance(result, GenerationFailure)
    assert "500" in result.reason
    assert "Internal error" in result.reason
    assert result.status_code == 500


def test_http_400_does_not_parse_body(client, session):
    response = _response(status_code=400, text="API key not valid")
    session.post.return_value = response

    result = client.generate("q", "m", "bad-key")

    assert isinstance(result, GenerationFailure)
    assert "400" in result.reason and "API key not valid" in result.reason
    response.json.assert_not_called()


def test_network_error_is_converted(client, session):
    session.post.side_effect = requests.exceptions.ConnectionError("connection refused")

    result = client.generate("q", "m", "k")

    assert isinstance(result, GenerationFailure)
    assert "connection refused" in result.reason
    assert result.status_code is None


def test_malformed_json_is_converted(client, session):
    response = _response()
    response.json.side_effect = ValueError("Expecting value")
    session.post.return_value = response

    result = client.generate("q", "m", "k")

    assert isinstance(result, GenerationFailure)
    assert "Expecting value" in result.reason


def test_unexpected_exception_never_escapes(client, session):
    session.post.side_effect = RuntimeError("boom")

    result = client.generate("q", "m", "k")

    assert isinstance(result, GenerationFailure)
    assert "boom" in result.reason


def test_network_error_never_exposes_api_key(client, session):
    key = "AIzaSyD-classroom-0123456789"
    session.post.side_effect = requests.exceptions.ConnectionError(
        "HTTPSConnectionPool(host='generativelanguage.googleapis.com', port=443): "
        "Max retries exceeded with url: /v1beta/models/gemini-test:generateContent"
        f"?key={key} (Caused by NewConnectionError('connection refused'))"
    )

    result = client.generate("q", "m", key)

    assert isinstance(result, GenerationFailure)
    assert key not in result.reason
    assert "[REDACTED]" in result.reason
    assert "Max retries exceeded" in result.reason


def test_error_body_echoing_api_key_is_masked(client, session):
    key = "AIzaSyD-classroom-0123456789"
    session.post.return_value = _response(status_code=400, text=f"API key not valid: {key}")

    result = client.generate("q", "m", key)

    assert key not in result.reason
    assert result.status_code == 400
