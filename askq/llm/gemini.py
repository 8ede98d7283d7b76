"""
Gemini REST client.

One synchronous ``generateContent`` call per student prompt, authenticated
with an API key. The public entry point ``generate`` is a boundary: HTTP
errors, safety blocks, malformed bodies and network failures all come back
as a GenerationFailure, never as an exception.

Known limitation: the master prompt and the student prompt are joined as-is,
with no escaping, so a student can address the model directly.
"""

from __future__ import annotations

from typing import Any

import requests

from askq.config import AskQConfig
from askq.errors import RemoteServiceError, TransportError
from askq.llm.types import GenerationFailure, GenerationResult, GenerationSuccess
from askq.observability.logging import get_logger
from askq.observability.telemetry import counter, log_event, time_block
from askq.utils.error_sanitizer import sanitize_error_message
from askq.utils.redaction import preview

logger = get_logger(__name__)

PROMPT_DELIMITER = "\n\n"

HARM_CATEGORIES = (
    "HARM_CATEGORY_HARASSMENT",
    "HARM_CATEGORY_HATE_SPEECH",
    "HARM_CATEGORY_SEXUALLY_EXPLICIT",
    "HARM_CATEGORY_DANGEROUS_CONTENT",
)
SAFETY_THRESHOLD = "BLOCK_LOW_AND_ABOVE"

UNEXPECTED_STRUCTURE = "unexpected response structure"


def compose_prompt(master_prompt: str, prompt_text: str) -> str:
    """Master prompt, delimiter, student prompt. No sanitization."""
    return f"{master_prompt}{PROMPT_DELIMITER}{prompt_text}"


def build_request_body(full_prompt: str, temperature: float, max_output_tokens: int) -> dict[str, Any]:
    return {
        "contents": [{"parts": [{"text": full_prompt}]}],
        "safetySettings": [
            {"category": category, "threshold": SAFETY_THRESHOLD} for category in HARM_CATEGORIES
        ],
        "generationConfig": {
            "temperature": temperature,
            "maxOutputTokens": max_output_tokens,
        },
    }


def extract_text(payload: Any) -> str:
    """
    Pull the answer out of a 2xx body.

    Returns:
        Trimmed text of the first candidate that has any

    Raises:
        RemoteServiceError: "blocked: <reason>" for a safety block, otherwise
            "unexpected response structure"
    """
    if not isinstance(payload, dict):
        raise RemoteServiceError(UNEXPECTED_STRUCTURE)

    for candidate in payload.get("candidates") or []:
        if not isinstance(candidate, dict):
            continue
        content = candidate.get("content") or {}
        parts = content.get("parts") if isinstance(content, dict) else None
        for part in parts or []:
            text = part.get("text") if isinstance(part, dict) else None
            if isinstance(text, str) and text.strip():
                return text.strip()

    feedback = payload.get("promptFeedback")
    if isinstance(feedback, dict) and feedback.get("blockReason"):
        raise RemoteServiceError(f"blocked: {feedback['blockReason']}")

    raise RemoteServiceError(UNEXPECTED_STRUCTURE)


class GeminiClient:
    """Thin synchronous client for the Generative Language API."""

    def __init__(self, config: AskQConfig, session: requests.Session | None = None):
        self.model = config.gemini_model
        self.base_url = config.gemini_base_url.rstrip("/")
        self.temperature = config.temperature
        self.max_output_tokens = config.max_output_tokens
        self.timeout = config.http_timeout_seconds
        self.session = session or requests.Session()

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    def _post(self, body: dict[str, Any], api_key: str) -> requests.Response:
        try:
            return self.session.post(
                self.endpoint,
                json=body,
                headers={"Content-Type": "application/json", "x-goog-api-key": api_key},
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise TransportError(f"Request to Gemini failed: {e}") from e

    def generate(self, prompt_text: str, master_prompt: str, api_key: str) -> GenerationResult:
        """
        Generate a response for one student prompt.

        Args:
            prompt_text: Student-authored prompt
            master_prompt: Teacher instruction prefix
            api_key: Gemini API key

        Returns:
            GenerationSuccess with trimmed text, or GenerationFailure with a reason

        Side Effects:
            - One HTTP POST to the Gemini endpoint
            - Increments gemini.call_ok / gemini.call_error counters
        """
        full_prompt = compose_prompt(master_prompt, prompt_text)
        body = build_request_body(full_prompt, self.temperature, self.max_output_tokens)
        logger.debug("Gemini request (model=%s): %s", self.model, preview(full_prompt))

        try:
            with time_block("gemini.generate"):
                response = self._post(body, api_key)

            if not 200 <= response.status_code < 300:
                reason = f"API request failed with status {response.status_code}: {response.text}"
                return self._failure(reason, api_key, response.status_code)

            try:
                payload = response.json()
            except ValueError as e:
                return self._failure(
                    f"Invalid JSON in Gemini response: {e}", api_key, response.status_code
                )

            text = extract_text(payload)

        except RemoteServiceError as e:
            return self._failure(str(e), api_key, 200)
        except TransportError as e:
            return self._failure(str(e), api_key)
        except Exception as e:
            logger.exception("Unexpected error calling Gemini")
            return self._failure(f"Unexpected error calling Gemini: {e}", api_key)

        counter("gemini.call_ok")
        log_event("gemini.call_ok", model=self.model, chars=len(text))
        return GenerationSuccess(text=text)

    def _failure(
        self, reason: str, api_key: str, status_code: int | None = None
    ) -> GenerationFailure:
        reason = sanitize_error_message(reason, secrets=[api_key])
        counter("gemini.call_error")
        log_event("gemini.call_error", model=self.model, status=status_code, reason=reason[:200])
        return GenerationFailure(reason=reason, status_code=status_code)
