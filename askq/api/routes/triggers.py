"""Trigger endpoints for AskQ.

- POST /form-submit - run the submission pipeline for the row a form just added
- POST /send-selected - run one Send Selected Answers pass
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, HTTPException

from askq.api.models import FormSubmitRequest, FormSubmitResponse, SendSelectedResponse
from askq.observability.telemetry import log_event

if TYPE_CHECKING:
    from askq.wiring import Services

router = APIRouter(tags=["triggers"])

# Module-level storage for dependencies injected at startup
_services: Services | None = None


def set_services(services: Services | None) -> None:
    """Inject the wired services.

    Side Effects:
        - Sets module-level _services variable
    """
    global _services
    _services = services


def _require_services() -> Services:
    if _services is None:
        raise HTTPException(status_code=503, detail="Services not initialized")
    return _services


@router.post("/form-submit", response_model=FormSubmitResponse)
def form_submit(event: FormSubmitRequest) -> FormSubmitResponse:
    """Process one submission. Failures are reported in the body, not as 5xx."""
    services = _require_services()
    outcome = services.processor.process(event.row)
    log_event(
        "api.form_submit",
        row=event.row,
        status=outcome.status.value if outcome.status else None,
    )
    return FormSubmitResponse(
        row=outcome.row_number,
        processed=not outcome.aborted,
        status=outcome.status.value if outcome.status else None,
        error=outcome.error,
    )


@router.post("/send-selected", response_model=SendSelectedResponse)
def send_selected() -> SendSelectedResponse:
    services = _require_services()
    summary = services.dispatcher.send_selected()
    return SendSelectedResponse(
        notice=summary.notice,
        sent=summary.sent,
        failed=summary.failed,
        skipped=summary.skipped,
        error=summary.error,
    )
