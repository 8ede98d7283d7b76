"""FastAPI server for AskQ form-submission triggers"""

from __future__ import annotations

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from askq.api.routes import triggers
from askq.api.routes.health import router as health_router
from askq.api.routes.triggers import router as triggers_router
from askq.config import APP_VERSION
from askq.observability.logging import get_logger
from askq.observability.telemetry import counter
from askq.wiring import Services

logger = get_logger(__name__)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Return field names only; the payload itself may carry student data.

    Side Effects:
        - Increments api.validation_errors counter
    """
    logger.warning("Validation error on %s: %d error(s)", request.url.path, len(exc.errors()))
    counter("api.validation_errors")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "detail": "Invalid request format. Please check your request and try again.",
            "error_count": len(exc.errors()),
            "invalid_fields": [str(err["loc"][-1]) for err in exc.errors()],
        },
    )


def create_app(services: Services | None = None) -> FastAPI:
    """
    Build the API around a wired Services graph.

    ``services`` may be None for a bare app (health reports "starting" and
    trigger routes answer 503 until ``triggers.set_services`` is called).
    """
    app = FastAPI(title="AskQ API", version=APP_VERSION)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.include_router(health_router)
    app.include_router(triggers_router)

    triggers.set_services(services)
    if services is not None:
        logger.info(
            "AskQ API ready (responses sheet: %s)", services.config.responses_sheet
        )
    return app
