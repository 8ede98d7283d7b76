"""Health check endpoint for the AskQ API.

Reports configuration readiness only: secrets are checked for presence,
never returned, and no outbound call is made.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter

from askq.api.routes import triggers
from askq.config import APP_VERSION, get_config_status

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check() -> dict[str, Any]:
    services = triggers._services
    if services is None:
        return {
            "status": "starting",
            "service": "AskQ API",
            "version": APP_VERSION,
            "timestamp": datetime.now(UTC).isoformat(),
        }

    config_status = get_config_status(services.config, services.provider.api_key_present())
    ready = config_status["api_key_present"] and config_status["smtp_enabled"]

    return {
        "status": "healthy" if ready else "degraded",
        "service": "AskQ API",
        "version": APP_VERSION,
        "timestamp": datetime.now(UTC).isoformat(),
        "config": config_status,
    }
