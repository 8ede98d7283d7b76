"""Pydantic request/response models for the AskQ trigger API."""

from __future__ import annotations

from pydantic import BaseModel, Field


class FormSubmitRequest(BaseModel):
    """Form-submission event: the sheet row the form just appended."""

    row: int = Field(..., ge=2, description="1-based sheet row; row 1 is the header")


class FormSubmitResponse(BaseModel):
    row: int
    processed: bool
    status: str | None = None
    error: str | None = None


class SendSelectedResponse(BaseModel):
    notice: str
    sent: list[int]
    failed: list[int]
    skipped: list[int]
    error: str | None = None
