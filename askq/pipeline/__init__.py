"""Submission processing and batch email dispatch."""

from __future__ import annotations

from askq.pipeline.dispatcher import BatchDispatcher, DispatchSummary
from askq.pipeline.processor import ProcessingOutcome, SubmissionProcessor

__all__ = ["BatchDispatcher", "DispatchSummary", "ProcessingOutcome", "SubmissionProcessor"]
