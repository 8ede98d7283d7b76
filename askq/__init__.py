"""AskQ - Classroom prompt relay to Gemini with teacher-controlled email delivery"""

from __future__ import annotations

__version__ = "0.1.0"


# Lazy imports so lightweight modules (config, errors) load without HTTP/Sheets deps
def __getattr__(name: str):
    """
    Lazy imports to avoid loading heavy dependencies when only importing lightweight modules.
    """
    if name == "SubmissionProcessor":
        from askq.pipeline.processor import SubmissionProcessor

        return SubmissionProcessor

    if name == "BatchDispatcher":
        from askq.pipeline.dispatcher import BatchDispatcher

        return BatchDispatcher

    if name == "GeminiClient":
        from askq.llm.gemini import GeminiClient

        return GeminiClient

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)


__all__ = [
    "BatchDispatcher",
    "GeminiClient",
    "SubmissionProcessor",
]
