"""Process-wide logging setup for AskQ.

Every module calls ``get_logger(__name__)``; the first call attaches a
single stream handler to the root logger. The CLI may override the level
once at startup with ``configure_logging``.
"""

from __future__ import annotations

import logging
import os
from typing import Final

_HANDLER_ATTACHED: bool = False
_LEVEL_OVERRIDE: int | None = None
_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _resolve_level() -> int:
    if _LEVEL_OVERRIDE is not None:
        return _LEVEL_OVERRIDE
    level_name = os.getenv("ASKQ_LOG_LEVEL", "INFO").upper()
    return getattr(logging, level_name, logging.INFO)


def _attach_handler(level: int) -> None:
    global _HANDLER_ATTACHED

    root = logging.getLogger()
    if not _HANDLER_ATTACHED:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        root.addHandler(handler)
        _HANDLER_ATTACHED = True
    root.setLevel(level)


def configure_logging(level: str | int | None = None) -> None:
    """Pin the log level for the whole process (``None`` re-reads ASKQ_LOG_LEVEL)."""
    global _LEVEL_OVERRIDE

    if isinstance(level, str):
        _LEVEL_OVERRIDE = getattr(logging, level.upper(), logging.INFO)
    else:
        _LEVEL_OVERRIDE = level
    _attach_handler(_resolve_level())
    logging.getLogger("askq").setLevel(_resolve_level())


def get_logger(name: str) -> logging.Logger:
    """Return a module logger configured with the shared stream handler."""
    if not _HANDLER_ATTACHED:
        _attach_handler(_resolve_level())
    return logging.getLogger(name)
