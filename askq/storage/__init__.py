"""
AskQ storage adapters.

Row and settings stores are narrow protocols; the pipeline never sees
which backend it is talking to.
"""

from __future__ import annotations

from askq.storage.memory import InMemoryRowStore, InMemorySettingsStore
from askq.storage.schema import ResolvedSchema, resolve_schema
from askq.storage.stores import RowStore, SettingsStore

__all__ = [
    "InMemoryRowStore",
    "InMemorySettingsStore",
    "ResolvedSchema",
    "RowStore",
    "SettingsStore",
    "resolve_schema",
]
