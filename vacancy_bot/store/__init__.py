"""Keyed stores for user filters and dialog sessions.

Public API:
    - FilterStore: per-chat Filter objects, persisted to a JSON file
    - DialogSessionStore: volatile per-chat dialog state
    - KeyedLocks: per-key lock registry shared by both stores

Example usage:
    >>> from vacancy_bot.store import FilterStore
    >>> store = FilterStore()  # in-memory; pass a path to persist
    >>> store.update_city(42, "Казань").city
    'Казань'
"""

from .exceptions import StoreError, StoreLoadError, StoreWriteError
from .filter_store import FilterStore, serialize_filter
from .locks import KeyedLocks
from .session_store import DialogSessionStore

__all__ = [
    "FilterStore",
    "DialogSessionStore",
    "KeyedLocks",
    "serialize_filter",
    "StoreError",
    "StoreLoadError",
    "StoreWriteError",
]
