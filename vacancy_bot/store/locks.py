"""Per-key lock registry."""

import threading
from typing import Dict, Hashable


class KeyedLocks:
    """Hands out one re-entrant lock per key.

    Operations on the same key are serialized; different keys never contend
    beyond the short registry lookup.
    """

    def __init__(self):
        self._locks: Dict[Hashable, threading.RLock] = {}
        self._registry_lock = threading.Lock()

    def __call__(self, key: Hashable) -> threading.RLock:
        with self._registry_lock:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.RLock()
                self._locks[key] = lock
            return lock

    def __len__(self) -> int:
        with self._registry_lock:
            return len(self._locks)
