"""
Per-key mutation locks.

Drive and user documents are read-modify-write. Within one process every
mutation of the same document runs under the lock for its id, so
complete -> select -> finalize sequences are linearizable per drive and
OTP resend/verify are serialized per user. Cross-process races are caught
by the optimistic `version` check in the repositories.
"""

import threading
from contextlib import contextmanager
from typing import Dict


class KeyedLock:
    """Hands out one lock per key; unused locks are dropped on release."""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[str, threading.Lock] = {}
        self._waiters: Dict[str, int] = {}

    @contextmanager
    def hold(self, key: str):
        with self._guard:
            lock = self._locks.setdefault(key, threading.Lock())
            self._waiters[key] = self._waiters.get(key, 0) + 1
        lock.acquire()
        try:
            yield
        finally:
            lock.release()
            with self._guard:
                self._waiters[key] -= 1
                if self._waiters[key] == 0:
                    del self._waiters[key]
                    del self._locks[key]

    def __len__(self) -> int:
        return len(self._locks)
