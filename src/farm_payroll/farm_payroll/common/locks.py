from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Dict, Hashable, Iterator


class KeyedLock:
    """Registry of one mutex per key (e.g. per worker id).

    Serializes read-validate-write sequences on the same worker within a
    process. Locks are created lazily; :meth:`discard` drops the lock of a
    key that is gone for good (a deleted worker).
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[Hashable, threading.Lock] = {}

    def _lock_for(self, key: Hashable) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._locks[key] = lock
            return lock

    def __contains__(self, key: Hashable) -> bool:
        with self._guard:
            return key in self._locks

    def discard(self, key: Hashable) -> None:
        with self._guard:
            self._locks.pop(key, None)

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        lock = self._lock_for(key)
        with lock:
            yield
