#!/usr/bin/env python3
"""
Keyed Locks - In-process mutual exclusion per key.

Serializes work on the same key (an answer id) while letting different
keys proceed concurrently. Lock entries are reference counted and dropped
once nobody holds or waits on them.
"""

import contextlib
import threading
from typing import Any, Dict, List


class KeyedLock:
    def __init__(self):
        self._guard = threading.Lock()
        self._entries: Dict[Any, List] = {}  # key -> [lock, holders_and_waiters]

    @contextlib.contextmanager
    def hold(self, key: Any):
        with self._guard:
            entry = self._entries.get(key)
            if entry is None:
                entry = [threading.Lock(), 0]
                self._entries[key] = entry
            entry[1] += 1

        lock = entry[0]
        lock.acquire()
        try:
            yield
        finally:
            lock.release()
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    self._entries.pop(key, None)

    def is_locked(self, key: Any) -> bool:
        with self._guard:
            entry = self._entries.get(key)
            return entry is not None and entry[0].locked()

    def __len__(self) -> int:
        with self._guard:
            return len(self._entries)
