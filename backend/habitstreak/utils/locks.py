"""
Lock Utilities - Per-key locks for serializing work on one habit or user
Entries exist only while some thread holds or waits on the key.
"""
from contextlib import contextmanager
from typing import Dict, Iterator, List
import threading


class KeyedLock:
    """Mutual exclusion per string key, with entries dropped after the last holder releases"""

    def __init__(self):
        self._guard = threading.Lock()
        # key -> [lock, number of threads holding or waiting]
        self._entries: Dict[str, List] = {}

    def __len__(self) -> int:
        with self._guard:
            return len(self._entries)

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        """
        Hold the lock for key for the duration of the with block

        Args:
            key: Habit or user ID to serialize on
        """
        with self._guard:
            entry = self._entries.setdefault(key, [threading.Lock(), 0])
            entry[1] += 1

        try:
            with entry[0]:
                yield
        finally:
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._entries[key]
