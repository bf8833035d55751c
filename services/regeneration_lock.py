# services/regeneration_lock.py
import threading
import logging
from contextlib import contextmanager
from typing import Dict, Hashable, Iterator, List

logger = logging.getLogger(__name__)


class KeyedLock:
    """
    One lock per key, created on demand. An entry lives while at least one
    caller holds or waits on it and is dropped on the last release, so only
    in-flight keys take memory and a held lock is never replaced.
    """

    def __init__(self):
        # key -> [lock, number of holders and waiters]
        self._entries: Dict[Hashable, List] = {}
        self._guard = threading.Lock()

    def _acquire_entry(self, key: Hashable) -> threading.Lock:
        with self._guard:
            entry = self._entries.get(key)
            if entry is None:
                entry = [threading.Lock(), 0]
                self._entries[key] = entry
            entry[1] += 1
            return entry[0]

    def _release_entry(self, key: Hashable) -> None:
        with self._guard:
            entry = self._entries[key]
            entry[1] -= 1
            if entry[1] == 0:
                del self._entries[key]

    @contextmanager
    def hold(self, *key: Hashable) -> Iterator[None]:
        lock = self._acquire_entry(key)
        try:
            if lock.locked():
                logger.info(f"Waiting for in-flight regeneration of {key}")
            with lock:
                yield
        finally:
            self._release_entry(key)

    def __len__(self) -> int:
        with self._guard:
            return len(self._entries)
