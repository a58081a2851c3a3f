"""Per-identity locks for the Ledger Store."""

import threading
from contextlib import contextmanager


class KeyedLocks:
    """Hands out one re-entrant lock per key, dropping it once nobody holds or waits on it."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._entries: dict[tuple, list] = {}  # key -> [lock, users]

    @contextmanager
    def hold(self, *key):
        key = tuple(str(part) for part in key)
        with self._guard:
            entry = self._entries.get(key)
            if entry is None:
                entry = self._entries[key] = [threading.RLock(), 0]
            entry[1] += 1

        try:
            with entry[0]:
                yield
        finally:
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._entries[key]

    def __len__(self) -> int:
        with self._guard:
            return len(self._entries)
