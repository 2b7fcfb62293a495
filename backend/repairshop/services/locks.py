import threading
from contextlib import contextmanager
from typing import Dict, Iterator, List


class OwnerLocks:
    """
    One mutex per owner id, created on demand and dropped when nobody holds or waits on it.
    Different owners never share a lock.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._entries: Dict[str, List] = {}  # owner_id -> [lock, holders]

    @contextmanager
    def hold(self, owner_id: str) -> Iterator[None]:
        with self._guard:
            entry = self._entries.setdefault(owner_id, [threading.Lock(), 0])
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    self._entries.pop(owner_id, None)

    def __len__(self) -> int:
        with self._guard:
            return len(self._entries)
