"""
Per-row mutual exclusion for booking and table mutations

One lock per (entity, id). Callers that need both rows take the booking
lock first, then the table lock. A row's lock lives only while some caller
holds or waits on it.
"""

from contextlib import contextmanager
from threading import Lock
from typing import Dict, Iterator, List, Tuple

BOOKING = "booking"
TABLE = "table"

_LOCK_ORDER = {BOOKING: 0, TABLE: 1}


class _RowLock:
    __slots__ = ("lock", "users")

    def __init__(self):
        self.lock = Lock()
        self.users = 0


class RowLockRegistry:
    """Hands out one lock per row, created on first use and dropped when idle"""

    def __init__(self):
        self._locks: Dict[Tuple[str, int], _RowLock] = {}
        self._lock = Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._locks)

    def lock_for(self, entity: str, row_id: int) -> Lock:
        """The lock currently guarding a row, or a fresh one if nobody holds it"""
        with self._lock:
            entry = self._locks.get((entity, row_id))
            return entry.lock if entry is not None else Lock()

    def _checkout(self, key: Tuple[str, int]) -> _RowLock:
        with self._lock:
            entry = self._locks.get(key)
            if entry is None:
                entry = self._locks[key] = _RowLock()
            entry.users += 1
            return entry

    def _checkin(self, key: Tuple[str, int], entry: _RowLock) -> None:
        with self._lock:
            entry.users -= 1
            if entry.users == 0:
                del self._locks[key]

    @contextmanager
    def hold(self, *rows: Tuple[str, int]) -> Iterator[None]:
        """Acquire the locks for ``rows`` in booking-before-table order"""
        ordered = sorted(set(rows), key=lambda row: (_LOCK_ORDER[row[0]], row[1]))
        entries: List[Tuple[Tuple[str, int], _RowLock]] = [(key, self._checkout(key)) for key in ordered]
        acquired = []
        try:
            for key, entry in entries:
                entry.lock.acquire()
                acquired.append(entry)
            yield
        finally:
            for entry in reversed(acquired):
                entry.lock.release()
            for key, entry in entries:
                self._checkin(key, entry)


# Shared by every coordinator in the process
row_locks = RowLockRegistry()
