"""Process-wide locks serializing balance writes per treasury"""

import threading
from contextlib import contextmanager
from typing import Iterable, Iterator


class TreasuryLockTimeout(Exception):
    """A treasury lock could not be acquired in time."""


class TreasuryLocks:
    """One lock per treasury id, shared by every session of the process.

    Database row locks and the optimistic version column still guard against
    writers in other processes; this registry only keeps threads of one process
    from racing each other into version conflicts. An id stays registered only
    while some thread holds or waits for its lock.
    """

    _guard = threading.Lock()
    # treasury id -> [lock, number of threads holding or waiting for it]
    _locks: dict[int, list] = {}

    @classmethod
    def _checkout(cls, treasury_id: int) -> threading.Lock:
        with cls._guard:
            entry = cls._locks.get(treasury_id)
            if entry is None:
                entry = cls._locks[treasury_id] = [threading.Lock(), 0]
            entry[1] += 1
            return entry[0]

    @classmethod
    def _checkin(cls, treasury_id: int) -> None:
        with cls._guard:
            entry = cls._locks[treasury_id]
            entry[1] -= 1
            if entry[1] == 0:
                del cls._locks[treasury_id]

    @classmethod
    def registered(cls) -> set[int]:
        with cls._guard:
            return set(cls._locks)

    @classmethod
    @contextmanager
    def hold(cls, treasury_ids: Iterable[int], timeout: float) -> Iterator[None]:
        """Acquire the locks of all given treasuries in ascending id order."""
        checked_out: list[int] = []
        acquired: list[threading.Lock] = []
        try:
            for treasury_id in sorted(set(treasury_ids)):
                lock = cls._checkout(treasury_id)
                checked_out.append(treasury_id)
                if not lock.acquire(timeout=timeout):
                    raise TreasuryLockTimeout(f"Treasury id={treasury_id}")
                acquired.append(lock)
            yield
        finally:
            for lock in reversed(acquired):
                lock.release()
            for treasury_id in checked_out:
                cls._checkin(treasury_id)
