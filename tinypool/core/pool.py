"""Bounded object pool for reusing expensive-to-construct objects.

A fixed set of items is handed out to callers and reclaimed on release.
Two primitives guard the pool:

- gate: a counting semaphore initialized to capacity. acquire() waits on it,
  so at most `capacity` items are ever checked out at once.
- mutex: protects the list of available items and the owned-set.

Example:
    pool = BoundedPool([conn_a, conn_b])

    conn = pool.acquire()
    try:
        conn.send(...)
    finally:
        pool.release(conn)

    with pool.lease(timeout=1.0) as conn:
        conn.send(...)
"""

import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Dict, Generic, Iterable, Iterator, List, Optional, TypeVar

T = TypeVar('T')


class PoolError(RuntimeError):
    """Base class for pool errors."""


class PoolTimeout(PoolError):
    """No item became available before the deadline."""


class InvalidRelease(PoolError, ValueError):
    """Released item is not currently checked out from this pool."""


@dataclass
class PoolStats:
    """Point-in-time snapshot of pool counters."""
    capacity: int
    available: int
    checked_out: int
    acquires: int = 0
    releases: int = 0
    timeouts: int = 0
    waits: int = 0       # acquires that found the pool exhausted
    high_water: int = 0  # max items checked out at once


class BoundedPool(Generic[T]):
    """
    Thread-safe pool with a fixed capacity.

    Capacity is the number of items passed at construction and never changes.
    acquire() blocks while every item is checked out; release() hands the
    item back and wakes one waiter. Waiters are not served in FIFO order.

    Args:
        items: Initial items, all available. Must not be empty.
        check_releases: If True, release() rejects items that are not
            currently checked out (never acquired, or released twice).
    """

    def __init__(self, items: Iterable[T], check_releases: bool = True):
        self._available: List[T] = list(items)
        if not self._available:
            raise ValueError("Pool needs at least one item")

        self._capacity = len(self._available)
        self._check_releases = check_releases
        self._gate = threading.Semaphore(self._capacity)
        self._lock = threading.Lock()
        self._checked_out: Dict[int, T] = {}  # id(item) -> item

        self._acquires = 0
        self._releases = 0
        self._timeouts = 0
        self._waits = 0
        self._high_water = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    def acquire(self, timeout: Optional[float] = None) -> T:
        """
        Take an item, blocking until one is available.

        Args:
            timeout: Seconds to wait. None waits forever.

        Raises:
            PoolTimeout: if no item was released within `timeout`.
        """
        if timeout is not None and timeout < 0:
            raise ValueError(f"timeout must be non-negative, got {timeout}")

        if not self._gate.acquire(blocking=False):
            with self._lock:
                self._waits += 1
            if not self._gate.acquire(timeout=timeout):
                with self._lock:
                    self._timeouts += 1
                raise PoolTimeout(f"No item available after {timeout}s (capacity={self._capacity})")

        return self._take()

    def try_acquire(self) -> Optional[T]:
        """Take an item without blocking. Returns None if the pool is exhausted."""
        if not self._gate.acquire(blocking=False):
            return None
        return self._take()

    def release(self, item: T) -> None:
        """
        Return an item to the pool and wake one blocked acquire().

        The caller must not use `item` afterwards without acquiring it again.

        Raises:
            InvalidRelease: if check_releases is on and `item` is not
                currently checked out. Pool state is left untouched.
        """
        with self._lock:
            if self._check_releases:
                if id(item) not in self._checked_out:
                    raise InvalidRelease(f"Item {item!r} is not checked out from this pool")
                del self._checked_out[id(item)]
            self._available.append(item)
            self._releases += 1
        self._gate.release()

    @contextmanager
    def lease(self, timeout: Optional[float] = None) -> Iterator[T]:
        """Acquire an item for the duration of a `with` block."""
        item = self.acquire(timeout=timeout)
        try:
            yield item
        finally:
            self.release(item)

    def num_available(self) -> int:
        """Number of items ready to be acquired."""
        with self._lock:
            return len(self._available)

    def num_checked_out(self) -> int:
        """Number of items currently held by callers."""
        with self._lock:
            return self._capacity - len(self._available)

    def is_checked_out(self, item: T) -> bool:
        """Check if `item` is currently held by a caller (requires check_releases)."""
        with self._lock:
            return id(item) in self._checked_out

    def get_stats(self) -> PoolStats:
        with self._lock:
            available = len(self._available)
            return PoolStats(
                capacity=self._capacity,
                available=available,
                checked_out=self._capacity - available,
                acquires=self._acquires,
                releases=self._releases,
                timeouts=self._timeouts,
                waits=self._waits,
                high_water=self._high_water,
            )

    def _take(self) -> T:
        # Caller already holds one gate permit, so the list is never empty here
        with self._lock:
            item = self._available.pop()
            if self._check_releases:
                self._checked_out[id(item)] = item
            self._acquires += 1
            self._high_water = max(self._high_water, self._capacity - len(self._available))
            return item


ObjectPool = BoundedPool
