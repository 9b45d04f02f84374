"""Checkout history layered on top of a pool.

The pool itself only moves items between "available" and "checked out".
Who borrowed what, and how often, is recorded here by wrapping the pool:

    pool = TrackedPool(BoundedPool(resources))

    with pool.lease("worker-1") as res:
        ...

    for line in pool.history.summary():
        print(line)

History updates take their own lock, never the pool's.
"""

import threading
import time
from collections import Counter
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, Iterator, List, Optional

from .pool import BoundedPool, PoolStats, T


@dataclass
class CheckoutRecord:
    """One borrow of one item."""
    borrower: str
    item_key: str
    acquired_at: float
    released_at: Optional[float] = None

    def is_open(self) -> bool:
        return self.released_at is None


class CheckoutHistory:
    """
    Thread-safe log of checkouts.

    Args:
        key: Maps an item to the label it is recorded under (default: repr).
    """

    def __init__(self, key: Callable[[Any], str] = repr):
        self.key = key
        self._lock = threading.Lock()
        self._records: List[CheckoutRecord] = []
        self._open: Dict[str, CheckoutRecord] = {}  # item_key -> open record

    def on_acquire(self, borrower: str, item: Any) -> None:
        record = CheckoutRecord(borrower=borrower, item_key=self.key(item), acquired_at=time.time())
        with self._lock:
            self._records.append(record)
            self._open[record.item_key] = record

    def on_release(self, borrower: str, item: Any) -> None:
        """Close the open record for `item`, whoever hands it back."""
        item_key = self.key(item)
        with self._lock:
            record = self._open.pop(item_key, None)
            if record is not None:
                record.released_at = time.time()

    def records(self) -> List[CheckoutRecord]:
        """All records in acquisition order."""
        with self._lock:
            return list(self._records)

    def borrow_count(self, item: Any) -> int:
        item_key = self.key(item)
        with self._lock:
            return sum(1 for r in self._records if r.item_key == item_key)

    def borrowers(self, item: Any) -> List[str]:
        """Borrowers of `item`, in order, with repeats."""
        item_key = self.key(item)
        with self._lock:
            return [r.borrower for r in self._records if r.item_key == item_key]

    def usage_by_borrower(self) -> Dict[str, int]:
        with self._lock:
            return dict(Counter(r.borrower for r in self._records))

    def distinct_items(self) -> List[str]:
        """Keys of every item ever checked out, in first-seen order."""
        with self._lock:
            return list(dict.fromkeys(r.item_key for r in self._records))

    def summary(self) -> List[str]:
        """One line per item: how many times it was borrowed and by whom."""
        with self._lock:
            by_item: Dict[str, List[str]] = {}
            for r in self._records:
                by_item.setdefault(r.item_key, []).append(r.borrower)
        return [
            f"{item_key} checked out {len(names)} time(s): {', '.join(names)}"
            for item_key, names in by_item.items()
        ]


class TrackedPool(Generic[T]):
    """
    Pool decorator that records every checkout in a CheckoutHistory.

    Same operations as BoundedPool, with a borrower name on acquire/release.
    """

    def __init__(self, pool: BoundedPool[T], history: Optional[CheckoutHistory] = None):
        self.pool = pool
        self.history = history if history is not None else CheckoutHistory()

    @property
    def capacity(self) -> int:
        return self.pool.capacity

    def acquire(self, borrower: str, timeout: Optional[float] = None) -> T:
        item = self.pool.acquire(timeout=timeout)
        try:
            self.history.on_acquire(borrower, item)
        except BaseException:
            self.pool.release(item)
            raise
        return item

    def release(self, borrower: str, item: T) -> None:
        # Close the record first; once released the item may be re-borrowed immediately
        try:
            self.history.on_release(borrower, item)
        finally:
            self.pool.release(item)

    @contextmanager
    def lease(self, borrower: str, timeout: Optional[float] = None) -> Iterator[T]:
        item = self.acquire(borrower, timeout=timeout)
        try:
            yield item
        finally:
            self.release(borrower, item)

    def num_available(self) -> int:
        return self.pool.num_available()

    def num_checked_out(self) -> int:
        return self.pool.num_checked_out()

    def get_stats(self) -> PoolStats:
        return self.pool.get_stats()
