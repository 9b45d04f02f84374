"""Contention simulation: worker threads sharing one pool.

The pool is built once and passed to every worker; there is no global
instance. Each worker leases an item `rounds` times and holds it for
`hold_time` seconds.
"""

import threading
import time
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .config import PoolConfig
from .history import TrackedPool
from .pool import BoundedPool, PoolError
from .resource import Resource, make_resources


@dataclass
class WorkerResult:
    """What one worker did."""
    name: str
    items: List[Resource] = field(default_factory=list)  # items borrowed, in order
    wait_time: float = 0.0  # total seconds spent blocked in acquire
    error: Optional[PoolError] = None


def worker_loop(pool: TrackedPool[Resource], result: WorkerResult, rounds: int,
                hold_time: float, timeout: Optional[float] = None) -> None:
    """Lease an item `rounds` times. Pool errors are stored on `result`."""
    try:
        for _ in range(rounds):
            start = time.perf_counter()
            with pool.lease(result.name, timeout=timeout) as item:
                result.wait_time += time.perf_counter() - start
                result.items.append(item)
                time.sleep(hold_time)
    except PoolError as e:
        result.error = e


def run_simulation(config: PoolConfig) -> Tuple[TrackedPool[Resource], List[WorkerResult]]:
    """
    Run `config.num_workers` threads against a pool of `config.capacity` resources.

    Returns:
        The tracked pool (stats and history) and one WorkerResult per worker.
    """
    pool = TrackedPool(BoundedPool(make_resources(config.capacity), check_releases=config.check_releases))
    results = [WorkerResult(name=f"worker-{i}") for i in range(config.num_workers)]

    threads = [
        threading.Thread(
            target=worker_loop,
            args=(pool, result, config.rounds, config.hold_time, config.acquire_timeout),
            name=result.name,
        )
        for result in results
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    return pool, results
