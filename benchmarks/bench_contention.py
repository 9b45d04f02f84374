"""Benchmark: acquire/release throughput under thread contention.

Run with:
  python -m benchmarks.bench_contention
  python -m benchmarks.bench_contention --capacity 4 --threads 1 2 4 8 16 --ops 20000
"""

import argparse
import threading
import time
from dataclasses import dataclass
from typing import List

from tinypool.core.pool import BoundedPool
from tinypool.core.resource import make_resources


@dataclass
class ContentionResult:
    num_threads: int
    total_ops: int
    elapsed_s: float
    waits: int
    high_water: int

    @property
    def ops_per_sec(self) -> float:
        return self.total_ops / self.elapsed_s if self.elapsed_s > 0 else 0.0


def run_contention(capacity: int, num_threads: int, ops_per_thread: int) -> ContentionResult:
    pool = BoundedPool(make_resources(capacity))
    barrier = threading.Barrier(num_threads + 1)

    def worker():
        barrier.wait()
        for _ in range(ops_per_thread):
            item = pool.acquire()
            pool.release(item)

    threads = [threading.Thread(target=worker) for _ in range(num_threads)]
    for t in threads:
        t.start()

    barrier.wait()
    start = time.perf_counter()
    for t in threads:
        t.join()
    elapsed = time.perf_counter() - start

    stats = pool.get_stats()
    return ContentionResult(
        num_threads=num_threads,
        total_ops=num_threads * ops_per_thread,
        elapsed_s=elapsed,
        waits=stats.waits,
        high_water=stats.high_water,
    )


def print_results(capacity: int, results: List[ContentionResult]) -> None:
    print(f"{'Threads':>8} {'Ops':>10} {'Time (s)':>10} {'Ops/s':>12} {'Waits':>8} {'Peak':>6}")
    print("-" * 60)
    for r in results:
        print(f"{r.num_threads:>8} {r.total_ops:>10} {r.elapsed_s:>10.3f} {r.ops_per_sec:>12.0f} "
              f"{r.waits:>8} {r.high_water:>3}/{capacity}")


def main():
    parser = argparse.ArgumentParser(description="Pool contention benchmark")
    parser.add_argument("--capacity", type=int, default=4)
    parser.add_argument("--threads", type=int, nargs="+", default=[1, 2, 4, 8, 16])
    parser.add_argument("--ops", type=int, default=10000, help="acquire/release pairs per thread")
    args = parser.parse_args()

    print("=" * 60)
    print("tinypool Contention Benchmark")
    print("=" * 60)
    print(f"Capacity: {args.capacity}, ops per thread: {args.ops}\n")

    results = [run_contention(args.capacity, n, args.ops) for n in args.threads]
    print_results(args.capacity, results)


if __name__ == "__main__":
    main()
