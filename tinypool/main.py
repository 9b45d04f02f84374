"""TinyPool CLI - run worker threads against a bounded object pool."""

import argparse
import sys

from tinypool.core.config import PoolConfig
from tinypool.core.simulation import run_simulation


def main() -> None:
    parser = argparse.ArgumentParser(description="TinyPool - bounded object pool contention demo")
    parser.add_argument("--capacity", type=int, default=3, help="Number of pooled resources")
    parser.add_argument("--workers", type=int, default=7, help="Number of worker threads")
    parser.add_argument("--rounds", type=int, default=1, help="Acquire/release cycles per worker")
    parser.add_argument("--hold-time", type=float, default=0.01, help="Seconds each worker holds its resource")
    parser.add_argument("--timeout", type=float, default=None,
                        help="Acquire timeout in seconds (blocks forever if not set)")
    parser.add_argument("--no-check-releases", action="store_true", help="Skip ownership checks on release")
    args = parser.parse_args()

    try:
        config = PoolConfig(
            capacity=args.capacity,
            acquire_timeout=args.timeout,
            check_releases=not args.no_check_releases,
            num_workers=args.workers,
            rounds=args.rounds,
            hold_time=args.hold_time,
        )
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)

    pool, results = run_simulation(config)

    for result in results:
        items = ", ".join(repr(item) for item in result.items)
        print(f"{result.name}: [{items}] waited {result.wait_time * 1000:.1f} ms")

    print()
    for line in pool.history.summary():
        print(line)

    stats = pool.get_stats()
    print(f"\nacquires={stats.acquires} releases={stats.releases} waits={stats.waits} "
          f"high_water={stats.high_water}/{stats.capacity}", file=sys.stderr)

    failed = [r for r in results if r.error is not None]
    for result in failed:
        print(f"Error: {result.name}: {result.error}", file=sys.stderr)
    if failed:
        sys.exit(1)


if __name__ == "__main__":
    main()
