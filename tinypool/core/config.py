"""Configuration for the pool and the contention simulation."""

from dataclasses import dataclass
from typing import Optional


@dataclass
class PoolConfig:
    capacity: int = 3
    acquire_timeout: Optional[float] = None  # None blocks forever
    check_releases: bool = True
    num_workers: int = 7
    rounds: int = 1      # acquire/release cycles per worker
    hold_time: float = 0.01  # seconds a worker keeps its item

    def __post_init__(self):
        if self.capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {self.capacity}")
        if self.acquire_timeout is not None and self.acquire_timeout < 0:
            raise ValueError(f"acquire_timeout must be non-negative, got {self.acquire_timeout}")
        if self.num_workers < 1:
            raise ValueError(f"num_workers must be >= 1, got {self.num_workers}")
        if self.rounds < 1:
            raise ValueError(f"rounds must be >= 1, got {self.rounds}")
        if self.hold_time < 0:
            raise ValueError(f"hold_time must be non-negative, got {self.hold_time}")
