"""Core components for tinypool."""

from .pool import BoundedPool, ObjectPool, PoolStats, PoolError, PoolTimeout, InvalidRelease
from .history import CheckoutHistory, CheckoutRecord, TrackedPool
from .resource import Resource, make_resources
from .config import PoolConfig
from .simulation import WorkerResult, run_simulation
from .buffers import BufferPool
