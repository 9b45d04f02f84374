"""Pool of preallocated tinygrad scratch tensors.

Allocating and realizing a device buffer is expensive, so a fixed number of
them are created up front (same layout trick as a flat KV cache) and reused:

    buffers = BufferPool(num_buffers=4, shape=(16, 64))
    with buffers.lease() as buf:
        buf.assign(x).realize()
"""

import threading
from contextlib import contextmanager
from typing import Iterator, Optional, Tuple

from tinygrad import Tensor, dtypes
from tinygrad.dtype import DType

from .pool import BoundedPool, InvalidRelease, PoolStats


class BufferPool:
    """
    Fixed set of realized tensors of one shape and dtype.

    Args:
        num_buffers: Number of tensors (the pool capacity)
        shape: Shape of every tensor
        dtype: Element type
        zero_on_release: If True, buffers are cleared before going back to the pool
    """

    def __init__(self, num_buffers: int, shape: Tuple[int, ...], dtype: DType = dtypes.float32,
                 zero_on_release: bool = False):
        if num_buffers < 1:
            raise ValueError(f"num_buffers must be >= 1, got {num_buffers}")
        self.num_buffers = num_buffers
        self.shape = tuple(shape)
        self.dtype = dtype
        self.zero_on_release = zero_on_release
        self._release_lock = threading.Lock()

        self._pool: BoundedPool[Tensor] = BoundedPool(
            Tensor.zeros(*self.shape, dtype=dtype).contiguous().realize()
            for _ in range(num_buffers)
        )

    def acquire(self, timeout: Optional[float] = None) -> Tensor:
        return self._pool.acquire(timeout=timeout)

    def release(self, buf: Tensor) -> None:
        # Check, zero and hand back as one step: only the valid release touches the buffer
        with self._release_lock:
            if not self._pool.is_checked_out(buf):
                raise InvalidRelease("Buffer is not checked out from this pool")
            try:
                if self.zero_on_release:
                    buf.assign(Tensor.zeros(*self.shape, dtype=self.dtype)).realize()
            finally:
                self._pool.release(buf)

    @contextmanager
    def lease(self, timeout: Optional[float] = None) -> Iterator[Tensor]:
        buf = self.acquire(timeout=timeout)
        try:
            yield buf
        finally:
            self.release(buf)

    def num_available(self) -> int:
        return self._pool.num_available()

    def get_stats(self) -> PoolStats:
        return self._pool.get_stats()

    def get_memory_bytes(self) -> int:
        """Total bytes held by all buffers."""
        numel = 1
        for dim in self.shape:
            numel *= dim
        return self.num_buffers * numel * self.dtype.itemsize
