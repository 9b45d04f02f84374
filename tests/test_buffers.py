"""Tests for BufferPool (pooled tinygrad tensors)."""

import threading

import pytest
from tinygrad import Tensor, dtypes

from tinypool.core.buffers import BufferPool
from tinypool.core.pool import PoolTimeout, InvalidRelease


class TestBufferPoolInit:
    """Test buffer preallocation."""

    def test_preallocates_buffers(self):
        buffers = BufferPool(num_buffers=3, shape=(2, 4))
        assert buffers.num_available() == 3
        assert buffers.get_stats().capacity == 3

    def test_invalid_num_buffers(self):
        with pytest.raises(ValueError, match="num_buffers"):
            BufferPool(num_buffers=0, shape=(2, 4))

    def test_memory_bytes(self):
        """Memory is buffers x elements x dtype size."""
        assert BufferPool(num_buffers=2, shape=(2, 3)).get_memory_bytes() == 2 * 6 * 4
        assert BufferPool(num_buffers=1, shape=(8,), dtype=dtypes.float16).get_memory_bytes() == 16


class TestBufferPoolAcquire:
    """Test handing out buffers."""

    def test_buffer_shape_and_dtype(self):
        """Buffers come out zeroed with the requested shape and dtype."""
        buffers = BufferPool(num_buffers=1, shape=(2, 3), dtype=dtypes.float32)
        buf = buffers.acquire()
        assert buf.shape == (2, 3)
        assert buf.dtype == dtypes.float32
        assert buf.tolist() == [[0.0] * 3] * 2

    def test_same_buffer_reused(self):
        """Released buffers are reused, not reallocated."""
        buffers = BufferPool(num_buffers=1, shape=(4,))
        buf = buffers.acquire()
        buffers.release(buf)
        assert buffers.acquire() is buf

    def test_exhausted_times_out(self):
        buffers = BufferPool(num_buffers=1, shape=(4,))
        buffers.acquire()
        with pytest.raises(PoolTimeout):
            buffers.acquire(timeout=0.01)

    def test_foreign_tensor_rejected(self):
        """Only buffers from this pool can be released into it."""
        buffers = BufferPool(num_buffers=1, shape=(4,))
        with pytest.raises(InvalidRelease):
            buffers.release(Tensor.zeros(4))
        assert buffers.num_available() == 1


class TestBufferPoolRelease:
    """Test returning buffers."""

    def test_contents_kept_by_default(self):
        """Without zero_on_release the next user sees the old contents."""
        buffers = BufferPool(num_buffers=1, shape=(3,))
        buf = buffers.acquire()
        buf.assign(Tensor.ones(3)).realize()
        buffers.release(buf)

        assert buffers.acquire().tolist() == [1.0, 1.0, 1.0]

    def test_zero_on_release(self):
        buffers = BufferPool(num_buffers=1, shape=(3,), zero_on_release=True)
        buf = buffers.acquire()
        buf.assign(Tensor.ones(3)).realize()
        buffers.release(buf)

        assert buffers.acquire().tolist() == [0.0, 0.0, 0.0]

    def test_failed_zeroing_returns_buffer(self, monkeypatch):
        """If clearing the buffer fails, it still goes back to the pool."""
        buffers = BufferPool(num_buffers=1, shape=(3,), zero_on_release=True)
        buf = buffers.acquire()

        def broken_assign(self, x):
            raise RuntimeError("device error")

        monkeypatch.setattr(Tensor, "assign", broken_assign)
        with pytest.raises(RuntimeError, match="device error"):
            buffers.release(buf)

        assert buffers.num_available() == 1
        assert buffers.acquire(timeout=0.05) is buf

    def test_concurrent_double_release(self):
        """Two threads releasing one buffer: one succeeds, the other is rejected."""
        buffers = BufferPool(num_buffers=1, shape=(3,), zero_on_release=True)
        buf = buffers.acquire()
        barrier = threading.Barrier(2)
        errors = []

        def release():
            barrier.wait()
            try:
                buffers.release(buf)
            except InvalidRelease as e:
                errors.append(e)

        threads = [threading.Thread(target=release) for _ in range(2)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=5)

        assert len(errors) == 1
        assert buffers.num_available() == 1
        assert buffers.get_stats().releases == 1

    def test_lease(self):
        buffers = BufferPool(num_buffers=2, shape=(2,))
        with buffers.lease() as buf:
            assert buf.shape == (2,)
            assert buffers.num_available() == 1
        assert buffers.num_available() == 2
