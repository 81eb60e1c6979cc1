"""
Engine context holding settings and reusable resources.

A context is created once by the caller and passed into every engine call;
nothing in the engine keeps module-level mutable state besides metrics.
"""

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager

from tablediff.config import EngineSettings

logger = logging.getLogger(__name__)


class BufferPool:
    """
    Bounded pool of reusable ``bytearray`` encode buffers.

    Buffers are cleared on release. When the pool is empty a fresh buffer is
    handed out; when it is full a released buffer is dropped.
    """

    def __init__(self, size: int):
        self.size = size
        self._free: list[bytearray] = []
        self._lock = threading.Lock()
        self.in_use = 0

    @contextmanager
    def acquire(self) -> Iterator[bytearray]:
        with self._lock:
            buffer = self._free.pop() if self._free else bytearray()
            self.in_use += 1
        try:
            yield buffer
        finally:
            buffer.clear()
            with self._lock:
                self.in_use -= 1
                if len(self._free) < self.size:
                    self._free.append(buffer)

    @property
    def available(self) -> int:
        with self._lock:
            return len(self._free)


class EngineContext:
    """Settings and the encode buffer pool shared by engine calls."""

    def __init__(self, settings: EngineSettings | None = None):
        self.settings = settings or EngineSettings()
        self.buffer_pool = BufferPool(self.settings.buffer_pool_size)

        logger.debug(
            f"EngineContext created: "
            f"pk_batch_size={self.settings.pk_batch_size}, "
            f"max_workers={self.settings.max_workers}, "
            f"parallel_enabled={self.settings.parallel_enabled}"
        )

    @property
    def use_parallel(self) -> bool:
        return self.settings.parallel_enabled and self.settings.max_workers > 1


__all__ = ["BufferPool", "EngineContext"]
