"""
Fork-join key extraction for primary-key map construction.

Workers only extract composite keys for a disjoint index range; they never
touch the shared key map. The caller merges batches sequentially in original
row order, so duplicate detection is identical with or without the pool.
"""

import logging
from collections.abc import Iterator, Sequence
from concurrent.futures import Future, ThreadPoolExecutor
from contextlib import contextmanager

from tablediff.context import EngineContext
from tablediff.errors import DuplicateKeyError
from tablediff.metrics import PARALLEL_FALLBACKS
from tablediff.models import Row
from tablediff.normalize import composite_key, key_label

logger = logging.getLogger(__name__)

KeyMap = dict[tuple[str, ...], int]
KeyBatch = tuple[int, list[tuple[str, ...]]]


def extract_keys(
    rows: Sequence[Row],
    key_indices: Sequence[int],
    start: int,
    stop: int,
) -> list[tuple[str, ...]]:
    return [composite_key(rows[i][k] for k in key_indices) for i in range(start, stop)]


class KeyExtractor:
    """
    Extracts key batches on a thread pool, or in the calling thread.

    Worker threads are started lazily by ``ThreadPoolExecutor.submit()``, so
    a thread that cannot be started surfaces there. The extractor then logs
    a warning, increments the fallback metric once, and extracts every
    remaining range in the calling thread for the rest of its life.
    """

    def __init__(self, executor: ThreadPoolExecutor | None = None, max_workers: int = 1):
        self.executor = executor
        self.max_workers = max(1, max_workers)

    @property
    def parallel(self) -> bool:
        return self.executor is not None

    def fall_back(self, error: BaseException) -> None:
        logger.warning(f"Thread pool unavailable, building key maps sequentially: {error}")
        PARALLEL_FALLBACKS.inc()
        self.executor = None

    def _submit_wave(
        self,
        rows: Sequence[Row],
        key_indices: Sequence[int],
        window: Sequence[tuple[int, int]],
    ) -> list[Future]:
        futures: list[Future] = []
        try:
            for start, stop in window:
                futures.append(self.executor.submit(extract_keys, rows, key_indices, start, stop))
        except RuntimeError:
            for future in futures:
                future.cancel()
            raise
        return futures

    def batches(
        self,
        rows: Sequence[Row],
        key_indices: Sequence[int],
        batch_size: int,
    ) -> Iterator[KeyBatch]:
        """
        Yield ``(start, keys)`` per batch in ascending row order.

        With a pool, up to ``max_workers`` batches are extracted concurrently
        and then released in order.
        """
        ranges = [(start, min(start + batch_size, len(rows))) for start in range(0, len(rows), batch_size)]
        position = 0

        while self.parallel and position < len(ranges):
            window = ranges[position:position + self.max_workers]
            try:
                futures = self._submit_wave(rows, key_indices, window)
            except RuntimeError as e:
                self.fall_back(e)
                break
            for (start, _), future in zip(window, futures):
                yield start, future.result()
            position += len(window)

        for start, stop in ranges[position:]:
            yield start, extract_keys(rows, key_indices, start, stop)


@contextmanager
def extraction_pool(context: EngineContext) -> Iterator[KeyExtractor]:
    """
    Yield a KeyExtractor backed by a thread pool when the context allows one.

    Failing to create the pool is recovered the same way as failing to
    start one of its threads.
    """
    extractor = KeyExtractor(max_workers=context.settings.max_workers)
    executor = None
    if context.use_parallel:
        try:
            executor = ThreadPoolExecutor(
                max_workers=context.settings.max_workers,
                thread_name_prefix="tablediff-keys",
            )
            extractor.executor = executor
        except (RuntimeError, OSError) as e:
            extractor.fall_back(e)

    try:
        yield extractor
    finally:
        if executor is not None:
            executor.shutdown(wait=True, cancel_futures=True)


def merge_keys(key_map: KeyMap, keys: Sequence[tuple[str, ...]], start: int, side: str) -> None:
    """
    Insert one batch of keys into ``key_map``, mapping key to row index.

    Raises:
        DuplicateKeyError: on the first key already present in the map
    """
    for offset, key in enumerate(keys):
        if key in key_map:
            raise DuplicateKeyError(key=key_label(key), side=side)
        key_map[key] = start + offset


__all__ = [
    "KeyBatch",
    "KeyExtractor",
    "KeyMap",
    "extraction_pool",
    "extract_keys",
    "merge_keys",
]
