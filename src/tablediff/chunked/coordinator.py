"""
Chunked primary-key comparison.

Target rows are partitioned into contiguous ranges and compared one range at
a time against key maps built once per run. Each partial result is committed
to the chunk store before it is yielded, and removed rows travel only with
the last chunk, so concatenating the partials in order reproduces the
single-shot result.
"""

import logging
import uuid
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import replace

from tablediff.chunked.store import ChunkStore, make_chunk_id
from tablediff.config import DiffConfig
from tablediff.context import EngineContext
from tablediff.errors import DiffConfigError, UnsupportedModeError
from tablediff.matching.primary_key import MAP_PHASE_END, PrimaryKeyMatcher
from tablediff.metrics import CHUNKS_PROCESSED
from tablediff.models import PRIMARY_KEY_MODE, Dataset, DiffResult
from tablediff.progress import ProgressSink
from tablediff.utils.tracing import add_span_attributes, add_span_event, trace_function, trace_operation

logger = logging.getLogger(__name__)


def chunk_ranges(total: int, chunk_size: int) -> list[tuple[int, int]]:
    """
    Contiguous ``[start, stop)`` ranges covering ``total`` rows.

    An empty dataset still yields one empty range so that a run always
    produces at least one chunk.
    """
    if total == 0:
        return [(0, 0)]
    return [(start, min(start + chunk_size, total)) for start in range(0, total, chunk_size)]


class ChunkCoordinator:
    def __init__(
        self,
        source: Dataset,
        target: Dataset,
        config: DiffConfig,
        context: EngineContext | None = None,
        store: ChunkStore | None = None,
    ):
        self.source = source
        self.target = target
        self.config = config
        self.context = context or EngineContext()
        self.store = store
        self.diff_id: str | None = None

    def run(
        self,
        chunk_size: int | None = None,
        diff_id: str | None = None,
        on_progress: ProgressSink | None = None,
    ) -> Iterator[tuple[int, DiffResult]]:
        """
        Start a chunked run and return an iterator of ``(chunk_index, partial)``.

        Arguments are validated immediately; rows are only processed as the
        iterator is advanced.

        Raises:
            UnsupportedModeError: if the configuration is not primary-key mode
            DiffConfigError: if ``chunk_size`` is less than 1
        """
        if self.config.mode != PRIMARY_KEY_MODE:
            raise UnsupportedModeError(
                f"Chunked execution supports only {PRIMARY_KEY_MODE} mode, got {self.config.mode}"
            )
        if chunk_size is None:
            chunk_size = self.context.settings.chunk_size
        if chunk_size < 1:
            raise DiffConfigError(f"chunk_size must be at least 1, got {chunk_size}")

        self.diff_id = diff_id or uuid.uuid4().hex
        return self._iter_chunks(chunk_size, self.diff_id, on_progress)

    def _iter_chunks(
        self,
        chunk_size: int,
        diff_id: str,
        on_progress: ProgressSink | None,
    ) -> Iterator[tuple[int, DiffResult]]:
        matcher = PrimaryKeyMatcher(self.source, self.target, self.config, self.context)
        for progress in matcher.build_maps():
            if on_progress is not None:
                on_progress(progress.percent, progress.message)

        ranges = chunk_ranges(len(self.target), chunk_size)
        last = len(ranges) - 1
        logger.info(
            f"Starting chunked comparison {diff_id}: "
            f"{len(self.target)} target rows in {len(ranges)} chunk(s) of up to {chunk_size}"
        )

        for index, (start, stop) in enumerate(ranges):
            chunk_id = make_chunk_id(diff_id, index)
            with trace_operation("compare_chunk", diff_id=diff_id, chunk_index=index, start=start, stop=stop):
                partial = matcher.compare_range(start, stop)
                if index == last:
                    partial = replace(partial, removed=matcher.removed_rows())
                add_span_attributes(**partial.counts())

                if self.store is not None:
                    self.store.put(chunk_id, partial)
                    add_span_event("chunk_committed", chunk_id=chunk_id)

            CHUNKS_PROCESSED.inc()
            logger.debug(f"Committed chunk {chunk_id}: rows [{start}, {stop})")
            if on_progress is not None:
                on_progress(
                    MAP_PHASE_END + (100.0 - MAP_PHASE_END) * (index + 1) / len(ranges),
                    f"Committed chunk {index + 1}/{len(ranges)}",
                )
            yield index, partial

        logger.info(f"Chunked comparison {diff_id} complete: {len(ranges)} chunk(s)")


@trace_function(component="chunked")
def merge_results(chunks: Iterable[DiffResult]) -> DiffResult:
    """
    Concatenate partial results in chunk order.

    Metadata is taken from the first chunk.

    Raises:
        DiffConfigError: if there are no chunks to merge
    """
    partials: Sequence[DiffResult] = list(chunks)
    if not partials:
        raise DiffConfigError("Cannot merge zero chunks.")

    first = partials[0]
    return replace(
        first,
        added=tuple(entry for chunk in partials for entry in chunk.added),
        removed=tuple(entry for chunk in partials for entry in chunk.removed),
        modified=tuple(entry for chunk in partials for entry in chunk.modified),
        unchanged=tuple(entry for chunk in partials for entry in chunk.unchanged),
    )


__all__ = ["ChunkCoordinator", "chunk_ranges", "merge_results"]
