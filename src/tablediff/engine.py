"""
Public entry points of the comparison engine.

Every call takes an optional ``EngineContext``; when omitted a context with
default settings is created for that call.
"""

import logging
import time
from collections.abc import Iterable, Iterator

from opentelemetry import trace

from tablediff.chunked.coordinator import ChunkCoordinator, merge_results
from tablediff.chunked.store import ChunkStore
from tablediff.codec.binary import decode_binary as _decode_binary
from tablediff.codec.binary import encode_binary as _encode_binary
from tablediff.config import DiffConfig
from tablediff.context import EngineContext
from tablediff.matching.content import ContentMatcher
from tablediff.matching.primary_key import PrimaryKeyMatcher
from tablediff.metrics import COMPARISON_DURATION, COMPARISONS_TOTAL, record_result
from tablediff.models import CONTENT_MATCH_MODE, PRIMARY_KEY_MODE, Dataset, DiffResult
from tablediff.progress import ProgressSink
from tablediff.utils.tracing import add_span_attributes, trace_operation

logger = logging.getLogger(__name__)


def compare(
    source: Dataset,
    target: Dataset,
    config: DiffConfig,
    on_progress: ProgressSink | None = None,
    context: EngineContext | None = None,
) -> DiffResult:
    """
    Compare two datasets with the matcher selected by ``config.mode``.

    Args:
        source: Dataset treated as the original
        target: Dataset treated as the new version
        config: What to compare and how to normalize values
        on_progress: Optional ``(percent, message)`` callback
        context: Engine settings and pooled resources

    Returns:
        Complete DiffResult

    Raises:
        MissingKeyColumnError: if a key column is absent from either dataset
        DuplicateKeyError: if a composite key repeats within one dataset
    """
    context = context or EngineContext()
    matcher_class = PrimaryKeyMatcher if config.mode == PRIMARY_KEY_MODE else ContentMatcher

    with trace_operation(
        "compare",
        kind=trace.SpanKind.INTERNAL,
        mode=config.mode,
        source_rows=len(source),
        target_rows=len(target),
    ):
        start_time = time.perf_counter()
        try:
            result = matcher_class(source, target, config, context).compare(on_progress)
        except Exception:
            COMPARISONS_TOTAL.labels(mode=config.mode, status="failed").inc()
            raise

        COMPARISON_DURATION.labels(mode=config.mode).observe(time.perf_counter() - start_time)
        COMPARISONS_TOTAL.labels(mode=config.mode, status="success").inc()
        record_result(result)
        add_span_attributes(**result.counts())
        return result


def compare_by_primary_key(
    source: Dataset,
    target: Dataset,
    key_columns: Iterable[str],
    case_sensitive: bool = False,
    ignore_whitespace: bool = False,
    excluded_columns: Iterable[str] = (),
    ignore_empty_vs_null: bool = False,
    on_progress: ProgressSink | None = None,
    context: EngineContext | None = None,
) -> DiffResult:
    config = DiffConfig(
        mode=PRIMARY_KEY_MODE,
        key_columns=tuple(key_columns),
        case_sensitive=case_sensitive,
        ignore_whitespace=ignore_whitespace,
        ignore_empty_vs_null=ignore_empty_vs_null,
        excluded_columns=tuple(excluded_columns),
    )
    return compare(source, target, config, on_progress=on_progress, context=context)


def compare_by_content(
    source: Dataset,
    target: Dataset,
    case_sensitive: bool = False,
    ignore_whitespace: bool = False,
    excluded_columns: Iterable[str] = (),
    ignore_empty_vs_null: bool = False,
    on_progress: ProgressSink | None = None,
    context: EngineContext | None = None,
) -> DiffResult:
    config = DiffConfig(
        mode=CONTENT_MATCH_MODE,
        case_sensitive=case_sensitive,
        ignore_whitespace=ignore_whitespace,
        ignore_empty_vs_null=ignore_empty_vs_null,
        excluded_columns=tuple(excluded_columns),
    )
    return compare(source, target, config, on_progress=on_progress, context=context)


def encode_binary(result: DiffResult, context: EngineContext | None = None) -> bytes:
    return _encode_binary(result, context)


def decode_binary(buffer: bytes, **metadata) -> DiffResult:
    return _decode_binary(buffer, **metadata)


def begin_chunked_diff(
    source: Dataset,
    target: Dataset,
    config: DiffConfig,
    chunk_size: int | None = None,
    store: ChunkStore | None = None,
    diff_id: str | None = None,
    on_progress: ProgressSink | None = None,
    context: EngineContext | None = None,
) -> Iterator[tuple[int, DiffResult]]:
    """
    Start a chunked primary-key comparison.

    Returns an iterator of ``(chunk_index, partial_result)``; each partial is
    committed to ``store`` (when given) before it is yielded. ``chunk_size``
    defaults to the context's configured chunk size.
    """
    coordinator = ChunkCoordinator(source, target, config, context or EngineContext(), store)
    return coordinator.run(chunk_size, diff_id=diff_id, on_progress=on_progress)


def merge_chunks(partials: Iterable[DiffResult]) -> DiffResult:
    return merge_results(partials)


__all__ = [
    "compare",
    "compare_by_primary_key",
    "compare_by_content",
    "encode_binary",
    "decode_binary",
    "begin_chunked_diff",
    "merge_chunks",
]
