"""
Prometheus metrics for comparison runs.

Metrics are registered against the global registry on first import; the
``get_or_create_metric`` helper keeps re-imports (test reloads, embedded
hosts importing twice) from failing on duplicate registration.
"""

from collections.abc import Callable
from typing import TypeVar

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Histogram

T = TypeVar("T")


def get_or_create_metric(
    metric_factory: Callable[[], T],
    metric_name: str,
    registry: CollectorRegistry = REGISTRY,
) -> T:
    """
    Create a metric or return the one already registered under ``metric_name``.

    Example:
        COMPARISONS_TOTAL = get_or_create_metric(
            lambda: Counter("tablediff_comparisons_total", "Comparisons", ["mode"]),
            "tablediff_comparisons",
        )
    """
    try:
        return metric_factory()
    except ValueError:
        existing = registry._names_to_collectors.get(metric_name)
        if existing is not None:
            return existing
        raise


COMPARISONS_TOTAL = get_or_create_metric(
    lambda: Counter(
        "tablediff_comparisons_total",
        "Total comparison runs",
        ["mode", "status"],  # status: success, failed
    ),
    "tablediff_comparisons",
)

COMPARISON_DURATION = get_or_create_metric(
    lambda: Histogram(
        "tablediff_comparison_duration_seconds",
        "Time to compare two datasets",
        ["mode"],
        buckets=[0.01, 0.05, 0.1, 0.5, 1, 5, 10, 30, 60, 300],
    ),
    "tablediff_comparison_duration_seconds",
)

ROWS_PROCESSED = get_or_create_metric(
    lambda: Counter(
        "tablediff_rows_processed_total",
        "Rows read while building comparison state",
        ["side"],  # source, target
    ),
    "tablediff_rows_processed",
)

DIFF_ENTRIES = get_or_create_metric(
    lambda: Counter(
        "tablediff_diff_entries_total",
        "Diff entries produced",
        ["category"],  # added, removed, modified, unchanged
    ),
    "tablediff_diff_entries",
)

CHUNKS_PROCESSED = get_or_create_metric(
    lambda: Counter(
        "tablediff_chunks_processed_total",
        "Chunks committed by chunked comparison runs",
    ),
    "tablediff_chunks_processed",
)

CODEC_BYTES = get_or_create_metric(
    lambda: Counter(
        "tablediff_codec_bytes_total",
        "Bytes handled by the binary codec",
        ["direction"],  # encoded, decoded
    ),
    "tablediff_codec_bytes",
)

PARALLEL_FALLBACKS = get_or_create_metric(
    lambda: Counter(
        "tablediff_parallel_fallbacks_total",
        "Key-map builds that fell back to the sequential path",
    ),
    "tablediff_parallel_fallbacks",
)


def record_result(result) -> None:
    """Count the entries of a finished result by category."""
    for category, count in result.counts().items():
        if count:
            DIFF_ENTRIES.labels(category=category).inc(count)


__all__ = [
    "get_or_create_metric",
    "record_result",
    "COMPARISONS_TOTAL",
    "COMPARISON_DURATION",
    "ROWS_PROCESSED",
    "DIFF_ENTRIES",
    "CHUNKS_PROCESSED",
    "CODEC_BYTES",
    "PARALLEL_FALLBACKS",
]
