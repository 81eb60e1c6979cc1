"""
Report generation for diff results.

A report wraps a DiffResult with a status, a human-readable summary and the
row totals of both datasets.
"""

from datetime import UTC, datetime
from typing import Any

from tablediff.models import DiffResult


class ReportStatus:
    """Constants for report status values."""

    MATCH = "MATCH"
    DIFF = "DIFF"


def _summary(counts: dict[str, int]) -> str:
    changed = counts["added"] + counts["removed"] + counts["modified"]
    if not changed:
        return f"Datasets match: {counts['unchanged']} unchanged row(s)"
    return (
        f"{changed} row(s) differ: "
        f"{counts['added']} added, {counts['removed']} removed, "
        f"{counts['modified']} modified ({counts['unchanged']} unchanged)"
    )


def generate_report(
    result: DiffResult,
    source_name: str = "source",
    target_name: str = "target",
) -> dict[str, Any]:
    """
    Generate a report from a diff result.

    Args:
        result: Finished or merged diff result
        source_name: Label for the source dataset (e.g. its file name)
        target_name: Label for the target dataset

    Returns:
        Dictionary containing:
        - status: MATCH or DIFF
        - mode: comparison mode
        - counts: entries per category
        - source_total_rows / target_total_rows: rows on each side
        - summary: human-readable summary
        - result: the camelCase result mapping
        - timestamp: report generation timestamp
    """
    counts = result.counts()
    differs = counts["added"] or counts["removed"] or counts["modified"]

    return {
        "status": ReportStatus.DIFF if differs else ReportStatus.MATCH,
        "mode": result.mode,
        "source": source_name,
        "target": target_name,
        "counts": counts,
        "source_total_rows": counts["removed"] + counts["modified"] + counts["unchanged"],
        "target_total_rows": counts["added"] + counts["modified"] + counts["unchanged"],
        "key_columns": list(result.key_columns),
        "excluded_columns": list(result.excluded_columns),
        "summary": _summary(counts),
        "result": result.to_dict(),
        "timestamp": datetime.now(UTC).isoformat(),
    }
