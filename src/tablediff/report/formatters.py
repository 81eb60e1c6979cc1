"""
Report formatting and export utilities.

This module provides functions to export diff reports in various formats:
JSON, CSV, binary and console/terminal output.
"""

import csv
import json
from typing import Any

from tablediff.codec.binary import encode_binary
from tablediff.context import EngineContext
from tablediff.models import DiffResult

CSV_HEADER = ["Category", "Key", "Column", "Old Value", "New Value"]


def export_report_json(report: dict[str, Any], output_path: str) -> None:
    """
    Export report to JSON file

    Args:
        report: Report dictionary
        output_path: Path to output file
    """
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(report, f, indent=2)


def export_report_csv(result: DiffResult, output_path: str) -> None:
    """
    Export every changed cell and row to CSV.

    Added and removed rows produce one line each; modified rows produce one
    line per differing column.

    Args:
        result: Diff result
        output_path: Path to output file
    """
    with open(output_path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(CSV_HEADER)

        for entry in result.added:
            writer.writerow(["ADDED", entry.key, "", "", json.dumps(entry.target_row)])
        for entry in result.removed:
            writer.writerow(["REMOVED", entry.key, "", json.dumps(entry.source_row), ""])
        for entry in result.modified:
            for difference in entry.differences:
                writer.writerow(
                    ["MODIFIED", entry.key, difference.column, difference.old_value, difference.new_value]
                )


def export_report_binary(
    result: DiffResult,
    output_path: str,
    context: EngineContext | None = None,
) -> int:
    """Write the binary encoding of ``result``; returns the number of bytes written."""
    data = encode_binary(result, context)
    with open(output_path, "wb") as f:
        f.write(data)
    return len(data)


def _format_word_diff(difference) -> str:
    if not difference.word_diff:
        return f"{difference.old_value!r} -> {difference.new_value!r}"
    parts = []
    for span in difference.word_diff:
        if span.removed:
            parts.append(f"[-{span.value}-]")
        elif span.added:
            parts.append(f"{{+{span.value}+}}")
        else:
            parts.append(span.value)
    return "".join(parts)


def format_report_console(report: dict[str, Any], result: DiffResult, max_entries: int = 20) -> str:
    """
    Format report for console output

    Args:
        report: Report dictionary from ``generate_report``
        result: The diff result the report was generated from
        max_entries: Entries listed per category before truncating

    Returns:
        Formatted string for console display
    """
    lines = []

    lines.append("=" * 80)
    lines.append("DIFF REPORT")
    lines.append("=" * 80)
    lines.append(f"Status: {report['status']}")
    lines.append(f"Mode: {report['mode']}")
    lines.append(f"Timestamp: {report['timestamp']}")
    lines.append(f"Source: {report['source']} ({report['source_total_rows']:,} rows)")
    lines.append(f"Target: {report['target']} ({report['target_total_rows']:,} rows)")
    if report["key_columns"]:
        lines.append(f"Key Columns: {', '.join(report['key_columns'])}")
    if report["excluded_columns"]:
        lines.append(f"Excluded Columns: {', '.join(report['excluded_columns'])}")
    lines.append("")

    lines.append("SUMMARY")
    lines.append("-" * 80)
    lines.append(report["summary"])
    lines.append("")

    sections = (
        ("ADDED", result.added, lambda e: [f"  {e.target_row}"]),
        ("REMOVED", result.removed, lambda e: [f"  {e.source_row}"]),
        (
            "MODIFIED",
            result.modified,
            lambda e: [f"  {d.column}: {_format_word_diff(d)}" for d in e.differences],
        ),
    )
    for title, entries, describe in sections:
        if not entries:
            continue
        lines.append(f"{title} ({len(entries):,})")
        lines.append("-" * 80)
        for entry in entries[:max_entries]:
            lines.append(f"Key: {entry.key}")
            lines.extend(describe(entry))
        if len(entries) > max_entries:
            lines.append(f"... {len(entries) - max_entries:,} more")
        lines.append("")

    lines.append("=" * 80)

    return "\n".join(lines)
