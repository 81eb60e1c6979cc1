"""
Command-line argument parser configuration.

This module sets up the argument parser for the tablediff CLI tool,
defining all commands and their options.
"""

import argparse

from tablediff.config import MODES
from tablediff.models import PRIMARY_KEY_MODE


def _comma_list(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def create_parser() -> argparse.ArgumentParser:
    """
    Create and configure the argument parser for the CLI.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        prog="tablediff",
        description="Compare two CSV datasets row by row",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Compare on a primary key and print a console summary
  tablediff run old.csv new.csv --key-columns id

  # Composite key, ignore case and surrounding whitespace, skip a column
  tablediff run old.csv new.csv --key-columns region,id --ignore-whitespace --exclude updated_at

  # No stable key: match rows by content
  tablediff run old.csv new.csv --mode content-match --format json --output diff.json

  # Chunked run persisting partial results
  tablediff run old.csv new.csv --key-columns id --chunk-size 5000 --chunk-dir ./chunks

  # Write the compact binary encoding and read it back
  tablediff run old.csv new.csv --key-columns id --format binary --output diff.bin
  tablediff decode diff.bin --format json --output diff.json
        """
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Logging level (default: INFO)"
    )
    parser.add_argument(
        "--log-file",
        help="Also write logs to this file (rotated)"
    )
    parser.add_argument(
        "--log-json",
        action="store_true",
        help="Emit logs as JSON lines"
    )
    parser.add_argument(
        "--trace-console",
        action="store_true",
        help="Print OpenTelemetry spans to the console"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # ========== Run command ==========
    run_parser = subparsers.add_parser("run", help="Compare two CSV files")
    run_parser.add_argument("source", help="Source CSV file")
    run_parser.add_argument("target", help="Target CSV file")
    run_parser.add_argument(
        "--mode",
        choices=MODES,
        default=PRIMARY_KEY_MODE,
        help=f"Matching strategy (default: {PRIMARY_KEY_MODE})"
    )
    run_parser.add_argument(
        "--key-columns",
        type=_comma_list,
        default=[],
        help="Comma-separated key columns (required for primary-key mode)"
    )
    run_parser.add_argument(
        "--exclude",
        type=_comma_list,
        default=[],
        help="Comma-separated columns to leave out of the comparison"
    )
    run_parser.add_argument(
        "--case-sensitive",
        action="store_true",
        help="Treat values differing only in case as different"
    )
    run_parser.add_argument(
        "--ignore-whitespace",
        action="store_true",
        help="Ignore leading and trailing whitespace"
    )
    run_parser.add_argument(
        "--ignore-empty-vs-null",
        action="store_true",
        help="Treat empty, blank and 'null' values as equal"
    )
    run_parser.add_argument(
        "--chunk-size",
        type=int,
        help="Compare target rows in chunks of this size (primary-key mode only)"
    )
    run_parser.add_argument(
        "--chunk-dir",
        help="Persist chunk results under this directory"
    )
    run_parser.add_argument(
        "--diff-id",
        help="Identifier for persisted chunks (default: random)"
    )
    run_parser.add_argument(
        "--workers",
        type=int,
        help="Concurrent key-extraction batches (default: TABLEDIFF_MAX_WORKERS or 4)"
    )
    run_parser.add_argument(
        "--batch-size",
        type=int,
        help="Rows per key-extraction batch (default: TABLEDIFF_PK_BATCH_SIZE or 1000)"
    )
    run_parser.add_argument(
        "--no-parallel",
        action="store_true",
        help="Build key maps without a thread pool"
    )
    run_parser.add_argument(
        "--format",
        choices=["console", "json", "csv", "binary"],
        default="console",
        help="Output format (default: console)"
    )
    run_parser.add_argument(
        "--output",
        help="Output file path (required for csv and binary formats)"
    )
    run_parser.add_argument(
        "--max-entries",
        type=int,
        default=20,
        help="Entries listed per category in console output (default: 20)"
    )
    run_parser.add_argument(
        "--progress",
        action="store_true",
        help="Log progress while comparing"
    )

    # ========== Decode command ==========
    decode_parser = subparsers.add_parser("decode", help="Decode a binary diff file")
    decode_parser.add_argument("input", help="Binary file written by 'run --format binary'")
    decode_parser.add_argument(
        "--format",
        choices=["console", "json", "csv"],
        default="console",
        help="Output format (default: console)"
    )
    decode_parser.add_argument(
        "--output",
        help="Output file path (required for csv format)"
    )
    decode_parser.add_argument(
        "--case-sensitive",
        action="store_true",
        help="Case handling used when rebuilding word diffs"
    )
    decode_parser.add_argument(
        "--ignore-whitespace",
        action="store_true",
        help="Whitespace handling used when rebuilding word diffs"
    )
    decode_parser.add_argument(
        "--max-entries",
        type=int,
        default=20,
        help="Entries listed per category in console output (default: 20)"
    )

    return parser
