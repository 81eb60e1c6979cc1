"""
CLI command implementations.

This module contains the implementation of the CLI commands:
- run: compare two CSV files
- decode: render a binary diff file

Both commands exit with 0 when the datasets match, 1 when differences were
found and 2 when the comparison could not be completed.
"""

import argparse
import csv
import json
import logging
import sys
import uuid
from pathlib import Path

from tablediff.chunked.store import FileChunkStore, InMemoryChunkStore
from tablediff.codec.binary import decode_binary, recompute_word_diffs
from tablediff.config import DiffConfig, EngineSettings
from tablediff.context import EngineContext
from tablediff.engine import begin_chunked_diff, compare, merge_chunks
from tablediff.errors import TableDiffError
from tablediff.models import DiffResult
from tablediff.report import (
    ReportStatus,
    export_report_binary,
    export_report_csv,
    export_report_json,
    format_report_console,
    generate_report,
)
from tablediff.utils.logging import ContextLogger

from .loader import load_csv

logger = logging.getLogger(__name__)

EXIT_MATCH = 0
EXIT_DIFF = 1
EXIT_ERROR = 2


def _log_progress(percent: float, message: str) -> None:
    logger.info(f"[{percent:5.1f}%] {message}")


def _build_context(args: argparse.Namespace) -> EngineContext:
    settings = EngineSettings.from_env().with_overrides(
        max_workers=args.workers,
        pk_batch_size=args.batch_size,
        chunk_size=args.chunk_size,
        parallel_enabled=False if args.no_parallel else None,
    )
    return EngineContext(settings)


def _run_chunked(source, target, config: DiffConfig, args, context: EngineContext) -> DiffResult:
    diff_id = args.diff_id or uuid.uuid4().hex
    store = FileChunkStore(args.chunk_dir) if args.chunk_dir else InMemoryChunkStore()
    chunk_logger = ContextLogger(__name__, diff_id=diff_id)

    # Stale chunks from an earlier run with the same id would be merged in
    store.delete_all(diff_id)

    chunks = begin_chunked_diff(
        source,
        target,
        config,
        chunk_size=context.settings.chunk_size,
        store=store,
        diff_id=diff_id,
        on_progress=_log_progress if args.progress else None,
        context=context,
    )
    for index, partial in chunks:
        chunk_logger.info(f"Chunk {index} committed", chunk_index=index, **partial.counts())

    result = merge_chunks(store.get_all(diff_id))
    if args.chunk_dir:
        chunk_logger.info(f"Chunk results kept under {Path(args.chunk_dir) / diff_id}")
    else:
        store.delete_all(diff_id)
    return result


def _write_output(
    result: DiffResult,
    args: argparse.Namespace,
    source_name: str,
    target_name: str,
    context: EngineContext | None = None,
) -> dict:
    report = generate_report(result, source_name=source_name, target_name=target_name)

    if args.format == "console":
        text = format_report_console(report, result, max_entries=args.max_entries)
        if args.output:
            Path(args.output).write_text(text + "\n", encoding="utf-8")
            logger.info(f"Report saved to {args.output}")
        else:
            print(text)
        return report

    if not args.output:
        if args.format == "json":
            print(json.dumps(report, indent=2))
            return report
        raise TableDiffError(f"--output is required for {args.format} format")

    output_path = Path(args.output)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    if args.format == "json":
        export_report_json(report, str(output_path))
    elif args.format == "csv":
        export_report_csv(result, str(output_path))
    elif args.format == "binary":
        size = export_report_binary(result, str(output_path), context)
        logger.info(f"Wrote {size:,} bytes")
    logger.info(f"Report saved to {output_path}")
    return report


def _exit_for(report: dict) -> None:
    if report["status"] == ReportStatus.DIFF:
        logger.warning(f"Differences found: {report['summary']}")
        sys.exit(EXIT_DIFF)
    logger.info("Datasets match")
    sys.exit(EXIT_MATCH)


def cmd_run(args: argparse.Namespace) -> None:
    """
    Compare two CSV files

    Args:
        args: Parsed command-line arguments
    """
    logger.info(f"Starting comparison: {args.source} -> {args.target}")

    try:
        config = DiffConfig(
            mode=args.mode,
            key_columns=tuple(args.key_columns),
            case_sensitive=args.case_sensitive,
            ignore_whitespace=args.ignore_whitespace,
            ignore_empty_vs_null=args.ignore_empty_vs_null,
            excluded_columns=tuple(args.exclude),
        )
        context = _build_context(args)

        source = load_csv(args.source)
        target = load_csv(args.target)

        if args.chunk_size is not None or args.chunk_dir:
            result = _run_chunked(source, target, config, args, context)
        else:
            result = compare(
                source,
                target,
                config,
                on_progress=_log_progress if args.progress else None,
                context=context,
            )

        report = _write_output(result, args, args.source, args.target, context)

    except (TableDiffError, OSError, csv.Error) as e:
        logger.error(f"Comparison failed: {e}")
        sys.exit(EXIT_ERROR)

    _exit_for(report)


def cmd_decode(args: argparse.Namespace) -> None:
    """
    Decode a binary diff file and render it

    Args:
        args: Parsed command-line arguments
    """
    logger.info(f"Decoding binary diff from {args.input}")

    try:
        with open(args.input, "rb") as f:
            data = f.read()

        result = recompute_word_diffs(
            decode_binary(data),
            case_sensitive=args.case_sensitive,
            ignore_whitespace=args.ignore_whitespace,
        )
        report = _write_output(result, args, args.input, args.input)

    except (TableDiffError, OSError) as e:
        logger.error(f"Failed to decode {args.input}: {e}")
        sys.exit(EXIT_ERROR)

    _exit_for(report)
