"""
Command-line interface for tablediff.

Available commands:
- run: Compare two CSV files
- decode: Render a binary diff file written by ``run --format binary``
"""

import sys

from tablediff.utils.logging import setup_logging, shutdown_logging
from tablediff.utils.tracing import initialize_tracing, shutdown_tracing

from .commands import cmd_decode, cmd_run
from .loader import load_csv
from .parser import create_parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the tablediff CLI"""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    setup_logging(level=args.log_level, log_file=args.log_file, json_format=args.log_json)
    initialize_tracing(console_export=args.trace_console)

    try:
        if args.command == "run":
            if args.mode == "primary-key" and not args.key_columns:
                parser.error("--key-columns is required for primary-key mode")
            cmd_run(args)
        elif args.command == "decode":
            cmd_decode(args)
    finally:
        shutdown_tracing()
        shutdown_logging()


__all__ = [
    "main",
    "cmd_run",
    "cmd_decode",
    "create_parser",
    "load_csv",
]


if __name__ == "__main__":
    main()
