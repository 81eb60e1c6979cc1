"""
Root logger setup for the tablediff CLI.

Diff output goes to stdout, so every log handler installed here writes to
stderr or a rotating file and never interleaves with a report.
"""

import logging
import logging.handlers
import os
import sys
from pathlib import Path

from .formatters import ConsoleFormatter, JSONFormatter

PLAIN_FILE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

# Third-party loggers that retry loudly when no collector is listening
_QUIET_LOGGERS = ("opentelemetry", "grpc")

_TRUTHY = ("true", "1", "yes")


def _resolve_level(level: str) -> int:
    resolved = logging.getLevelName(level.upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def _build_handler(
    handler: logging.Handler,
    level: int,
    formatter: logging.Formatter,
) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def _clear_handlers(root: logging.Logger) -> None:
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()


def setup_logging(
    level: str = "INFO",
    log_file: str | None = None,
    console_output: bool = True,
    json_format: bool = False,
    app_name: str = "tablediff",
    max_bytes: int = 50 * 1024 * 1024,
    backup_count: int = 3,
) -> None:
    """
    Replace the root logger's handlers with tablediff's.

    Args:
        level: Level name; unknown names fall back to INFO
        log_file: Rotating log file path, parent directories are created
        console_output: Attach a stderr handler
        json_format: Emit one JSON document per record on every handler
        app_name: Value of the ``app`` field in JSON records
        max_bytes: Size at which the log file rotates
        backup_count: Rotated files kept next to the active one
    """
    numeric_level = _resolve_level(level)
    root = logging.getLogger()
    _clear_handlers(root)
    root.setLevel(numeric_level)

    if console_output:
        console_formatter = JSONFormatter(app_name=app_name) if json_format else ConsoleFormatter()
        root.addHandler(_build_handler(logging.StreamHandler(sys.stderr), numeric_level, console_formatter))

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        rotating = logging.handlers.RotatingFileHandler(
            path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        )
        file_formatter = JSONFormatter(app_name=app_name) if json_format else logging.Formatter(PLAIN_FILE_FORMAT)
        root.addHandler(_build_handler(rotating, numeric_level, file_formatter))

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).debug(
        f"Logging configured: level={logging.getLevelName(numeric_level)} "
        f"file={log_file or '-'} json={json_format}"
    )


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def shutdown_logging() -> None:
    """Close every root handler so log files are released before exit."""
    _clear_handlers(logging.getLogger())
    logging.shutdown()


def configure_from_env() -> None:
    """
    Call setup_logging() with values taken from the environment.

    LOG_LEVEL (INFO), LOG_FILE (unset), LOG_JSON (false) and LOG_CONSOLE
    (true) are read; boolean flags accept true, 1 or yes.
    """
    setup_logging(
        level=os.getenv("LOG_LEVEL", "INFO"),
        log_file=os.getenv("LOG_FILE") or None,
        console_output=os.getenv("LOG_CONSOLE", "true").lower() in _TRUTHY,
        json_format=os.getenv("LOG_JSON", "false").lower() in _TRUTHY,
    )
