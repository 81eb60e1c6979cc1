"""
Formatters for tablediff log records.

JSONFormatter produces one document per line for log shippers.
ConsoleFormatter keeps stderr readable during interactive runs.
Both surface attributes added through ``extra`` (or bound on a
ContextLogger) so diff ids and chunk indexes are never lost.
"""

import json
import logging
import socket
import sys
import traceback
from datetime import UTC, datetime
from typing import Any

# Attribute names every LogRecord carries; anything else came from ``extra``
_STANDARD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


def record_context(record: logging.LogRecord) -> dict[str, Any]:
    """Return the caller-supplied attributes of a record."""
    return {
        name: value
        for name, value in vars(record).items()
        if name not in _STANDARD_ATTRS and not name.startswith("_")
    }


class JSONFormatter(logging.Formatter):
    """
    Render records as single-line JSON.

    Output keys: level, logger, message, app, optional timestamp and
    hostname, source, exception (when exc_info is set) and context
    (when the record has extra attributes). Values json cannot encode
    are written with str().
    """

    def __init__(
        self,
        include_timestamp: bool = True,
        include_hostname: bool = True,
        app_name: str = "tablediff",
    ):
        super().__init__()
        self.include_timestamp = include_timestamp
        self.include_hostname = include_hostname
        self.app_name = app_name
        self.hostname = socket.gethostname() if include_hostname else None

    def _exception(self, record: logging.LogRecord) -> dict[str, Any]:
        exc_type, exc_value, exc_tb = record.exc_info
        return {
            "type": exc_type.__name__,
            "message": str(exc_value),
            "traceback": traceback.format_exception(exc_type, exc_value, exc_tb),
        }

    def format(self, record: logging.LogRecord) -> str:
        document: dict[str, Any] = {
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "app": self.app_name,
        }
        if self.include_timestamp:
            document["timestamp"] = datetime.fromtimestamp(record.created, UTC).isoformat()
        if self.hostname:
            document["hostname"] = self.hostname
        document["source"] = {
            "file": record.pathname,
            "line": record.lineno,
            "function": record.funcName,
        }
        if record.exc_info:
            document["exception"] = self._exception(record)

        context = record_context(record)
        if context:
            document["context"] = context

        return json.dumps(document, default=str)


class ConsoleFormatter(logging.Formatter):
    """Plain ``time [LEVEL] logger: message`` lines with optional ANSI colors."""

    LEVEL_COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, use_colors: bool = True):
        super().__init__(fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s", datefmt="%H:%M:%S")
        # stderr is where the handler writes; color only a terminal
        self.use_colors = use_colors and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        original = record.levelname
        color = self.LEVEL_COLORS.get(original) if self.use_colors else None
        if color:
            record.levelname = f"{color}{original}{self.RESET}"
        try:
            line = super().format(record)
        finally:
            record.levelname = original

        context = record_context(record)
        if context:
            line += " [" + ", ".join(f"{name}={value}" for name, value in context.items()) + "]"
        return line
