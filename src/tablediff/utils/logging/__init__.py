"""
Structured logging configuration for tablediff

Provides JSON-formatted logging, colored console output and a context-bound
logger wrapper.

Usage:
    from tablediff.utils.logging import setup_logging, get_logger

    # Setup logging (call once at application startup)
    setup_logging(level="INFO", log_file="/var/log/tablediff/app.log")

    logger = get_logger(__name__)
    logger.info("Comparison finished", extra={"mode": "primary-key", "rows": 1200})
"""

from .config import configure_from_env, get_logger, setup_logging, shutdown_logging
from .formatters import ConsoleFormatter, JSONFormatter
from .handlers import ContextLogger

__all__ = [
    "setup_logging",
    "get_logger",
    "configure_from_env",
    "shutdown_logging",
    "JSONFormatter",
    "ConsoleFormatter",
    "ContextLogger",
]
