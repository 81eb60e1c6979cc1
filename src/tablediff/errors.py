"""
Exception hierarchy for the comparison engine.

Every error is fatal for the invocation that raised it; the engine never
returns a partial result alongside an error.
"""

from __future__ import annotations

__all__ = (
    "TableDiffError",
    "SchemaError",
    "DiffConfigError",
    "MissingKeyColumnError",
    "DuplicateKeyError",
    "UnsupportedModeError",
    "BufferOverflowError",
    "CorruptBufferError",
)


class TableDiffError(Exception):
    """Base class for errors raised by the tablediff engine."""


class SchemaError(TableDiffError, ValueError):
    """A dataset was built with, or accessed through, an invalid column schema."""


class DiffConfigError(TableDiffError, ValueError):
    """A comparison was requested with invalid configuration values."""


class MissingKeyColumnError(TableDiffError):
    def __init__(self, *, column: str, side: str):
        self.column = column
        self.side = side
        super().__init__(f'Primary key column "{column}" not found in {side} dataset.')


class DuplicateKeyError(TableDiffError):
    def __init__(self, *, key: str, side: str):
        self.key = key
        self.side = side
        super().__init__(
            f'Duplicate Primary Key found in {side}: "{key}". Primary Keys must be unique.'
        )


class UnsupportedModeError(TableDiffError):
    """The requested comparison mode cannot run on this execution path."""


class BufferOverflowError(TableDiffError):
    def __init__(self, *, position: int, requested: int, length: int):
        self.position = position
        self.requested = requested
        self.length = length
        super().__init__(
            f"Buffer overflow: attempted to read {requested} bytes at position "
            f"{position}, buffer length {length}"
        )


class CorruptBufferError(TableDiffError):
    """The buffer is well-bounded but does not follow the wire layout."""
