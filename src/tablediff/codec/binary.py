"""
Compact binary serialization of diff results.

Layout (little-endian, every integer u32 unless noted, strings are UTF-8 with
a u32 byte-length prefix):

    header      total_rows, added, removed, modified, unchanged
    added       u8=1, key, row
    removed     u8=2, key, row
    modified    u8=3, key, source row, target row,
                diff_count, diff_count x (column, old_value, new_value)
    unchanged   u8=4, key, row
    row         field_count, field_count x (name, value)

Word diffs and dataset metadata are not part of the wire format; use
``recompute_word_diffs`` and the metadata keywords of ``decode_binary``.
"""

import logging
import struct
from collections.abc import Iterable
from dataclasses import replace

from tablediff.context import EngineContext
from tablediff.errors import BufferOverflowError, CorruptBufferError
from tablediff.metrics import CODEC_BYTES
from tablediff.models import (
    PRIMARY_KEY_MODE,
    AddedRow,
    DatasetMetadata,
    Difference,
    DiffResult,
    ModifiedRow,
    RemovedRow,
    RowMap,
    UnchangedRow,
)
from tablediff.utils.tracing import trace_operation
from tablediff.word_diff import diff_words

logger = logging.getLogger(__name__)

TAG_ADDED = 1
TAG_REMOVED = 2
TAG_MODIFIED = 3
TAG_UNCHANGED = 4

_U8 = struct.Struct("<B")
_U32 = struct.Struct("<I")
_HEADER = struct.Struct("<5I")

HEADER_SIZE = _HEADER.size


def _write_u8(buffer: bytearray, value: int) -> None:
    buffer += _U8.pack(value)


def _write_u32(buffer: bytearray, value: int) -> None:
    buffer += _U32.pack(value)


def _write_str(buffer: bytearray, value: str) -> None:
    data = value.encode("utf-8")
    buffer += _U32.pack(len(data))
    buffer += data


def _write_row(buffer: bytearray, row: RowMap) -> None:
    _write_u32(buffer, len(row))
    for name, value in row.items():
        _write_str(buffer, name)
        _write_str(buffer, value)


def encode_binary(result: DiffResult, context: EngineContext | None = None) -> bytes:
    """
    Encode ``result`` into the binary wire format.

    The output is assembled in a pooled buffer from ``context``; the buffer
    is returned to the pool whether or not encoding succeeds.
    """
    context = context or EngineContext()
    counts = result.counts()

    with trace_operation("encode_binary", component="codec", total_rows=result.total_rows) as span:
        with context.buffer_pool.acquire() as buffer:
            buffer += _HEADER.pack(
                result.total_rows,
                counts["added"],
                counts["removed"],
                counts["modified"],
                counts["unchanged"],
            )

            for entry in result.added:
                _write_u8(buffer, TAG_ADDED)
                _write_str(buffer, entry.key)
                _write_row(buffer, entry.target_row)

            for entry in result.removed:
                _write_u8(buffer, TAG_REMOVED)
                _write_str(buffer, entry.key)
                _write_row(buffer, entry.source_row)

            for entry in result.modified:
                _write_u8(buffer, TAG_MODIFIED)
                _write_str(buffer, entry.key)
                _write_row(buffer, entry.source_row)
                _write_row(buffer, entry.target_row)
                _write_u32(buffer, len(entry.differences))
                for difference in entry.differences:
                    _write_str(buffer, difference.column)
                    _write_str(buffer, difference.old_value)
                    _write_str(buffer, difference.new_value)

            for entry in result.unchanged:
                _write_u8(buffer, TAG_UNCHANGED)
                _write_str(buffer, entry.key)
                _write_row(buffer, entry.row)

            data = bytes(buffer)

        span.set_attribute("bytes", len(data))

    CODEC_BYTES.labels(direction="encoded").inc(len(data))
    logger.debug(f"Encoded {result.total_rows} entries into {len(data)} bytes")
    return data


class _Reader:
    """Bounds-checked cursor over an encoded buffer."""

    def __init__(self, data: bytes):
        self.data = memoryview(data)
        self.position = 0

    def _take(self, size: int) -> memoryview:
        if self.position + size > len(self.data):
            raise BufferOverflowError(position=self.position, requested=size, length=len(self.data))
        chunk = self.data[self.position:self.position + size]
        self.position += size
        return chunk

    def u8(self) -> int:
        return _U8.unpack(self._take(_U8.size))[0]

    def u32(self) -> int:
        return _U32.unpack(self._take(_U32.size))[0]

    def header(self) -> tuple[int, ...]:
        return _HEADER.unpack(self._take(HEADER_SIZE))

    def string(self) -> str:
        size = self.u32()
        start = self.position
        raw = self._take(size)
        try:
            return str(raw, "utf-8")
        except UnicodeDecodeError as e:
            raise CorruptBufferError(f"Invalid UTF-8 string at position {start}: {e}") from e

    def row(self) -> RowMap:
        return {self.string(): self.string() for _ in range(self.u32())}

    def tag(self, expected: int) -> None:
        position = self.position
        tag = self.u8()
        if tag != expected:
            raise CorruptBufferError(
                f"Unexpected row tag {tag} at position {position}, expected {expected}"
            )

    @property
    def remaining(self) -> int:
        return len(self.data) - self.position


def decode_binary(
    buffer: bytes,
    *,
    source_headers: Iterable[str] = (),
    target_headers: Iterable[str] = (),
    key_columns: Iterable[str] = (),
    excluded_columns: Iterable[str] = (),
    mode: str = PRIMARY_KEY_MODE,
) -> DiffResult:
    """
    Decode a buffer produced by ``encode_binary``.

    Decoded modified rows carry empty word diffs. Metadata that the wire
    format does not hold can be attached with the keyword arguments.

    Raises:
        BufferOverflowError: if any read would pass the end of the buffer
        CorruptBufferError: on a tag or count mismatch, invalid UTF-8 or trailing bytes
    """
    with trace_operation("decode_binary", component="codec", bytes=len(buffer)):
        reader = _Reader(buffer)
        total, added_count, removed_count, modified_count, unchanged_count = reader.header()
        if total != added_count + removed_count + modified_count + unchanged_count:
            raise CorruptBufferError(
                f"Header total {total} does not match entry counts "
                f"({added_count} + {removed_count} + {modified_count} + {unchanged_count})"
            )

        added = []
        for _ in range(added_count):
            reader.tag(TAG_ADDED)
            added.append(AddedRow(key=reader.string(), target_row=reader.row()))

        removed = []
        for _ in range(removed_count):
            reader.tag(TAG_REMOVED)
            removed.append(RemovedRow(key=reader.string(), source_row=reader.row()))

        modified = []
        for _ in range(modified_count):
            reader.tag(TAG_MODIFIED)
            key = reader.string()
            source_row = reader.row()
            target_row = reader.row()
            differences = tuple(
                Difference(column=reader.string(), old_value=reader.string(), new_value=reader.string())
                for _ in range(reader.u32())
            )
            modified.append(
                ModifiedRow(key=key, source_row=source_row, target_row=target_row, differences=differences)
            )

        unchanged = []
        for _ in range(unchanged_count):
            reader.tag(TAG_UNCHANGED)
            unchanged.append(UnchangedRow(key=reader.string(), row=reader.row()))

        if reader.remaining:
            raise CorruptBufferError(
                f"{reader.remaining} trailing bytes after the last entry at position {reader.position}"
            )

    CODEC_BYTES.labels(direction="decoded").inc(len(buffer))
    return DiffResult(
        added=tuple(added),
        removed=tuple(removed),
        modified=tuple(modified),
        unchanged=tuple(unchanged),
        source=DatasetMetadata(headers=tuple(source_headers)),
        target=DatasetMetadata(headers=tuple(target_headers)),
        key_columns=tuple(key_columns),
        excluded_columns=tuple(excluded_columns),
        mode=mode,
    )


def recompute_word_diffs(
    result: DiffResult,
    case_sensitive: bool = True,
    ignore_whitespace: bool = False,
) -> DiffResult:
    """Rebuild word diffs of every modified row from its old and new values."""
    modified = tuple(
        replace(
            entry,
            differences=tuple(
                replace(
                    difference,
                    word_diff=diff_words(
                        difference.old_value,
                        difference.new_value,
                        case_sensitive=case_sensitive,
                        ignore_whitespace=ignore_whitespace,
                    ),
                )
                for difference in entry.differences
            ),
        )
        for entry in result.modified
    )
    return replace(result, modified=modified)


__all__ = [
    "HEADER_SIZE",
    "encode_binary",
    "decode_binary",
    "recompute_word_diffs",
]
