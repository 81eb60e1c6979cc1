"""
Chunk stores for partial results of chunked comparisons.

A store receives each committed partial under its chunk id
(``"<diff_id>-chunk-<index>"``) and returns every partial of a diff ordered
by chunk index.
"""

import json
import logging
import re
import shutil
import threading
from pathlib import Path
from typing import Protocol, runtime_checkable

from opentelemetry import trace
from prometheus_client import Counter

from tablediff.errors import DiffConfigError
from tablediff.metrics import get_or_create_metric
from tablediff.models import DiffResult
from tablediff.utils.tracing import trace_operation

logger = logging.getLogger(__name__)

CHUNK_ID_SEPARATOR = "-chunk-"
_DIFF_ID_RE = re.compile(r"[A-Za-z0-9][A-Za-z0-9._-]*")

CHUNK_STORE_OPERATIONS = get_or_create_metric(
    lambda: Counter(
        "tablediff_chunk_store_operations_total",
        "Chunk store operations",
        ["operation"],  # put, get_all, delete_all
    ),
    "tablediff_chunk_store_operations",
)


def make_chunk_id(diff_id: str, index: int) -> str:
    return f"{diff_id}{CHUNK_ID_SEPARATOR}{index}"


def parse_chunk_id(chunk_id: str) -> tuple[str, int]:
    """
    Split a chunk id into ``(diff_id, index)``.

    Raises:
        DiffConfigError: if ``chunk_id`` does not follow the chunk id format
    """
    diff_id, separator, index = chunk_id.rpartition(CHUNK_ID_SEPARATOR)
    if not separator or not diff_id or not index.isdigit():
        raise DiffConfigError(f"Malformed chunk id '{chunk_id}'")
    return diff_id, int(index)


@runtime_checkable
class ChunkStore(Protocol):
    def put(self, chunk_id: str, partial: DiffResult) -> None: ...

    def get_all(self, diff_id: str) -> list[DiffResult]: ...

    def delete_all(self, diff_id: str) -> None: ...


class InMemoryChunkStore:
    """Chunk store backed by a dict; suitable for tests and single-process runs."""

    def __init__(self):
        self._chunks: dict[str, dict[int, DiffResult]] = {}
        self._lock = threading.Lock()

    def put(self, chunk_id: str, partial: DiffResult) -> None:
        diff_id, index = parse_chunk_id(chunk_id)
        with self._lock:
            self._chunks.setdefault(diff_id, {})[index] = partial
        CHUNK_STORE_OPERATIONS.labels(operation="put").inc()

    def get_all(self, diff_id: str) -> list[DiffResult]:
        with self._lock:
            chunks = self._chunks.get(diff_id, {})
            ordered = [chunks[index] for index in sorted(chunks)]
        CHUNK_STORE_OPERATIONS.labels(operation="get_all").inc()
        return ordered

    def delete_all(self, diff_id: str) -> None:
        with self._lock:
            self._chunks.pop(diff_id, None)
        CHUNK_STORE_OPERATIONS.labels(operation="delete_all").inc()


class FileChunkStore:
    """
    Chunk store writing one JSON document per chunk.

    Files live at ``<state_dir>/<diff_id>/chunk-<index>.json`` where the diff id
    must be a plain file name (letters, digits, dots, underscores, hyphens).
    """

    def __init__(self, state_dir: str | Path = "./tablediff_chunks"):
        self.state_dir = Path(state_dir)
        self.state_dir.mkdir(parents=True, exist_ok=True)
        logger.info(f"Initialized chunk store with state dir: {self.state_dir}")

    def put(self, chunk_id: str, partial: DiffResult) -> None:
        diff_id, index = parse_chunk_id(chunk_id)
        with trace_operation(
            "chunk_store_put",
            kind=trace.SpanKind.INTERNAL,
            diff_id=diff_id,
            chunk_index=index,
        ):
            diff_dir = self._diff_dir(diff_id)
            diff_dir.mkdir(parents=True, exist_ok=True)
            chunk_file = diff_dir / f"chunk-{index}.json"

            try:
                with open(chunk_file, "w", encoding="utf-8") as f:
                    json.dump(partial.to_dict(), f, indent=2)
            except OSError as e:
                logger.error(f"Failed to save chunk {chunk_id}: {e}")
                raise

            CHUNK_STORE_OPERATIONS.labels(operation="put").inc()
            logger.debug(f"Saved chunk {chunk_id} to {chunk_file}")

    def get_all(self, diff_id: str) -> list[DiffResult]:
        with trace_operation("chunk_store_get_all", kind=trace.SpanKind.INTERNAL, diff_id=diff_id):
            diff_dir = self._diff_dir(diff_id)
            if not diff_dir.exists():
                logger.debug(f"No stored chunks for diff {diff_id}")
                return []

            indexed = []
            for chunk_file in diff_dir.glob("chunk-*.json"):
                index = chunk_file.stem.removeprefix("chunk-")
                if not index.isdigit():
                    continue
                with open(chunk_file, encoding="utf-8") as f:
                    indexed.append((int(index), DiffResult.from_dict(json.load(f))))

            CHUNK_STORE_OPERATIONS.labels(operation="get_all").inc()
            return [partial for _, partial in sorted(indexed, key=lambda item: item[0])]

    def delete_all(self, diff_id: str) -> None:
        diff_dir = self._diff_dir(diff_id)
        if diff_dir.exists():
            shutil.rmtree(diff_dir)
            logger.info(f"Cleared stored chunks for diff {diff_id}")
        CHUNK_STORE_OPERATIONS.labels(operation="delete_all").inc()

    def list_diffs(self) -> list[str]:
        return sorted(path.name for path in self.state_dir.iterdir() if path.is_dir())

    def _diff_dir(self, diff_id: str) -> Path:
        # Ids map one-to-one onto directory names, so nothing is rewritten
        if not _DIFF_ID_RE.fullmatch(diff_id):
            raise DiffConfigError(
                f"Invalid diff id '{diff_id}': use letters, digits, '.', '_' or '-', "
                f"starting with a letter or digit"
            )
        return self.state_dir / diff_id


__all__ = [
    "ChunkStore",
    "InMemoryChunkStore",
    "FileChunkStore",
    "make_chunk_id",
    "parse_chunk_id",
]
