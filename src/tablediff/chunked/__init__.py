"""
Chunked execution of primary-key comparisons.
"""

from .coordinator import ChunkCoordinator, chunk_ranges, merge_results
from .store import ChunkStore, FileChunkStore, InMemoryChunkStore, make_chunk_id, parse_chunk_id

__all__ = [
    "ChunkCoordinator",
    "chunk_ranges",
    "merge_results",
    "ChunkStore",
    "InMemoryChunkStore",
    "FileChunkStore",
    "make_chunk_id",
    "parse_chunk_id",
]
