"""
tablediff: compare two tabular datasets row by row.

Rows are matched either on a composite primary key or, when no stable key
exists, by whole-row similarity. Results list added, removed, modified (with
word-level differences) and unchanged rows, and can be produced in chunks or
serialized to a compact binary format.
"""

from tablediff.config import DiffConfig, EngineSettings
from tablediff.context import EngineContext
from tablediff.engine import (
    begin_chunked_diff,
    compare,
    compare_by_content,
    compare_by_primary_key,
    decode_binary,
    encode_binary,
    merge_chunks,
)
from tablediff.errors import (
    BufferOverflowError,
    CorruptBufferError,
    DiffConfigError,
    DuplicateKeyError,
    MissingKeyColumnError,
    SchemaError,
    TableDiffError,
    UnsupportedModeError,
)
from tablediff.models import (
    CONTENT_MATCH_MODE,
    PRIMARY_KEY_MODE,
    AddedRow,
    Dataset,
    DatasetMetadata,
    Difference,
    DiffResult,
    ModifiedRow,
    RemovedRow,
    UnchangedRow,
    WordSpan,
)

__version__ = "1.0.0"

__all__ = [
    "__version__",
    "PRIMARY_KEY_MODE",
    "CONTENT_MATCH_MODE",
    "Dataset",
    "DatasetMetadata",
    "DiffResult",
    "AddedRow",
    "RemovedRow",
    "ModifiedRow",
    "UnchangedRow",
    "Difference",
    "WordSpan",
    "DiffConfig",
    "EngineSettings",
    "EngineContext",
    "compare",
    "compare_by_primary_key",
    "compare_by_content",
    "encode_binary",
    "decode_binary",
    "begin_chunked_diff",
    "merge_chunks",
    "TableDiffError",
    "SchemaError",
    "DiffConfigError",
    "MissingKeyColumnError",
    "DuplicateKeyError",
    "UnsupportedModeError",
    "BufferOverflowError",
    "CorruptBufferError",
]
