"""
Comparison configuration and engine tuning settings.

``DiffConfig`` describes *what* to compare; ``EngineSettings`` describes *how*
the engine executes it (batch sizes, worker counts, pool sizes). Settings can
be read from ``TABLEDIFF_*`` environment variables and overridden by the CLI.
"""

import os
from dataclasses import dataclass, replace

from tablediff.errors import DiffConfigError, UnsupportedModeError
from tablediff.models import CONTENT_MATCH_MODE, PRIMARY_KEY_MODE

MODES = (PRIMARY_KEY_MODE, CONTENT_MATCH_MODE)

DEFAULT_PK_BATCH_SIZE = 1000
DEFAULT_CONTENT_BATCH_SIZE = 100
DEFAULT_MAX_WORKERS = 4
DEFAULT_CHUNK_SIZE = 10000
DEFAULT_BUFFER_POOL_SIZE = 10


@dataclass(frozen=True)
class DiffConfig:
    """Options for a single comparison."""

    mode: str = PRIMARY_KEY_MODE
    key_columns: tuple[str, ...] = ()
    case_sensitive: bool = False
    ignore_whitespace: bool = False
    ignore_empty_vs_null: bool = False
    excluded_columns: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "key_columns", tuple(self.key_columns))
        object.__setattr__(self, "excluded_columns", tuple(self.excluded_columns))

        if self.mode not in MODES:
            raise UnsupportedModeError(
                f"Unknown comparison mode '{self.mode}'. Expected one of: {', '.join(MODES)}"
            )
        if self.mode == PRIMARY_KEY_MODE and not self.key_columns:
            raise DiffConfigError("Primary-key comparison requires at least one key column.")
        if len(set(self.key_columns)) != len(self.key_columns):
            raise DiffConfigError("Key columns must not be repeated.")

    @property
    def excluded(self) -> frozenset[str]:
        return frozenset(self.excluded_columns)


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise DiffConfigError(f"{name} must be an integer, got '{raw}'") from None


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    return raw.lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class EngineSettings:
    pk_batch_size: int = DEFAULT_PK_BATCH_SIZE
    content_batch_size: int = DEFAULT_CONTENT_BATCH_SIZE
    max_workers: int = DEFAULT_MAX_WORKERS
    parallel_enabled: bool = True
    chunk_size: int = DEFAULT_CHUNK_SIZE
    buffer_pool_size: int = DEFAULT_BUFFER_POOL_SIZE

    def __post_init__(self) -> None:
        for name in (
            "pk_batch_size",
            "content_batch_size",
            "max_workers",
            "chunk_size",
            "buffer_pool_size",
        ):
            value = getattr(self, name)
            if value < 1:
                raise DiffConfigError(f"{name} must be at least 1, got {value}")

    @classmethod
    def from_env(cls) -> "EngineSettings":
        """
        Read settings from environment variables.

        Environment variables:
            TABLEDIFF_PK_BATCH_SIZE: rows per key-extraction batch (default: 1000)
            TABLEDIFF_CONTENT_BATCH_SIZE: source rows per content step (default: 100)
            TABLEDIFF_MAX_WORKERS: concurrent key-extraction batches (default: 4)
            TABLEDIFF_PARALLEL: enable the thread pool (default: true)
            TABLEDIFF_CHUNK_SIZE: target rows per chunk (default: 10000)
            TABLEDIFF_BUFFER_POOL_SIZE: pooled encode buffers (default: 10)
        """
        return cls(
            pk_batch_size=_env_int("TABLEDIFF_PK_BATCH_SIZE", DEFAULT_PK_BATCH_SIZE),
            content_batch_size=_env_int("TABLEDIFF_CONTENT_BATCH_SIZE", DEFAULT_CONTENT_BATCH_SIZE),
            max_workers=_env_int("TABLEDIFF_MAX_WORKERS", DEFAULT_MAX_WORKERS),
            parallel_enabled=_env_bool("TABLEDIFF_PARALLEL", True),
            chunk_size=_env_int("TABLEDIFF_CHUNK_SIZE", DEFAULT_CHUNK_SIZE),
            buffer_pool_size=_env_int("TABLEDIFF_BUFFER_POOL_SIZE", DEFAULT_BUFFER_POOL_SIZE),
        )

    def with_overrides(self, **overrides) -> "EngineSettings":
        """Return a copy with every non-None override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


__all__ = [
    "MODES",
    "DiffConfig",
    "EngineSettings",
]
