"""
Pytest configuration and shared fixtures for tablediff tests.
"""

import logging
import os

import pytest

from tablediff.config import EngineSettings
from tablediff.context import EngineContext
from tablediff.models import Dataset

_ENV_PREFIXES = ("TABLEDIFF_", "LOG_", "OTLP_ENDPOINT", "TRACE_CONSOLE")


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "slow: mark test as slow running")
    config.addinivalue_line("markers", "property: mark test as property-based")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Drop settings and logging variables so tests see engine defaults."""
    for key in list(os.environ):
        if key.startswith(_ENV_PREFIXES):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def restore_root_logger():
    """Put back the root logger handlers after a test that calls setup_logging."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield root
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


@pytest.fixture
def sequential_context() -> EngineContext:
    """Context that never starts a thread pool."""
    return EngineContext(EngineSettings(parallel_enabled=False))


@pytest.fixture
def parallel_context() -> EngineContext:
    """Context with small batches so several batches run concurrently."""
    return EngineContext(EngineSettings(pk_batch_size=2, max_workers=3))


@pytest.fixture
def people_source() -> Dataset:
    return Dataset(
        headers=("id", "name", "city"),
        rows=(
            ("1", "Alice", "Paris"),
            ("2", "Bob", "Berlin"),
            ("3", "Carol", "Rome"),
        ),
    )


@pytest.fixture
def people_target() -> Dataset:
    return Dataset(
        headers=("id", "name", "city"),
        rows=(
            ("1", "Alice", "Paris"),
            ("2", "Bob", "Munich"),
            ("4", "Dave", "Oslo"),
        ),
    )
