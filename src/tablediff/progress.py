"""
Progress reporting for step-driven comparisons.
"""

from collections.abc import Callable, Generator
from typing import NamedTuple, TypeVar

T = TypeVar("T")

ProgressSink = Callable[[float, str], None]


class Progress(NamedTuple):
    percent: float
    message: str


def drive(steps: Generator[Progress, None, T], on_progress: ProgressSink | None = None) -> T:
    """
    Run a step generator to completion and return its result.

    Each yielded ``Progress`` is forwarded to ``on_progress`` when given.
    """
    while True:
        try:
            progress = next(steps)
        except StopIteration as stop:
            return stop.value
        if on_progress is not None:
            on_progress(progress.percent, progress.message)


__all__ = ["Progress", "ProgressSink", "drive"]
