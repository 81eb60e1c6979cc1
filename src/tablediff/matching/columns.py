"""
Column selection and per-row value comparison shared by both matchers.
"""

from collections.abc import Sequence
from typing import NamedTuple

from tablediff.config import DiffConfig
from tablediff.models import Dataset, Difference, Row
from tablediff.normalize import normalize
from tablediff.word_diff import diff_words


class ComparedColumn(NamedTuple):
    name: str
    source_index: int
    target_index: int


def compared_columns(
    source: Dataset,
    target_headers: Sequence[str],
    excluded: frozenset[str],
) -> list[ComparedColumn]:
    """Non-excluded source headers that also exist in the target, in source order."""
    target_positions = {name: i for i, name in enumerate(target_headers)}
    return [
        ComparedColumn(name, source_index, target_positions[name])
        for source_index, name in enumerate(source.headers)
        if name not in excluded and name in target_positions
    ]


def _raw(value: str | None) -> str:
    return "" if value is None else value


def values_equal(source_value: str | None, target_value: str | None, config: DiffConfig) -> bool:
    return normalize(
        source_value, config.case_sensitive, config.ignore_whitespace, config.ignore_empty_vs_null
    ) == normalize(
        target_value, config.case_sensitive, config.ignore_whitespace, config.ignore_empty_vs_null
    )


def row_differences(
    source_row: Row,
    target_row: Row,
    columns: Sequence[ComparedColumn],
    config: DiffConfig,
) -> tuple[Difference, ...]:
    """Differences for every compared column whose normalized values disagree."""
    differences = []
    for column in columns:
        old = source_row[column.source_index]
        new = target_row[column.target_index]
        if values_equal(old, new, config):
            continue
        differences.append(
            Difference(
                column=column.name,
                old_value=_raw(old),
                new_value=_raw(new),
                word_diff=diff_words(
                    _raw(old),
                    _raw(new),
                    case_sensitive=config.case_sensitive,
                    ignore_whitespace=config.ignore_whitespace,
                ),
            )
        )
    return tuple(differences)


__all__ = [
    "ComparedColumn",
    "compared_columns",
    "values_equal",
    "row_differences",
]
