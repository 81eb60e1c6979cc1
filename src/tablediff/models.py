"""
Data model for datasets and diff results.

Datasets carry one shared column schema; rows are positional tuples aligned
with it. Diff results render rows as ordered ``dict[str, str]`` maps, which is
the shape the binary codec and the JSON exports carry.
"""

from __future__ import annotations

import typing
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field

from tablediff.errors import SchemaError

__all__ = (
    "PRIMARY_KEY_MODE",
    "CONTENT_MATCH_MODE",
    "Row",
    "RowMap",
    "Dataset",
    "DatasetMetadata",
    "WordSpan",
    "Difference",
    "AddedRow",
    "RemovedRow",
    "ModifiedRow",
    "UnchangedRow",
    "DiffEntry",
    "DiffResult",
)

PRIMARY_KEY_MODE = "primary-key"
CONTENT_MATCH_MODE = "content-match"

Row: typing.TypeAlias = tuple[str | None, ...]
RowMap: typing.TypeAlias = dict[str, str]


@dataclass(frozen=True)
class Dataset:
    """
    An immutable table: ordered unique headers plus positional rows.

    Rows shorter than the header list are padded with ``None``; longer rows
    are rejected.
    """

    headers: tuple[str, ...]
    rows: tuple[Row, ...] = ()
    _index: dict[str, int] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        headers = tuple(self.headers)
        index: dict[str, int] = {}
        for position, name in enumerate(headers):
            if name in index:
                raise SchemaError(f'Duplicate header "{name}" in dataset.')
            index[name] = position

        width = len(headers)
        rows = []
        for row_number, row in enumerate(self.rows, start=1):
            row = tuple(row)
            if len(row) > width:
                raise SchemaError(
                    f"Row {row_number} has {len(row)} values but only {width} headers are declared."
                )
            if len(row) < width:
                row = row + (None,) * (width - len(row))
            rows.append(row)

        object.__setattr__(self, "headers", headers)
        object.__setattr__(self, "rows", tuple(rows))
        object.__setattr__(self, "_index", index)

    @classmethod
    def from_records(
        cls,
        headers: Iterable[str],
        records: Iterable[Mapping[str, str | None] | Sequence[str | None]],
    ) -> Dataset:
        """
        Build a dataset from mappings keyed by header or from positional sequences.

        Raises:
            SchemaError: if a mapping names a column that is not in ``headers``
        """
        headers = tuple(headers)
        declared = set(headers)
        rows = []
        for row_number, record in enumerate(records, start=1):
            if isinstance(record, Mapping):
                undeclared = [name for name in record if name not in declared]
                if undeclared:
                    raise SchemaError(
                        f"Row {row_number} references undeclared column(s): "
                        f"{', '.join(map(str, undeclared))}"
                    )
                rows.append(tuple(record.get(name) for name in headers))
            else:
                rows.append(tuple(record))
        return cls(headers=headers, rows=tuple(rows))

    def __len__(self) -> int:
        return len(self.rows)

    def has_column(self, column: str) -> bool:
        return column in self._index

    def column_index(self, column: str) -> int:
        try:
            return self._index[column]
        except KeyError:
            raise SchemaError(f'Column "{column}" is not declared in this dataset.') from None

    def value(self, row: Row, column: str) -> str | None:
        return row[self.column_index(column)]

    def row_map(self, row: Row) -> RowMap:
        return {name: "" if value is None else value for name, value in zip(self.headers, row)}

    def metadata(self) -> DatasetMetadata:
        return DatasetMetadata(headers=self.headers)


@dataclass(frozen=True)
class DatasetMetadata:
    headers: tuple[str, ...] = ()


@dataclass(frozen=True)
class WordSpan:
    """A run of text marked unchanged, added or removed."""

    value: str
    added: bool = False
    removed: bool = False

    def __post_init__(self) -> None:
        if self.added and self.removed:
            raise ValueError("A word span cannot be both added and removed.")


@dataclass(frozen=True)
class Difference:
    column: str
    old_value: str
    new_value: str
    word_diff: tuple[WordSpan, ...] = ()


@dataclass(frozen=True)
class AddedRow:
    key: str
    target_row: RowMap


@dataclass(frozen=True)
class RemovedRow:
    key: str
    source_row: RowMap


@dataclass(frozen=True)
class ModifiedRow:
    key: str
    source_row: RowMap
    target_row: RowMap
    differences: tuple[Difference, ...]


@dataclass(frozen=True)
class UnchangedRow:
    key: str
    row: RowMap


DiffEntry: typing.TypeAlias = AddedRow | RemovedRow | ModifiedRow | UnchangedRow


@dataclass(frozen=True)
class DiffResult:
    added: tuple[AddedRow, ...] = ()
    removed: tuple[RemovedRow, ...] = ()
    modified: tuple[ModifiedRow, ...] = ()
    unchanged: tuple[UnchangedRow, ...] = ()
    source: DatasetMetadata = DatasetMetadata()
    target: DatasetMetadata = DatasetMetadata()
    key_columns: tuple[str, ...] = ()
    excluded_columns: tuple[str, ...] = ()
    mode: str = PRIMARY_KEY_MODE

    @property
    def total_rows(self) -> int:
        return len(self.added) + len(self.removed) + len(self.modified) + len(self.unchanged)

    def counts(self) -> dict[str, int]:
        return {
            "added": len(self.added),
            "removed": len(self.removed),
            "modified": len(self.modified),
            "unchanged": len(self.unchanged),
        }

    def to_dict(self) -> dict[str, typing.Any]:
        """JSON-safe mapping with camelCase keys."""
        return {
            "added": [{"key": e.key, "targetRow": dict(e.target_row)} for e in self.added],
            "removed": [{"key": e.key, "sourceRow": dict(e.source_row)} for e in self.removed],
            "modified": [
                {
                    "key": e.key,
                    "sourceRow": dict(e.source_row),
                    "targetRow": dict(e.target_row),
                    "differences": [_difference_to_dict(d) for d in e.differences],
                }
                for e in self.modified
            ],
            "unchanged": [{"key": e.key, "row": dict(e.row)} for e in self.unchanged],
            "source": {"headers": list(self.source.headers)},
            "target": {"headers": list(self.target.headers)},
            "keyColumns": list(self.key_columns),
            "excludedColumns": list(self.excluded_columns),
            "mode": self.mode,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, typing.Any]) -> DiffResult:
        return cls(
            added=tuple(AddedRow(key=e["key"], target_row=dict(e["targetRow"])) for e in data.get("added", ())),
            removed=tuple(
                RemovedRow(key=e["key"], source_row=dict(e["sourceRow"])) for e in data.get("removed", ())
            ),
            modified=tuple(
                ModifiedRow(
                    key=e["key"],
                    source_row=dict(e["sourceRow"]),
                    target_row=dict(e["targetRow"]),
                    differences=tuple(_difference_from_dict(d) for d in e.get("differences", ())),
                )
                for e in data.get("modified", ())
            ),
            unchanged=tuple(UnchangedRow(key=e["key"], row=dict(e["row"])) for e in data.get("unchanged", ())),
            source=DatasetMetadata(headers=tuple(data.get("source", {}).get("headers", ()))),
            target=DatasetMetadata(headers=tuple(data.get("target", {}).get("headers", ()))),
            key_columns=tuple(data.get("keyColumns", ())),
            excluded_columns=tuple(data.get("excludedColumns", ())),
            mode=data.get("mode", PRIMARY_KEY_MODE),
        )


def _difference_to_dict(difference: Difference) -> dict[str, typing.Any]:
    return {
        "column": difference.column,
        "oldValue": difference.old_value,
        "newValue": difference.new_value,
        "diff": [
            {"added": span.added, "removed": span.removed, "value": span.value}
            for span in difference.word_diff
        ],
    }


def _difference_from_dict(data: Mapping[str, typing.Any]) -> Difference:
    return Difference(
        column=data["column"],
        old_value=data["oldValue"],
        new_value=data["newValue"],
        word_diff=tuple(
            WordSpan(value=span["value"], added=span["added"], removed=span["removed"])
            for span in data.get("diff", ())
        ),
    )
