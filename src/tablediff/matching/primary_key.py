"""
Primary-key matching.

Rows are joined on a composite key built from the configured key columns.
Key maps are built in batches (optionally fork-joined on a thread pool) and
then target rows are classified as added, modified or unchanged; source keys
missing from the target are removed.
"""

import logging
from collections.abc import Generator

from tablediff.config import DiffConfig
from tablediff.context import EngineContext
from tablediff.errors import DiffConfigError, MissingKeyColumnError
from tablediff.matching.columns import compared_columns, row_differences
from tablediff.matching.parallel import KeyMap, extraction_pool, merge_keys
from tablediff.metrics import ROWS_PROCESSED
from tablediff.models import (
    PRIMARY_KEY_MODE,
    AddedRow,
    Dataset,
    DiffResult,
    ModifiedRow,
    RemovedRow,
    UnchangedRow,
)
from tablediff.normalize import composite_key, key_label
from tablediff.progress import Progress, ProgressSink, drive

logger = logging.getLogger(__name__)

MAP_PHASE_END = 50.0


class PrimaryKeyMatcher:
    """
    Compares two datasets joined on their key columns.

    ``iter_steps()`` processes one batch per step; ``compare()`` runs every
    step and returns the finished result.
    """

    def __init__(
        self,
        source: Dataset,
        target: Dataset,
        config: DiffConfig,
        context: EngineContext | None = None,
    ):
        self.source = source
        self.target = target
        self.config = config
        self.context = context or EngineContext()
        self.columns = compared_columns(source, target.headers, config.excluded)

        self._source_map: KeyMap | None = None
        self._target_map: KeyMap | None = None

    def validate_key_columns(self) -> None:
        """
        Check every key column exists in source, then in target.

        Raises:
            DiffConfigError: if no key columns are configured
            MissingKeyColumnError: for the first key column missing on a side
        """
        if not self.config.key_columns:
            raise DiffConfigError("Primary-key comparison requires at least one key column.")
        for side, dataset in (("source", self.source), ("target", self.target)):
            for column in self.config.key_columns:
                if not dataset.has_column(column):
                    raise MissingKeyColumnError(column=column, side=side)

    def compare(self, on_progress: ProgressSink | None = None) -> DiffResult:
        return drive(self.iter_steps(), on_progress)

    def iter_steps(self) -> Generator[Progress, None, DiffResult]:
        logger.info(
            f"Starting primary-key comparison: "
            f"{len(self.source)} source rows, {len(self.target)} target rows, "
            f"key={list(self.config.key_columns)}"
        )

        yield from self.build_maps()

        removed = self.removed_rows()
        partial = yield from self._iter_compare(0, len(self.target), report=True)

        result = DiffResult(
            added=partial.added,
            removed=removed,
            modified=partial.modified,
            unchanged=partial.unchanged,
            source=partial.source,
            target=partial.target,
            key_columns=partial.key_columns,
            excluded_columns=partial.excluded_columns,
            mode=PRIMARY_KEY_MODE,
        )

        logger.info(
            f"Primary-key comparison complete: "
            f"{len(result.added)} added, {len(result.removed)} removed, "
            f"{len(result.modified)} modified, {len(result.unchanged)} unchanged"
        )
        return result

    def build_maps(self) -> Generator[Progress, None, None]:
        """Build source then target key maps, reporting 0-50% progress."""
        if self._source_map is not None and self._target_map is not None:
            return

        self.validate_key_columns()

        total = len(self.source) + len(self.target)
        processed = 0
        maps: dict[str, KeyMap] = {}
        settings = self.context.settings

        with extraction_pool(self.context) as extractor:
            for side, dataset in (("source", self.source), ("target", self.target)):
                key_indices = [dataset.column_index(column) for column in self.config.key_columns]
                key_map: KeyMap = {}
                for start, keys in extractor.batches(dataset.rows, key_indices, settings.pk_batch_size):
                    merge_keys(key_map, keys, start, side)
                    processed += len(keys)
                    ROWS_PROCESSED.labels(side=side).inc(len(keys))
                    yield Progress(
                        MAP_PHASE_END * processed / total,
                        f"Indexing {side} keys ({processed}/{total})",
                    )
                maps[side] = key_map

        self._source_map = maps["source"]
        self._target_map = maps["target"]
        logger.debug(
            f"Key maps built: {len(self._source_map)} source keys, {len(self._target_map)} target keys"
        )
        if total == 0:
            yield Progress(MAP_PHASE_END, "Indexing keys (0/0)")

    def removed_rows(self) -> tuple[RemovedRow, ...]:
        """Source rows whose key is absent from the target, in source order."""
        drive(self.build_maps())
        return tuple(
            RemovedRow(key=key_label(key), source_row=self.source.row_map(self.source.rows[index]))
            for key, index in self._source_map.items()
            if key not in self._target_map
        )

    def compare_range(self, start: int, stop: int) -> DiffResult:
        """
        Compare target rows in ``[start, stop)`` against the full source.

        The returned partial never carries removed rows.
        """
        drive(self.build_maps())
        return drive(self._iter_compare(start, stop, report=False))

    def _iter_compare(
        self, start: int, stop: int, report: bool
    ) -> Generator[Progress, None, DiffResult]:
        added = []
        modified = []
        unchanged = []

        target_rows = self.target.rows
        key_indices = [self.target.column_index(column) for column in self.config.key_columns]
        batch_size = self.context.settings.pk_batch_size
        total = stop - start

        for batch_start in range(start, stop, batch_size):
            batch_stop = min(batch_start + batch_size, stop)
            for index in range(batch_start, batch_stop):
                target_row = target_rows[index]
                key = composite_key(target_row[k] for k in key_indices)
                label = key_label(key)
                source_index = self._source_map.get(key)

                if source_index is None:
                    added.append(AddedRow(key=label, target_row=self.target.row_map(target_row)))
                    continue

                source_row = self.source.rows[source_index]
                differences = row_differences(source_row, target_row, self.columns, self.config)
                if differences:
                    modified.append(
                        ModifiedRow(
                            key=label,
                            source_row=self.source.row_map(source_row),
                            target_row=self.target.row_map(target_row),
                            differences=differences,
                        )
                    )
                else:
                    unchanged.append(UnchangedRow(key=label, row=self.source.row_map(source_row)))

            if report:
                done = batch_stop - start
                yield Progress(
                    MAP_PHASE_END + (100.0 - MAP_PHASE_END) * done / total,
                    f"Comparing rows ({done}/{total})",
                )

        if report and total == 0:
            yield Progress(100.0, "Comparing rows (0/0)")

        return DiffResult(
            added=tuple(added),
            modified=tuple(modified),
            unchanged=tuple(unchanged),
            source=self.source.metadata(),
            target=self.target.metadata(),
            key_columns=self.config.key_columns,
            excluded_columns=self.config.excluded_columns,
            mode=PRIMARY_KEY_MODE,
        )


__all__ = ["PrimaryKeyMatcher"]
