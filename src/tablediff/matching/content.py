"""
Content matching for datasets without a usable key.

Each source row, in order, is matched greedily against the pool of unmatched
target rows: an exact fingerprint match first, then the best column-overlap
score. The result depends on source row order; no global assignment is
attempted.
"""

import logging
from collections import Counter, deque
from collections.abc import Generator

from tablediff.config import DiffConfig
from tablediff.context import EngineContext
from tablediff.matching.columns import compared_columns, row_differences
from tablediff.metrics import ROWS_PROCESSED
from tablediff.models import (
    CONTENT_MATCH_MODE,
    AddedRow,
    Dataset,
    DiffResult,
    ModifiedRow,
    RemovedRow,
    Row,
    UnchangedRow,
)
from tablediff.normalize import row_fingerprint
from tablediff.progress import Progress, ProgressSink, drive

logger = logging.getLogger(__name__)

Fingerprint = tuple[str, ...]

SIMILARITY_THRESHOLD = 0.5
MATCH_PHASE_END = 80.0


class ContentMatcher:
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

        # Same-width targets with different names are read under source headers
        self.target_view = target
        if target.headers != source.headers and len(target.headers) == len(source.headers):
            logger.info(
                f"Target headers differ from source but have the same width; "
                f"reading target columns positionally as {list(source.headers)}"
            )
            self.target_view = Dataset(headers=source.headers, rows=target.rows)

        self.columns = compared_columns(source, self.target_view.headers, config.excluded)

    def compare(self, on_progress: ProgressSink | None = None) -> DiffResult:
        return drive(self.iter_steps(), on_progress)

    def _fingerprint(self, row: Row, indices: list[int]) -> Fingerprint:
        return row_fingerprint(
            (row[i] for i in indices),
            self.config.case_sensitive,
            self.config.ignore_whitespace,
            self.config.ignore_empty_vs_null,
        )

    def iter_steps(self) -> Generator[Progress, None, DiffResult]:
        logger.info(
            f"Starting content comparison: "
            f"{len(self.source)} source rows, {len(self.target)} target rows"
        )

        source_indices = [column.source_index for column in self.columns]
        target_indices = [column.target_index for column in self.columns]

        target_rows = self.target_view.rows
        pool: dict[int, None] = dict.fromkeys(range(len(target_rows)))
        by_fingerprint: dict[Fingerprint, deque[int]] = {}
        # One value -> target indices map per compared column, indices ascending
        by_value: list[dict[str, list[int]]] = [{} for _ in self.columns]
        for index, row in enumerate(target_rows):
            fingerprint = self._fingerprint(row, target_indices)
            by_fingerprint.setdefault(fingerprint, deque()).append(index)
            for position, value in enumerate(fingerprint):
                by_value[position].setdefault(value, []).append(index)
        ROWS_PROCESSED.labels(side="target").inc(len(target_rows))

        modified = []
        unchanged = []
        unmatched_source: list[Row] = []

        source_rows = self.source.rows
        total = len(source_rows)
        batch_size = self.context.settings.content_batch_size

        for batch_start in range(0, total, batch_size):
            batch_stop = min(batch_start + batch_size, total)
            for position in range(batch_start, batch_stop):
                source_row = source_rows[position]
                label = f"Row {position + 1}"

                fingerprint = self._fingerprint(source_row, source_indices)
                exact = self._take_exact(by_fingerprint, pool, fingerprint)
                if exact is not None:
                    unchanged.append(UnchangedRow(key=label, row=self.source.row_map(source_row)))
                    continue

                best_index, best_score = self._best_candidate(by_value, pool, fingerprint)

                if best_index is not None and best_score >= 1.0:
                    del pool[best_index]
                    unchanged.append(UnchangedRow(key=label, row=self.source.row_map(source_row)))
                elif best_index is not None and best_score > SIMILARITY_THRESHOLD:
                    del pool[best_index]
                    target_row = target_rows[best_index]
                    modified.append(
                        ModifiedRow(
                            key=label,
                            source_row=self.source.row_map(source_row),
                            target_row=self.target_view.row_map(target_row),
                            differences=row_differences(source_row, target_row, self.columns, self.config),
                        )
                    )
                else:
                    unmatched_source.append(source_row)

            ROWS_PROCESSED.labels(side="source").inc(batch_stop - batch_start)
            yield Progress(
                MATCH_PHASE_END * batch_stop / total,
                f"Matching rows ({batch_stop}/{total})",
            )

        added = tuple(
            AddedRow(key=f"Added {n}", target_row=self.target_view.row_map(target_rows[index]))
            for n, index in enumerate(pool, start=1)
        )
        removed = tuple(
            RemovedRow(key=f"Removed {n}", source_row=self.source.row_map(row))
            for n, row in enumerate(unmatched_source, start=1)
        )
        yield Progress(100.0, "Content comparison complete")

        logger.info(
            f"Content comparison complete: "
            f"{len(added)} added, {len(removed)} removed, "
            f"{len(modified)} modified, {len(unchanged)} unchanged"
        )
        return DiffResult(
            added=added,
            removed=removed,
            modified=tuple(modified),
            unchanged=tuple(unchanged),
            source=self.source.metadata(),
            target=self.target.metadata(),
            key_columns=(),
            excluded_columns=self.config.excluded_columns,
            mode=CONTENT_MATCH_MODE,
        )

    @staticmethod
    def _take_exact(
        by_fingerprint: dict[Fingerprint, deque[int]],
        pool: dict[int, None],
        fingerprint: Fingerprint,
    ) -> int | None:
        """Pop the first pooled target index with ``fingerprint``, skipping already matched ones."""
        candidates = by_fingerprint.get(fingerprint)
        while candidates:
            index = candidates.popleft()
            if index in pool:
                del pool[index]
                return index
        return None

    def _best_candidate(
        self,
        by_value: list[dict[str, list[int]]],
        pool: dict[int, None],
        fingerprint: Fingerprint,
    ) -> tuple[int | None, float]:
        """
        Highest-scoring pooled target for a source row and its score.

        Only targets sharing at least one column value can score above zero,
        so the value index yields every candidate. Ties go to the lowest
        target index, which is the first one in pool order.
        """
        if not self.columns:
            return None, 0.0
        matches: Counter[int] = Counter()
        for position, value in enumerate(fingerprint):
            matches.update(index for index in by_value[position].get(value, ()) if index in pool)
        if not matches:
            return None, 0.0
        best_index = min(matches, key=lambda index: (-matches[index], index))
        return best_index, matches[best_index] / len(self.columns)


__all__ = ["SIMILARITY_THRESHOLD", "ContentMatcher"]
