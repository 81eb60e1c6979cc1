"""
Unit tests for tablediff.chunked.store
"""

import json

import pytest

from tablediff.chunked.store import (
    ChunkStore,
    FileChunkStore,
    InMemoryChunkStore,
    make_chunk_id,
    parse_chunk_id,
)
from tablediff.errors import DiffConfigError
from tablediff.models import AddedRow, Difference, DiffResult, ModifiedRow, WordSpan


def _partial(key: str) -> DiffResult:
    return DiffResult(
        added=(AddedRow(key=key, target_row={"id": key}),),
        modified=(
            ModifiedRow(
                key=f"m{key}",
                source_row={"id": f"m{key}", "v": "a b"},
                target_row={"id": f"m{key}", "v": "a c"},
                differences=(
                    Difference(
                        column="v",
                        old_value="a b",
                        new_value="a c",
                        word_diff=(
                            WordSpan(value="a "),
                            WordSpan(value="b", removed=True),
                            WordSpan(value="c", added=True),
                        ),
                    ),
                ),
            ),
        ),
        key_columns=("id",),
    )


class TestChunkIds:
    """Test chunk id helpers"""

    def test_make_chunk_id(self):
        """Chunk ids append the index to the diff id"""
        assert make_chunk_id("abc", 3) == "abc-chunk-3"

    def test_parse_chunk_id(self):
        """Parsing splits on the last chunk marker"""
        assert parse_chunk_id("my-chunk-run-chunk-12") == ("my-chunk-run", 12)

    def test_parse_malformed(self):
        """Ids without an index are rejected"""
        with pytest.raises(DiffConfigError):
            parse_chunk_id("abc-chunk-x")


class TestInMemoryChunkStore:
    """Test InMemoryChunkStore"""

    def test_implements_protocol(self):
        """The store satisfies the ChunkStore protocol"""
        assert isinstance(InMemoryChunkStore(), ChunkStore)

    def test_get_all_ordered_by_index(self):
        """Chunks come back in index order regardless of insertion order"""
        store = InMemoryChunkStore()
        for index in (2, 0, 10, 1):
            store.put(make_chunk_id("d", index), _partial(str(index)))
        keys = [p.added[0].key for p in store.get_all("d")]
        assert keys == ["0", "1", "2", "10"]

    def test_diffs_are_isolated(self):
        """Chunks of different diffs do not mix"""
        store = InMemoryChunkStore()
        store.put("a-chunk-0", _partial("a"))
        store.put("b-chunk-0", _partial("b"))
        assert [p.added[0].key for p in store.get_all("a")] == ["a"]

    def test_delete_all(self):
        """delete_all() removes every chunk of a diff"""
        store = InMemoryChunkStore()
        store.put("a-chunk-0", _partial("a"))
        store.delete_all("a")
        assert store.get_all("a") == []


class TestFileChunkStore:
    """Test FileChunkStore"""

    def test_implements_protocol(self, tmp_path):
        """The store satisfies the ChunkStore protocol"""
        assert isinstance(FileChunkStore(tmp_path), ChunkStore)

    def test_put_writes_json_file(self, tmp_path):
        """Each chunk is a JSON document under the diff directory"""
        store = FileChunkStore(tmp_path)
        store.put("run-chunk-0", _partial("1"))

        chunk_file = tmp_path / "run" / "chunk-0.json"
        assert chunk_file.exists()
        data = json.loads(chunk_file.read_text(encoding="utf-8"))
        assert data["added"][0]["targetRow"] == {"id": "1"}

    def test_round_trip_keeps_word_diffs(self, tmp_path):
        """Stored chunks load back equal, word diffs included"""
        store = FileChunkStore(tmp_path)
        store.put("run-chunk-0", _partial("1"))
        assert store.get_all("run") == [_partial("1")]

    def test_get_all_ordered_numerically(self, tmp_path):
        """Chunk files are ordered by numeric index"""
        store = FileChunkStore(tmp_path)
        for index in (10, 2, 1):
            store.put(make_chunk_id("run", index), _partial(str(index)))
        assert [p.added[0].key for p in store.get_all("run")] == ["1", "2", "10"]

    def test_missing_diff_is_empty(self, tmp_path):
        """Unknown diffs have no chunks"""
        assert FileChunkStore(tmp_path).get_all("nope") == []

    @pytest.mark.parametrize("diff_id", ["a/b", "a\\b", "..", ".hidden", "c:d", ""])
    def test_unsafe_diff_id_rejected(self, tmp_path, diff_id):
        """Diff ids that are not plain directory names are rejected"""
        store = FileChunkStore(tmp_path)
        with pytest.raises(DiffConfigError):
            store.get_all(diff_id)
        with pytest.raises(DiffConfigError):
            store.delete_all(diff_id)

    def test_similar_diff_ids_do_not_share_chunks(self, tmp_path):
        """Deleting one diff never touches another diff's chunks"""
        store = FileChunkStore(tmp_path)
        store.put("a_b-chunk-0", _partial("1"))
        with pytest.raises(DiffConfigError):
            store.put("a/b-chunk-0", _partial("2"))

        store.delete_all("a.b")

        assert len(store.get_all("a_b")) == 1
        assert store.list_diffs() == ["a_b"]

    def test_delete_all_and_list(self, tmp_path):
        """delete_all() removes the diff directory"""
        store = FileChunkStore(tmp_path)
        store.put("x-chunk-0", _partial("1"))
        store.put("y-chunk-0", _partial("1"))
        assert store.list_diffs() == ["x", "y"]

        store.delete_all("x")
        assert store.list_diffs() == ["y"]
        assert store.get_all("x") == []
