"""
Unit tests for the tablediff command-line interface
"""

import json

import pytest

from tablediff.cli import create_parser, load_csv, main
from tablediff.cli.commands import EXIT_DIFF, EXIT_ERROR, EXIT_MATCH
from tablediff.errors import SchemaError

SOURCE_CSV = "id,name,city\n1,Alice,Paris\n2,Bob,Berlin\n3,Carol,Rome\n"
TARGET_CSV = "id,name,city\n1,Alice,Paris\n2,Bob,Munich\n4,Dave,Oslo\n"


@pytest.fixture
def csv_files(tmp_path):
    source = tmp_path / "source.csv"
    target = tmp_path / "target.csv"
    source.write_text(SOURCE_CSV, encoding="utf-8")
    target.write_text(TARGET_CSV, encoding="utf-8")
    return str(source), str(target)


def _run(argv):
    with pytest.raises(SystemExit) as exc_info:
        main(argv)
    return exc_info.value.code


@pytest.mark.usefixtures("restore_root_logger")
class TestRunCommand:
    """Test the run command"""

    def test_no_command_prints_help(self, capsys):
        """Missing command exits with 1 after printing help"""
        assert _run([]) == 1
        assert "usage: tablediff" in capsys.readouterr().out

    def test_matching_files_exit_zero(self, csv_files):
        """Identical files exit with 0"""
        source, _ = csv_files
        assert _run(["run", source, source, "--key-columns", "id"]) == EXIT_MATCH

    def test_differences_exit_one(self, csv_files, capsys):
        """Differences exit with 1 and print the console report"""
        source, target = csv_files
        assert _run(["run", source, target, "--key-columns", "id"]) == EXIT_DIFF

        out = capsys.readouterr().out
        assert "Status: DIFF" in out
        assert "city: [-Berlin-]{+Munich+}" in out

    def test_json_to_stdout(self, csv_files, capsys):
        """JSON format without --output prints the report"""
        source, target = csv_files
        assert _run(["run", source, target, "--key-columns", "id", "--format", "json"]) == EXIT_DIFF

        report = json.loads(capsys.readouterr().out)
        assert report["counts"] == {"added": 1, "removed": 1, "modified": 1, "unchanged": 1}

    def test_csv_output(self, csv_files, tmp_path):
        """CSV format writes the output file"""
        source, target = csv_files
        output = tmp_path / "out" / "diff.csv"
        code = _run(["run", source, target, "--key-columns", "id", "--format", "csv", "--output", str(output)])

        assert code == EXIT_DIFF
        assert output.read_text(encoding="utf-8").startswith("Category,Key,Column,Old Value,New Value")

    def test_primary_key_requires_key_columns(self, csv_files):
        """Primary-key mode without key columns is a usage error"""
        source, target = csv_files
        assert _run(["run", source, target]) == 2

    def test_missing_key_column_is_error(self, csv_files):
        """An unknown key column exits with the error code"""
        source, target = csv_files
        assert _run(["run", source, target, "--key-columns", "ZZZ"]) == EXIT_ERROR

    def test_missing_file_is_error(self, csv_files, tmp_path):
        """Unreadable input exits with the error code"""
        source, _ = csv_files
        missing = str(tmp_path / "missing.csv")
        assert _run(["run", source, missing, "--key-columns", "id"]) == EXIT_ERROR

    def test_binary_requires_output(self, csv_files):
        """Binary format needs an output file"""
        source, target = csv_files
        assert _run(["run", source, target, "--key-columns", "id", "--format", "binary"]) == EXIT_ERROR

    def test_content_mode(self, csv_files, capsys):
        """Content matching needs no key columns"""
        source, target = csv_files
        code = _run(["run", source, target, "--mode", "content-match", "--format", "json"])

        assert code == EXIT_DIFF
        report = json.loads(capsys.readouterr().out)
        assert report["mode"] == "content-match"
        assert report["counts"]["unchanged"] == 1

    def test_chunked_run_persists_chunks(self, csv_files, tmp_path, capsys):
        """Chunked runs keep their partial results under --chunk-dir"""
        source, target = csv_files
        chunk_dir = tmp_path / "chunks"
        code = _run([
            "run", source, target,
            "--key-columns", "id",
            "--chunk-size", "1",
            "--chunk-dir", str(chunk_dir),
            "--diff-id", "nightly",
            "--format", "json",
        ])

        assert code == EXIT_DIFF
        assert sorted(p.name for p in (chunk_dir / "nightly").iterdir()) == [
            "chunk-0.json", "chunk-1.json", "chunk-2.json",
        ]
        report = json.loads(capsys.readouterr().out)
        assert report["counts"] == {"added": 1, "removed": 1, "modified": 1, "unchanged": 1}

    def test_sequential_options(self, csv_files):
        """Worker and batch options are accepted"""
        source, target = csv_files
        code = _run([
            "run", source, target, "--key-columns", "id",
            "--workers", "1", "--batch-size", "1", "--no-parallel", "--progress",
        ])
        assert code == EXIT_DIFF


@pytest.mark.usefixtures("restore_root_logger")
class TestDecodeCommand:
    """Test the decode command"""

    def test_binary_round_trip(self, csv_files, tmp_path, capsys):
        """A binary diff decodes back to the same report counts"""
        source, target = csv_files
        binary = tmp_path / "diff.bin"
        assert _run([
            "run", source, target, "--key-columns", "id", "--format", "binary", "--output", str(binary),
        ]) == EXIT_DIFF
        capsys.readouterr()

        assert _run(["decode", str(binary), "--format", "json"]) == EXIT_DIFF
        report = json.loads(capsys.readouterr().out)
        assert report["counts"] == {"added": 1, "removed": 1, "modified": 1, "unchanged": 1}
        difference = report["result"]["modified"][0]["differences"][0]
        assert difference["diff"] == [
            {"added": False, "removed": True, "value": "Berlin"},
            {"added": True, "removed": False, "value": "Munich"},
        ]

    def test_corrupt_file_is_error(self, tmp_path):
        """Truncated input exits with the error code"""
        broken = tmp_path / "broken.bin"
        broken.write_bytes(b"\x01\x00")
        assert _run(["decode", str(broken)]) == EXIT_ERROR


class TestParserAndLoader:
    """Test argument parsing and CSV loading"""

    def test_comma_lists(self):
        """Key and excluded columns are comma-separated"""
        args = create_parser().parse_args(
            ["run", "a.csv", "b.csv", "--key-columns", "region, id", "--exclude", "ts,"]
        )
        assert args.key_columns == ["region", "id"]
        assert args.exclude == ["ts"]
        assert args.mode == "primary-key"
        assert args.format == "console"

    def test_load_csv(self, tmp_path):
        """The first record is the header and blank lines are skipped"""
        path = tmp_path / "data.csv"
        path.write_text("\ufeffid,name\n1,Ann\n\n2,\n", encoding="utf-8")

        dataset = load_csv(str(path))
        assert dataset.headers == ("id", "name")
        assert dataset.rows == (("1", "Ann"), ("2", ""))

    def test_load_empty_csv(self, tmp_path):
        """An empty file has no header"""
        path = tmp_path / "empty.csv"
        path.write_text("", encoding="utf-8")
        with pytest.raises(SchemaError):
            load_csv(str(path))
