"""Tests for FileWriter, the export file writer."""

from pathlib import Path

import pytest

from org_extract.protocols import WriterProtocol
from org_extract.writer import FileWriter


def test_init_creates_writer_for_valid_directory(tmp_path: Path) -> None:
    writer = FileWriter(tmp_path, dry_run=False)

    assert writer.output_dir == str(tmp_path.resolve())
    assert writer.dry_run is False


def test_init_raises_for_missing_directory(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="not found"):
        FileWriter(tmp_path / "does_not_exist", dry_run=False)


def test_init_dry_run_allows_missing_directory(tmp_path: Path) -> None:
    writer = FileWriter(tmp_path / "does_not_exist", dry_run=True)

    assert writer.dry_run is True


def test_is_possible_output_accepts_only_json(tmp_path: Path) -> None:
    writer = FileWriter(tmp_path, dry_run=False)

    assert writer.is_possible_output("0000-entry.json") is True
    assert writer.is_possible_output("notes.txt") is False
    assert writer.is_possible_output("record") is False


def test_make_data_file_writes_contents(tmp_path: Path) -> None:
    writer = FileWriter(tmp_path, dry_run=False)

    writer.make_data_file("0000-Root.json", contents='{"title": "Root"}\n')

    assert (tmp_path / "0000-Root.json").read_text() == '{"title": "Root"}\n'


def test_make_data_file_creates_subdirectories(tmp_path: Path) -> None:
    writer = FileWriter(tmp_path, dry_run=False)

    writer.make_data_file("nested/dir/0000-a.json", contents="{}\n")

    assert (tmp_path / "nested" / "dir" / "0000-a.json").exists()


def test_make_data_file_rejects_absolute_path(tmp_path: Path) -> None:
    writer = FileWriter(tmp_path, dry_run=False)

    with pytest.raises(ValueError, match="must be relative"):
        writer.make_data_file("/tmp/x.json", contents="{}")


def test_make_data_file_rejects_escaping_path(tmp_path: Path) -> None:
    writer = FileWriter(tmp_path / "out", dry_run=True)

    with pytest.raises(ValueError, match="escapes output dir"):
        writer.make_data_file("../x.json", contents="{}")


def test_make_data_file_rejects_non_json(tmp_path: Path) -> None:
    writer = FileWriter(tmp_path, dry_run=False)

    with pytest.raises(ValueError, match="is_possible_output"):
        writer.make_data_file("x.txt", contents="hello")


def test_make_data_file_rejects_duplicate_name(tmp_path: Path) -> None:
    writer = FileWriter(tmp_path, dry_run=False)
    writer.make_data_file("a.json", contents="{}")

    with pytest.raises(ValueError, match="written twice"):
        writer.make_data_file("a.json", contents="{}")


def test_unchanged_file_is_not_rewritten(tmp_path: Path) -> None:
    """Identical contents leave the existing file and its mtime alone."""
    target = tmp_path / "a.json"
    target.write_text("{}\n")
    mtime_before = target.stat().st_mtime_ns

    writer = FileWriter(tmp_path, dry_run=False)
    writer.make_data_file("a.json", contents="{}\n")

    assert target.stat().st_mtime_ns == mtime_before


def test_changed_file_is_rewritten(tmp_path: Path) -> None:
    target = tmp_path / "a.json"
    target.write_text("{}\n")

    writer = FileWriter(tmp_path, dry_run=False)
    writer.make_data_file("a.json", contents='{"x": 1}\n')

    assert target.read_text() == '{"x": 1}\n'


def test_dry_run_writes_nothing(tmp_path: Path) -> None:
    writer = FileWriter(tmp_path, dry_run=True)

    writer.make_data_file("a.json", contents="{}\n")

    assert not (tmp_path / "a.json").exists()


def test_finalize_twice_raises(tmp_path: Path) -> None:
    writer = FileWriter(tmp_path, dry_run=False)
    writer.finalize()

    with pytest.raises(RuntimeError, match="called twice"):
        writer.finalize()


def test_file_writer_satisfies_writer_protocol(tmp_path: Path) -> None:
    assert isinstance(FileWriter(tmp_path, dry_run=True), WriterProtocol)
