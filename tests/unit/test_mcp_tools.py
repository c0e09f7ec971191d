"""Tests for MCP tool core functions."""

from pathlib import Path

from org_extract.config import ExtractConfig
from org_extract.mcp.server import org_export_batch, org_extract_record, org_list_headings


def test_org_extract_record_by_line(planner_file: Path) -> None:
    result = org_extract_record(planner_file, line=16)

    assert "error" not in result
    assert result["node_kind"] == "paragraph"
    assert result["record"]["title"] == "Child"
    assert result["record"]["content"] == "Child leading paragraph.\n"


def test_org_extract_record_uses_config_defaults(planner_file: Path) -> None:
    config = ExtractConfig(include_inherited_tags=False, whole_subtree=True)

    result = org_extract_record(planner_file, line=16, config=config)

    assert result["record"]["tags"] == ["#work"]
    assert result["record"]["content"].startswith("** TODO [#A] Child")


def test_org_extract_record_explicit_arguments_override_config(planner_file: Path) -> None:
    config = ExtractConfig(include_inherited_tags=False)

    result = org_extract_record(planner_file, line=16, include_inherited=True, config=config)

    assert result["record"]["tags"] == ["planner", "home", "#work"]


def test_org_extract_record_relative_to_root(planner_file: Path) -> None:
    result = org_extract_record("planner.org", line=6, root=planner_file.parent)
    assert result["record"]["title"] == "Root"


def test_org_extract_record_errors(planner_file: Path, tmp_path: Path) -> None:
    assert "error" in org_extract_record(tmp_path / "missing.org")
    assert "error" in org_extract_record(planner_file, line=1, offset=0)
    assert "error" in org_extract_record(planner_file, line=999)


def test_org_export_batch_paginates(planner_file: Path) -> None:
    """A second page picks up at next_offset and keeps the batch counters."""
    first = org_export_batch(planner_file, match="home", limit=2)
    second = org_export_batch(planner_file, match="home", limit=2, offset=first["next_offset"])

    assert [r["counter"] for r in first["results"]] == [0, 1]
    assert [r["counter"] for r in second["results"]] == [2, 3]
    assert second["results"][0]["filename"] == "0002-Root_Child_Sub_one.json"
    assert second["results"][0]["record"]["outline_path"] == ["Root", "Child"]


def test_org_export_batch_bad_expression(planner_file: Path) -> None:
    result = org_export_batch(planner_file, match="a||b")

    assert "Invalid match expression" in result["error"]
    assert result["count"] == 0


def test_org_list_headings(planner_file: Path) -> None:
    result = org_list_headings(planner_file)

    assert result["title"] == "Planner"
    assert result["filetags"] == ["planner"]
    assert result["count"] == 6
    assert result["headings"][2]["outline_path"] == ["Root", "Child"]
