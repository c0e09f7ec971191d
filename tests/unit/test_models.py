"""Tests for domain models and record serialization."""

import json

import pytest

from org_extract.models.node import Node, NodeKind
from org_extract.models.record import Identifier, Record, dump_record, record_to_dict

RECORD_KEYS = [
    "title",
    "level",
    "todo",
    "priority",
    "tags",
    "filetags",
    "scheduled",
    "deadline",
    "archived",
    "commented",
    "outline_path",
    "properties",
    "content",
]


def test_record_is_frozen() -> None:
    record = Record(title="Test")
    with pytest.raises(AttributeError):
        record.title = "changed"  # type: ignore[misc]


def test_node_contents_span() -> None:
    assert Node(index=0, kind=NodeKind.PARAGRAPH, begin=0, end=4).contents_span is None
    node = Node(index=0, kind=NodeKind.PARAGRAPH, begin=0, end=4, contents_begin=1, contents_end=3)
    assert node.contents_span == (1, 3)


def test_record_to_dict_has_every_key_even_when_empty() -> None:
    data = record_to_dict(Record())

    assert list(data) == RECORD_KEYS
    assert data["title"] is None
    assert data["tags"] == []
    assert data["properties"] == []


def test_record_to_dict_keeps_duplicate_properties_as_pairs() -> None:
    record = Record(properties=(("A", "1"), ("B", "2"), ("A", "3")))
    assert record_to_dict(record)["properties"] == [["A", "1"], ["B", "2"], ["A", "3"]]


def test_dump_record_pretty_and_compact() -> None:
    record = Record(title="Ünïcode", tags=("a", "b"))

    pretty = dump_record(record)
    compact = dump_record(record, pretty=False)

    assert pretty.endswith("\n")
    assert "Ünïcode" in pretty
    assert compact.count("\n") == 1
    assert json.loads(pretty) == json.loads(compact)


def test_identifier_equality() -> None:
    assert Identifier(counter=1, slug="a") == Identifier(counter=1, slug="a")
