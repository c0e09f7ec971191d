"""Extracted records and their JSON form."""

import json
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Record:
    """Metadata envelope of a single heading.

    Every field is always present; values that cannot be derived are None or
    an empty tuple.
    """

    title: str | None = None
    level: int | None = None
    todo: str | None = None
    priority: str | None = None
    tags: tuple[str, ...] = ()
    filetags: tuple[str, ...] = ()
    scheduled: str | None = None
    deadline: str | None = None
    archived: bool | None = None
    commented: bool | None = None
    outline_path: tuple[str, ...] = ()
    properties: tuple[tuple[str, str], ...] = ()
    content: str | None = None


@dataclass(frozen=True)
class Identifier:
    """Output identifier of a record within one batch run."""

    counter: int
    slug: str


def record_to_dict(record: Record) -> dict[str, Any]:
    """Convert a record to a JSON-ready dict.

    Properties become a list of ``[key, value]`` pairs so duplicate keys
    survive serialization.
    """
    return {
        "title": record.title,
        "level": record.level,
        "todo": record.todo,
        "priority": record.priority,
        "tags": list(record.tags),
        "filetags": list(record.filetags),
        "scheduled": record.scheduled,
        "deadline": record.deadline,
        "archived": record.archived,
        "commented": record.commented,
        "outline_path": list(record.outline_path),
        "properties": [[key, value] for key, value in record.properties],
        "content": record.content,
    }


def dump_record(record: Record, *, pretty: bool = True) -> str:
    """Serialize a record as JSON text with a trailing newline."""
    data = record_to_dict(record)
    return json.dumps(data, indent=2 if pretty else None, ensure_ascii=False) + "\n"
