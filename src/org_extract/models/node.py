"""Node tree for parsed outline documents.

Nodes live in a flat arena owned by the Document. Parent and child links are
arena indices, so ancestor walks never hold references back into the tree.
"""

from dataclasses import dataclass
from enum import StrEnum


class NodeKind(StrEnum):
    """Kinds of nodes produced by the reader."""

    DOCUMENT = "document"
    HEADING = "heading"
    PLANNING = "planning"
    TIMESTAMP = "timestamp"
    PROPERTY_DRAWER = "property_drawer"
    NODE_PROPERTY = "node_property"
    KEYWORD = "keyword"
    PARAGRAPH = "paragraph"
    BLOCK = "block"
    DRAWER = "drawer"


@dataclass(frozen=True)
class Node:
    """A single element of a document, addressed by its arena index."""

    index: int
    kind: NodeKind
    begin: int
    end: int
    parent: int | None = None
    children: tuple[int, ...] = ()
    contents_begin: int | None = None
    contents_end: int | None = None
    title: str | None = None
    todo_keyword: str | None = None
    priority: str | None = None
    tags: tuple[str, ...] = ()
    scheduled: int | None = None
    deadline: int | None = None
    archived: bool = False
    commented: bool = False
    level: int | None = None
    key: str | None = None
    value: str | None = None
    raw: str | None = None

    @property
    def is_heading(self) -> bool:
        return self.kind is NodeKind.HEADING

    @property
    def contents_span(self) -> tuple[int, int] | None:
        """Span of the node's direct contents, or None for empty elements."""
        if self.contents_begin is None or self.contents_end is None:
            return None
        return self.contents_begin, self.contents_end


@dataclass(frozen=True)
class Document:
    """A parsed document: the source text plus its node arena.

    ``nodes[0]`` is always the document root.
    """

    source: str
    nodes: tuple[Node, ...]
    filetags: tuple[str, ...] = ()
    tags_exclude_from_inheritance: tuple[str, ...] = ()
    title: str | None = None

    @property
    def root(self) -> Node:
        return self.nodes[0]
