"""Tree navigation: ancestors, headings, positions, effective tags."""

from collections.abc import Iterator

from org_extract.models.node import Document, Node


def get_node(document: Document, index: int | None) -> Node | None:
    """Return the node at an arena index, or None for a missing index."""
    if index is None or not 0 <= index < len(document.nodes):
        return None
    return document.nodes[index]


def iter_ancestors(document: Document, node: Node) -> Iterator[Node]:
    """Yield ancestors of a node, innermost first, ending at the root."""
    parent = get_node(document, node.parent)
    while parent is not None:
        yield parent
        parent = get_node(document, parent.parent)


def heading_ancestors(document: Document, node: Node) -> tuple[Node, ...]:
    """Heading ancestors of a node, outermost first (excludes the node itself)."""
    return tuple(reversed([n for n in iter_ancestors(document, node) if n.is_heading]))


def nearest_heading(document: Document, node: Node | None) -> Node | None:
    """Return the node itself if it is a heading, else its closest heading ancestor."""
    if node is None:
        return None
    if node.is_heading:
        return node
    return next((n for n in iter_ancestors(document, node) if n.is_heading), None)


def iter_headings(document: Document) -> Iterator[Node]:
    """Yield every heading in document order (pre-order traversal)."""
    stack = list(reversed(document.root.children))
    while stack:
        node = document.nodes[stack.pop()]
        if node.is_heading:
            yield node
        stack.extend(reversed(node.children))


def node_at_offset(document: Document, offset: int) -> Node:
    """Return the innermost node whose span contains offset.

    Offsets past the end of the text resolve to the last position. Positions
    not covered by any element (blank lines) resolve to the enclosing heading
    or the document root.
    """
    if offset < 0:
        msg = f"Offset must be non-negative: {offset!r}"
        raise ValueError(msg)
    offset = min(offset, max(len(document.source) - 1, 0))

    node = document.root
    while True:
        child = next(
            (
                document.nodes[i]
                for i in node.children
                if document.nodes[i].begin <= offset < document.nodes[i].end
            ),
            None,
        )
        if child is None:
            return node
        node = child


def offset_for_line(document: Document, line: int) -> int:
    """Character offset of the start of a 1-based line number."""
    if line < 1:
        msg = f"Line numbers start at 1: {line!r}"
        raise ValueError(msg)
    offset = 0
    for _ in range(line - 1):
        nl = document.source.find("\n", offset)
        if nl == -1:
            msg = f"Line {line} is past the end of the document"
            raise ValueError(msg)
        offset = nl + 1
    return offset


def inherited_tags(document: Document, heading: Node) -> tuple[str, ...]:
    """Effective tags of a heading including inherited ones.

    Order: file tags, ancestor tags (outermost first), then the heading's own
    tags. Tags listed in ``tags_exclude_from_inheritance`` are only kept when
    they are the heading's own. A repeated tag keeps its last position.
    """
    excluded = set(document.tags_exclude_from_inheritance)
    tags = [t for t in document.filetags if t not in excluded]
    for ancestor in heading_ancestors(document, heading):
        tags.extend(t for t in ancestor.tags if t not in excluded)
    tags.extend(heading.tags)

    # Deduplicate keeping the last occurrence.
    seen: set[str] = set()
    result: list[str] = []
    for tag in reversed(tags):
        if tag not in seen:
            seen.add(tag)
            result.append(tag)
    return tuple(reversed(result))
