"""Plain-text rendering of titles and timestamps."""

import re

from org_extract.core.tree.navigation import get_node
from org_extract.models.node import Document, NodeKind

_LINK_RE = re.compile(r"\[\[(?P<target>[^\]]+)\](?:\[(?P<desc>[^\]]*)\])?\]")


def render_title(title: str | None) -> str | None:
    """Render a heading title as plain text.

    Links collapse to their description (or target when there is none);
    emphasis markers are kept as written.
    """
    if title is None:
        return None
    return _LINK_RE.sub(lambda m: m["desc"] or m["target"], title).strip()


def timestamp_to_string(document: Document, index: int | None) -> str | None:
    """Textual form of an embedded timestamp, None if absent or not a timestamp."""
    node = get_node(document, index)
    if node is None or node.kind is not NodeKind.TIMESTAMP:
        return None
    return node.raw
