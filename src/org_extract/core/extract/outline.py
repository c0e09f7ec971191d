"""Outline path (breadcrumb) computation."""

from org_extract.core.extract.render import render_title
from org_extract.core.tree.navigation import heading_ancestors
from org_extract.models.node import Document, Node


def outline_path(document: Document, heading: Node | None) -> tuple[str, ...]:
    """Titles of the heading's ancestors, outermost first, immediate parent last.

    The heading's own title is not included. Untitled ancestors contribute "".
    """
    if heading is None:
        return ()
    return tuple(render_title(a.title) or "" for a in heading_ancestors(document, heading))
