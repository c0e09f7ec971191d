"""Property drawer flattening."""

from org_extract.models.node import Document, Node, NodeKind


def flatten_properties(document: Document, heading: Node | None) -> tuple[tuple[str, str], ...]:
    """Return the heading's drawer entries as (key, value) pairs in drawer order.

    Duplicate keys are kept as separate entries.
    """
    if heading is None:
        return ()
    children = (document.nodes[i] for i in heading.children)
    drawer = next((c for c in children if c.kind is NodeKind.PROPERTY_DRAWER), None)
    if drawer is None:
        return ()
    return tuple(
        (entry.key or "", entry.value or "")
        for entry in (document.nodes[i] for i in drawer.children)
        if entry.kind is NodeKind.NODE_PROPERTY
    )
