"""Content span selection."""

from org_extract.models.node import Document, Node


def _slice(document: Document, begin: int, end: int) -> str:
    if not 0 <= begin <= end <= len(document.source):
        msg = f"Span [{begin}, {end}) is outside the document (length {len(document.source)})"
        raise ValueError(msg)
    return document.source[begin:end]


def select_content(
    document: Document,
    target: Node,
    heading: Node | None,
    *,
    whole_subtree: bool,
) -> str | None:
    """Select the text to attach to a record.

    Args:
        document: The document the nodes belong to.
        target: The element that was pointed at.
        heading: The heading enclosing ``target`` (may be None).
        whole_subtree: If True, return the heading line plus its whole
            subtree. Otherwise return only the contents of ``target``.

    Returns:
        The selected source text, or None when there is nothing to select.
    """
    if whole_subtree:
        if heading is None:
            return None
        return _slice(document, heading.begin, heading.end)

    span = target.contents_span
    if span is None:
        return None
    return _slice(document, *span)
