"""Tag resolution for headings."""

from org_extract.core.tree.navigation import inherited_tags
from org_extract.models.node import Document, Node


def resolve_tags(
    document: Document,
    heading: Node | None,
    *,
    include_inherited: bool,
) -> tuple[str, ...]:
    """Tags of a heading, optionally including inherited and file tags.

    The inheritance policy (file tags, exclusions) belongs to the document;
    see ``inherited_tags``. A missing heading has no tags.
    """
    if heading is None:
        return ()
    if not include_inherited:
        return heading.tags
    return inherited_tags(document, heading)
