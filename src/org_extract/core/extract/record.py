"""Record assembly: one heading's complete metadata envelope."""

from loguru import logger

from org_extract.core.extract.content import select_content
from org_extract.core.extract.outline import outline_path
from org_extract.core.extract.properties import flatten_properties
from org_extract.core.extract.render import render_title, timestamp_to_string
from org_extract.core.extract.tags import resolve_tags
from org_extract.core.tree.navigation import nearest_heading
from org_extract.models.node import Document, Node
from org_extract.models.record import Record


def assemble(
    document: Document,
    target: Node,
    *,
    include_inherited: bool,
    whole_subtree: bool,
) -> Record:
    """Build the record for the heading enclosing ``target``.

    When ``target`` is not inside any heading, heading fields stay empty and
    the content falls back to the target's own contents.
    """
    heading = nearest_heading(document, target)
    if heading is None:
        logger.debug("No heading encloses node {} ({})", target.index, target.kind)
        return Record(
            filetags=document.filetags,
            content=select_content(document, target, None, whole_subtree=False),
        )

    return Record(
        title=render_title(heading.title),
        level=heading.level,
        todo=heading.todo_keyword,
        priority=heading.priority,
        tags=resolve_tags(document, heading, include_inherited=include_inherited),
        filetags=document.filetags,
        scheduled=timestamp_to_string(document, heading.scheduled),
        deadline=timestamp_to_string(document, heading.deadline),
        archived=heading.archived,
        commented=heading.commented,
        outline_path=outline_path(document, heading),
        properties=flatten_properties(document, heading),
        content=select_content(document, target, heading, whole_subtree=whole_subtree),
    )
