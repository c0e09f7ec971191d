"""Batch export: records for every selected heading, with output identifiers."""

import re
from collections.abc import Iterator

from loguru import logger

from org_extract.core.extract.record import assemble
from org_extract.core.tree.navigation import iter_headings
from org_extract.models.node import Document
from org_extract.models.record import Identifier, Record
from org_extract.protocols import MatcherProtocol

SLUG_SEPARATOR = "/"
EMPTY_SLUG = "entry"

_UNSAFE_RUN_RE = re.compile(r"[^A-Za-z0-9_]+")
_UNDERSCORE_RUN_RE = re.compile(r"_{2,}")


def sanitize_slug(text: str) -> str:
    """Make a filesystem-safe slug.

    Every run of characters outside ``[A-Za-z0-9_]`` becomes a single
    underscore, repeated underscores collapse to one, and an empty result
    becomes "entry". Case is preserved.
    """
    slug = _UNDERSCORE_RUN_RE.sub("_", _UNSAFE_RUN_RE.sub("_", text))
    return slug or EMPTY_SLUG


def build_slug(record: Record) -> str:
    """Slug from the record's outline path followed by its own title."""
    parts = list(record.outline_path)
    if record.title is not None:
        parts.append(record.title)
    return sanitize_slug(SLUG_SEPARATOR.join(parts))


def export_batch(
    document: Document,
    matcher: MatcherProtocol | None = None,
    *,
    include_inherited: bool,
    whole_subtree: bool,
) -> Iterator[tuple[Identifier, Record]]:
    """Yield an (identifier, record) pair per selected heading, in document order.

    Counters start at 0 and grow by one per yielded record; slugs may repeat.
    Errors raised by the matcher propagate unchanged. The iterator is one-shot
    and has no side effects, so callers may stop consuming at any point.
    """
    counter = 0
    for heading in iter_headings(document):
        if matcher is not None and not matcher.matches(document, heading):
            continue
        record = assemble(
            document,
            heading,
            include_inherited=include_inherited,
            whole_subtree=whole_subtree,
        )
        identifier = Identifier(counter=counter, slug=build_slug(record))
        logger.debug("Heading {} -> {} {}", heading.index, identifier.counter, identifier.slug)
        yield identifier, record
        counter += 1
