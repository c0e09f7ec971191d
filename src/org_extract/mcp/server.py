"""MCP server exposing outline extraction tools."""

import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from itertools import islice
from pathlib import Path
from typing import Any

from loguru import logger
from mcp.server.fastmcp import Context, FastMCP

from org_extract.config import ExtractConfig, ReaderConfig, config_from_env
from org_extract.core.export.batch import export_batch
from org_extract.core.extract.record import assemble
from org_extract.core.importer.org_reader import load_document
from org_extract.core.match.matcher import MatcherSyntaxError, compile_matcher
from org_extract.core.tree.navigation import node_at_offset, offset_for_line
from org_extract.models.node import Document
from org_extract.models.record import record_to_dict


def _open(path: str | Path, root: Path | None, reader_config: ReaderConfig) -> Document | str:
    """Load a document, returning an error message instead of raising."""
    p = Path(path).expanduser()
    if root is not None and not p.is_absolute():
        p = root / p
    if not p.is_file():
        return f"File '{p}' not found."
    try:
        return load_document(p, config=reader_config)
    except UnicodeDecodeError:
        return f"File '{p}' is not valid UTF-8 text."


# --- Core functions (testable without MCP context) ---


def org_extract_record(
    path: str | Path,
    *,
    offset: int | None = None,
    line: int | None = None,
    include_inherited: bool | None = None,
    whole_subtree: bool | None = None,
    config: ExtractConfig | None = None,
    reader_config: ReaderConfig | None = None,
    root: Path | None = None,
) -> dict[str, Any]:
    """Extract the record of the heading at a position.

    Args:
        path: Outline file.
        offset: Character offset of the target element.
        line: 1-based line of the target element (alternative to offset).
        include_inherited: Include inherited tags (None = config default).
        whole_subtree: Use the whole subtree as content (None = config default).
    """
    config = config or ExtractConfig()
    if offset is not None and line is not None:
        return {"error": "Pass either offset or line, not both."}

    doc = _open(path, root, reader_config or ReaderConfig())
    if isinstance(doc, str):
        return {"error": doc}

    try:
        position = offset_for_line(doc, line) if line is not None else (offset or 0)
        target = node_at_offset(doc, position)
    except ValueError as e:
        return {"error": str(e)}

    if include_inherited is None:
        include_inherited = config.include_inherited_tags
    if whole_subtree is None:
        whole_subtree = config.whole_subtree
    record = assemble(doc, target, include_inherited=include_inherited, whole_subtree=whole_subtree)
    return {"record": record_to_dict(record), "node_kind": str(target.kind), "offset": position}


def org_export_batch(
    path: str | Path,
    *,
    match: str | None = None,
    limit: int = 50,
    offset: int = 0,
    config: ExtractConfig | None = None,
    reader_config: ReaderConfig | None = None,
    root: Path | None = None,
) -> dict[str, Any]:
    """Return records for the headings selected by a match expression.

    Nothing is written to disk; ``filename`` shows where a batch export
    would put each record.
    """
    config = config or ExtractConfig()
    limit = max(1, min(limit, 200))
    offset = max(0, offset)

    doc = _open(path, root, reader_config or ReaderConfig())
    if isinstance(doc, str):
        return {"error": doc, "results": [], "count": 0}

    try:
        matcher = compile_matcher(match)
    except MatcherSyntaxError as e:
        return {"error": str(e), "results": [], "count": 0}

    pairs = export_batch(
        doc,
        matcher,
        include_inherited=config.include_inherited_tags,
        whole_subtree=config.whole_subtree,
    )
    results = [
        {
            "counter": identifier.counter,
            "slug": identifier.slug,
            "filename": config.format_filename(identifier),
            "record": record_to_dict(record),
        }
        for identifier, record in islice(pairs, offset, offset + limit)
    ]
    output: dict[str, Any] = {"results": results, "count": len(results)}
    if len(results) == limit:
        output["next_offset"] = offset + limit
    return output


def org_list_headings(
    path: str | Path,
    *,
    match: str | None = None,
    reader_config: ReaderConfig | None = None,
    root: Path | None = None,
) -> dict[str, Any]:
    """List selected headings with their outline path and position."""
    doc = _open(path, root, reader_config or ReaderConfig())
    if isinstance(doc, str):
        return {"error": doc, "headings": [], "count": 0}

    try:
        matcher = compile_matcher(match)
    except MatcherSyntaxError as e:
        return {"error": str(e), "headings": [], "count": 0}

    headings = [
        {
            "counter": identifier.counter,
            "slug": identifier.slug,
            "title": record.title,
            "level": record.level,
            "todo": record.todo,
            "outline_path": list(record.outline_path),
        }
        for identifier, record in export_batch(
            doc, matcher, include_inherited=True, whole_subtree=False
        )
    ]
    return {
        "title": doc.title,
        "filetags": list(doc.filetags),
        "headings": headings,
        "count": len(headings),
    }


# --- MCP Server Setup ---


@dataclass
class ServerContext:
    """Shared settings for the MCP server lifetime."""

    config: ExtractConfig
    reader_config: ReaderConfig
    root: Path | None


def _resolve_root() -> Path | None:
    root_env = os.environ.get("ORG_EXTRACT_ROOT")
    return Path(root_env).expanduser() if root_env else None


@asynccontextmanager
async def server_lifespan(_server: FastMCP) -> AsyncIterator[ServerContext]:
    """Resolve configuration from the environment once per server run."""
    root = _resolve_root()
    logger.debug("MCP server starting, root {!r}", root)
    yield ServerContext(config=config_from_env(), reader_config=ReaderConfig(), root=root)


mcp_server = FastMCP(
    "org-extract",
    instructions="""\
Outline files (Org-style) are trees of headings with TODO keywords, tags,
scheduling timestamps and property drawers.

1. Use org_list_headings_tool to see the headings of a file.
2. Use org_export_batch_tool with a match expression (e.g. "work-someday",
   "TODO=\\"NEXT\\"", "project/TODO|NEXT") to get full records.
3. Use org_extract_record_tool with a line number to get the record of the
   heading enclosing that line.
""",
    lifespan=server_lifespan,
)


def _ctx(mcp_ctx: Context) -> ServerContext:
    return mcp_ctx.request_context.lifespan_context  # type: ignore[return-value]


@mcp_server.tool()
async def org_extract_record_tool(
    ctx: Context,
    path: str,
    offset: int | None = None,
    line: int | None = None,
    include_inherited: bool | None = None,
    whole_subtree: bool | None = None,
) -> dict[str, Any]:
    """Extract metadata of the heading enclosing a position in an outline file.

    Args:
        path: Path to the outline file.
        offset: Character offset (0-based).
        line: Line number (1-based), alternative to offset.
        include_inherited: Include tags inherited from ancestors and the file.
        whole_subtree: Return the heading's whole subtree as content.
    """
    server = _ctx(ctx)
    return org_extract_record(
        path,
        offset=offset,
        line=line,
        include_inherited=include_inherited,
        whole_subtree=whole_subtree,
        config=server.config,
        reader_config=server.reader_config,
        root=server.root,
    )


@mcp_server.tool()
async def org_export_batch_tool(
    ctx: Context,
    path: str,
    match: str | None = None,
    limit: int = 50,
    offset: int = 0,
) -> dict[str, Any]:
    """Get records for every heading selected by a match expression.

    Args:
        path: Path to the outline file.
        match: Tag/property match expression (None = all headings).
        limit: Max records (1-200, default 50).
        offset: Pagination offset.
    """
    server = _ctx(ctx)
    return org_export_batch(
        path,
        match=match,
        limit=limit,
        offset=offset,
        config=server.config,
        reader_config=server.reader_config,
        root=server.root,
    )


@mcp_server.tool()
async def org_list_headings_tool(
    ctx: Context, path: str, match: str | None = None
) -> dict[str, Any]:
    """List headings of an outline file with their outline paths.

    Args:
        path: Path to the outline file.
        match: Optional match expression.
    """
    server = _ctx(ctx)
    return org_list_headings(
        path, match=match, reader_config=server.reader_config, root=server.root
    )


def run_mcp_server() -> None:
    """Run the MCP server with stdio transport."""
    from org_extract.logging_config import configure_logging

    configure_logging(verbose=False)
    mcp_server.run(transport="stdio")
