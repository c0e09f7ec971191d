"""CLI for org-extract (extract, export, headings, MCP server)."""

from pathlib import Path
from typing import Annotated

import typer
from loguru import logger

from org_extract.config import ExtractConfig, ReaderConfig, resolve_output_directory
from org_extract.core.export.batch import export_batch
from org_extract.core.export.runner import export_to_directory
from org_extract.core.extract.record import assemble
from org_extract.core.importer.org_reader import load_document
from org_extract.core.match.matcher import MatcherSyntaxError, compile_matcher
from org_extract.core.tree.navigation import node_at_offset, offset_for_line
from org_extract.logging_config import configure_logging
from org_extract.models.node import Document
from org_extract.models.record import dump_record
from org_extract.protocols import MatcherProtocol
from org_extract.writer import FileWriter

app = typer.Typer(help="Extract heading metadata from outline documents as JSON.")

_InheritOption = Annotated[
    bool,
    typer.Option("--inherit/--no-inherit", help="Include inherited and file tags"),
]
_SubtreeOption = Annotated[
    bool,
    typer.Option("--subtree", "-s", help="Use the whole heading subtree as content"),
]
_CompactOption = Annotated[
    bool,
    typer.Option("--compact", "-c", help="Emit compact JSON"),
]
_ExcludeOption = Annotated[
    list[str] | None,
    typer.Option("--no-inherit-tag", help="Tag that is never inherited (repeatable)"),
]


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only log warnings and errors"),
) -> None:
    configure_logging(verbose=verbose, quiet=quiet)


def _load(path: Path, exclude_tags: list[str] | None) -> Document:
    """Load a document, exiting with an error message if it is missing."""
    if not path.is_file():
        logger.error("File not found: {}", path)
        raise typer.Exit(1)
    config = ReaderConfig(tags_exclude_from_inheritance=tuple(exclude_tags or ()))
    return load_document(path, config=config)


def _compile(expression: str | None) -> MatcherProtocol | None:
    try:
        return compile_matcher(expression)
    except MatcherSyntaxError as e:
        logger.error("{}", e)
        raise typer.Exit(2) from e


@app.command()
def extract(
    path: Path = typer.Argument(..., help="Outline file to read"),
    offset: Annotated[
        int | None,
        typer.Option("--offset", "-o", help="Character offset of the target element"),
    ] = None,
    line: Annotated[
        int | None,
        typer.Option("--line", "-l", help="1-based line number of the target element"),
    ] = None,
    inherit: _InheritOption = True,
    subtree: _SubtreeOption = False,
    compact: _CompactOption = False,
    exclude_tags: _ExcludeOption = None,
) -> None:
    """Print the record for the heading at a position as JSON."""
    if offset is not None and line is not None:
        logger.error("Use either --offset or --line, not both")
        raise typer.Exit(1)

    doc = _load(path, exclude_tags)
    try:
        if line is not None:
            position = offset_for_line(doc, line)
        else:
            position = offset or 0
        target = node_at_offset(doc, position)
    except ValueError as e:
        logger.error("{}", e)
        raise typer.Exit(1) from e

    record = assemble(doc, target, include_inherited=inherit, whole_subtree=subtree)
    typer.echo(dump_record(record, pretty=not compact), nl=False)


@app.command()
def export(
    path: Path = typer.Argument(..., help="Outline file to read"),
    match: Annotated[
        str | None,
        typer.Option("--match", "-m", help='Match expression, e.g. "work-someday|TODO=\\"NEXT\\""'),
    ] = None,
    output_dir: Annotated[
        Path | None,
        typer.Option("--output-dir", "-d", help="Directory for the JSON files"),
    ] = None,
    template: Annotated[
        str | None,
        typer.Option("--template", "-t", help="Filename template using {counter} and {slug}"),
    ] = None,
    inherit: _InheritOption = True,
    subtree: _SubtreeOption = False,
    compact: _CompactOption = False,
    exclude_tags: _ExcludeOption = None,
    dry_run: bool = typer.Option(False, "--dry-run", help="Do not write anything"),
) -> None:
    """Write one JSON file per matching heading."""
    doc = _load(path, exclude_tags)
    matcher = _compile(match)

    config = ExtractConfig(
        include_inherited_tags=inherit,
        whole_subtree=subtree,
        pretty=not compact,
        **({"filename_template": template} if template else {}),
    )
    dst = resolve_output_directory(output_dir)

    try:
        if not dry_run:
            dst.mkdir(parents=True, exist_ok=True)
        writer = FileWriter(dst, dry_run=dry_run)
        stats = export_to_directory(doc, writer, config=config, matcher=matcher)
    except (KeyError, IndexError, ValueError, OSError) as e:
        # Bad filename templates surface here as formatting or path errors.
        logger.error("Export failed: {}", e)
        raise typer.Exit(1) from e

    typer.echo(f"Exported {stats.records_written} records to {dst}")


@app.command()
def headings(
    path: Path = typer.Argument(..., help="Outline file to read"),
    match: Annotated[
        str | None,
        typer.Option("--match", "-m", help="Match expression"),
    ] = None,
) -> None:
    """List the identifiers a batch export would produce."""
    doc = _load(path, None)
    matcher = _compile(match)
    count = 0
    pairs = export_batch(doc, matcher, include_inherited=True, whole_subtree=False)
    for identifier, record in pairs:
        todo = f"{record.todo} " if record.todo else ""
        typer.echo(f"  {identifier.counter:4d}  {identifier.slug}  [{todo}L{record.level}]")
        count += 1
    typer.echo(f"{count} headings")


@app.command()
def serve() -> None:
    """Start the MCP server (stdio transport)."""
    from org_extract.mcp.server import run_mcp_server

    run_mcp_server()
