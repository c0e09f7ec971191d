"""Drive a batch export into an output directory."""

from dataclasses import dataclass

from loguru import logger

from org_extract.config import ExtractConfig
from org_extract.core.export.batch import export_batch
from org_extract.models.node import Document
from org_extract.models.record import dump_record
from org_extract.protocols import MatcherProtocol, WriterProtocol


@dataclass(frozen=True)
class ExportStats:
    """Summary of an export run."""

    records_written: int
    last_counter: int | None


def export_to_directory(
    document: Document,
    writer: WriterProtocol,
    *,
    config: ExtractConfig,
    matcher: MatcherProtocol | None = None,
) -> ExportStats:
    """Write one JSON file per selected heading.

    Args:
        document: Parsed document to export.
        writer: Destination for the output files.
        config: Extraction options and the filename template.
        matcher: Heading selector; None exports every heading.

    Returns:
        ExportStats with the number of records written.
    """
    written = 0
    last_counter: int | None = None
    for identifier, record in export_batch(
        document,
        matcher,
        include_inherited=config.include_inherited_tags,
        whole_subtree=config.whole_subtree,
    ):
        fname = config.format_filename(identifier)
        writer.make_data_file(fname, contents=dump_record(record, pretty=config.pretty))
        written += 1
        last_counter = identifier.counter

    writer.finalize()
    logger.info("Export complete: {} records", written)
    return ExportStats(records_written=written, last_counter=last_counter)
