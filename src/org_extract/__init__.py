"""Heading metadata extraction for outline documents."""

from org_extract.config import ExtractConfig, ReaderConfig
from org_extract.core.export.batch import export_batch
from org_extract.core.extract.record import assemble
from org_extract.core.importer.org_reader import load_document, parse_org_text
from org_extract.models.record import Identifier, Record
from org_extract.protocols import MatcherProtocol, WriterProtocol
from org_extract.writer import FileWriter

__all__ = [
    "ExtractConfig",
    "FileWriter",
    "Identifier",
    "MatcherProtocol",
    "ReaderConfig",
    "Record",
    "WriterProtocol",
    "assemble",
    "export_batch",
    "load_document",
    "parse_org_text",
]
