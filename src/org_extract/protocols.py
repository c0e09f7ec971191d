"""Protocols for dependency injection in extraction and export."""

from typing import Protocol, runtime_checkable

from org_extract.models.node import Document, Node


@runtime_checkable
class MatcherProtocol(Protocol):
    """Protocol for heading selection predicates used by batch export."""

    def matches(self, document: Document, heading: Node) -> bool:
        """Return True if the heading should be exported."""
        ...


@runtime_checkable
class WriterProtocol(Protocol):
    """Protocol for file writers used by the export runner."""

    def make_data_file(self, fname_rel: str, *, contents: str) -> None:
        """Write a file to the output directory."""
        ...

    def finalize(self) -> None:
        """Report what was written."""
        ...
