"""Shared test fixtures."""

from pathlib import Path

import pytest

from org_extract.core.importer.org_reader import parse_org_text
from org_extract.models.node import Document

PLANNER_ORG = """\
#+TITLE: Planner
#+FILETAGS: :planner:

Preamble text before any heading.

* Root :home:
Root intro paragraph.

** TODO [#A] Child :#work:
SCHEDULED: <2024-03-01 Fri> DEADLINE: <2024-03-05 Tue>
:PROPERTIES:
:A: 1
:B: 2
:A: 3
:END:
Child leading paragraph.

*** Sub one
Sub one text.
*** Sub two
Sub two text.
** DONE Sibling :ARCHIVE:
* COMMENT Second root [[https://example.com][Example]] link
Second body.
"""


@pytest.fixture
def planner_doc() -> Document:
    """The planner document parsed with default reader settings."""
    return parse_org_text(PLANNER_ORG)


@pytest.fixture
def planner_file(tmp_path: Path) -> Path:
    """The planner document written to disk."""
    path = tmp_path / "planner.org"
    path.write_text(PLANNER_ORG, encoding="utf-8")
    return path
