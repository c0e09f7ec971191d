"""Tests for record assembly."""

from org_extract.core.extract.record import assemble
from org_extract.core.importer.org_reader import parse_org_text
from org_extract.models.node import Document
from org_extract.models.record import Record
from tests.unit.builders import find_containing, find_heading


def test_assemble_child_with_inheritance(planner_doc: Document) -> None:
    """Child inherits Root's tag and has Root as its outline path."""
    child = find_heading(planner_doc, "Child")

    record = assemble(planner_doc, child, include_inherited=True, whole_subtree=False)

    assert record.title == "Child"
    assert record.level == 2
    assert record.todo == "TODO"
    assert record.priority == "A"
    assert "#work" in record.tags
    assert "home" in record.tags
    assert record.filetags == ("planner",)
    assert record.scheduled == "<2024-03-01 Fri>"
    assert record.deadline == "<2024-03-05 Tue>"
    assert record.archived is False
    assert record.commented is False
    assert record.outline_path == ("Root",)
    assert record.properties == (("A", "1"), ("B", "2"), ("A", "3"))


def test_assemble_without_inheritance_uses_own_tags(planner_doc: Document) -> None:
    child = find_heading(planner_doc, "Child")
    record = assemble(planner_doc, child, include_inherited=False, whole_subtree=False)

    assert record.tags == ("#work",)
    assert record.filetags == ("planner",)


def test_assemble_from_paragraph_uses_enclosing_heading(planner_doc: Document) -> None:
    paragraph = find_containing(planner_doc, "Child leading paragraph.")

    element = assemble(planner_doc, paragraph, include_inherited=True, whole_subtree=False)
    subtree = assemble(planner_doc, paragraph, include_inherited=True, whole_subtree=True)

    assert element.title == "Child"
    assert element.content == "Child leading paragraph.\n"
    assert subtree.content is not None
    assert "Sub one text." in subtree.content
    assert "Sub two text." in subtree.content


def test_assemble_outside_any_heading(planner_doc: Document) -> None:
    preamble = find_containing(planner_doc, "Preamble text")

    record = assemble(planner_doc, preamble, include_inherited=True, whole_subtree=True)

    assert record == Record(filetags=("planner",), content="Preamble text before any heading.\n")
    assert record.title is None
    assert record.archived is None
    assert record.tags == ()
    assert record.properties == ()


def test_assemble_heading_without_drawer_or_planning(planner_doc: Document) -> None:
    record = assemble(planner_doc, find_heading(planner_doc, "Sub one"), include_inherited=True, whole_subtree=False)

    assert record.properties == ()
    assert record.scheduled is None
    assert record.deadline is None
    assert record.priority is None
    assert record.todo is None
    assert record.content == "Sub one text.\n"


def test_assemble_renders_title_and_flags(planner_doc: Document) -> None:
    second = find_heading(planner_doc, "Second root [[https://example.com][Example]] link")
    record = assemble(planner_doc, second, include_inherited=False, whole_subtree=False)

    assert record.title == "Second root Example link"
    assert record.commented is True
    assert record.outline_path == ()

    sibling = assemble(planner_doc, find_heading(planner_doc, "Sibling"), include_inherited=False, whole_subtree=False)
    assert sibling.archived is True
    assert sibling.todo == "DONE"
    assert sibling.content is None


def test_assemble_document_without_filetags() -> None:
    doc = parse_org_text("* Only\n")
    record = assemble(doc, find_heading(doc, "Only"), include_inherited=True, whole_subtree=True)

    assert record.filetags == ()
    assert record.tags == ()
    assert record.content == "* Only\n"


def test_assemble_heading_target_keeps_sub_headings_out_of_content() -> None:
    """Element-only content is the heading's own section; whole subtree adds the rest."""
    doc = parse_org_text("* Top\nLead para.\n** Sub one\nOne.\n** Sub two\nTwo.\n")
    top = find_heading(doc, "Top")

    element = assemble(doc, top, include_inherited=True, whole_subtree=False)
    subtree = assemble(doc, top, include_inherited=True, whole_subtree=True)

    assert element.content == "Lead para.\n"
    assert subtree.content == doc.source


def test_assemble_deduplicates_own_tags_without_inheritance() -> None:
    doc = parse_org_text("* H :a:b:a:\n")
    record = assemble(doc, find_heading(doc, "H"), include_inherited=False, whole_subtree=False)

    assert record.tags == ("a", "b")
