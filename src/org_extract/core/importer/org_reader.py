"""Parse Org-style outline text into a Document node arena."""

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from loguru import logger

from org_extract.config import ReaderConfig
from org_extract.models.node import Document, Node, NodeKind

_HEADING_RE = re.compile(r"^(?P<stars>\*+)[ \t]+(?P<rest>.*?)[ \t]*$")
_PRIORITY_RE = re.compile(r"^\[#(?P<priority>.)\](?:[ \t]+|$)")
_TAGS_RE = re.compile(r"(?:^|[ \t]+)(?P<tags>:(?:[\w@#%]+:)+)$")
_KEYWORD_RE = re.compile(r"^[ \t]*#\+(?P<key>[^:\s]+):[ \t]*(?P<value>.*?)[ \t]*$")
_BLOCK_BEGIN_RE = re.compile(r"^[ \t]*#\+begin_(?P<name>\S+)", re.IGNORECASE)
_DRAWER_RE = re.compile(r"^[ \t]*:(?P<name>[\w-]+):[ \t]*$")
_DRAWER_END_RE = re.compile(r"^[ \t]*:END:[ \t]*$", re.IGNORECASE)
_PROPERTIES_RE = re.compile(r"^[ \t]*:PROPERTIES:[ \t]*$", re.IGNORECASE)
_PROPERTY_RE = re.compile(r"^[ \t]*:(?P<key>\S+?):(?:[ \t]+(?P<value>.*?))?[ \t]*$")
_PLANNING_LINE_RE = re.compile(r"^[ \t]*(?:SCHEDULED|DEADLINE|CLOSED):")
_PLANNING_RE = re.compile(
    r"(?P<kind>SCHEDULED|DEADLINE|CLOSED):[ \t]*"
    r"(?P<ts>[<\[][^>\]\n]*[>\]](?:--[<\[][^>\]\n]*[>\]])?)"
)
_FAST_KEY_RE = re.compile(r"\(.*\)$")
_TODO_SETTINGS = ("TODO", "SEQ_TODO", "TYP_TODO")


@dataclass
class _Builder:
    """Mutable node under construction; frozen into a Node at the end."""

    index: int
    kind: NodeKind
    begin: int
    end: int
    parent: int | None
    children: list[int] = field(default_factory=list)
    attrs: dict[str, Any] = field(default_factory=dict)

    def freeze(self) -> Node:
        return Node(
            index=self.index,
            kind=self.kind,
            begin=self.begin,
            end=self.end,
            parent=self.parent,
            children=tuple(self.children),
            **self.attrs,
        )


def _split_lines(text: str) -> list[tuple[int, str]]:
    """Split text into (offset, line) pairs, keeping line terminators."""
    lines: list[tuple[int, str]] = []
    pos = 0
    while pos < len(text):
        nl = text.find("\n", pos)
        end = len(text) if nl == -1 else nl + 1
        lines.append((pos, text[pos:end]))
        pos = end
    return lines


def _scan_settings(
    lines: list[tuple[int, str]], config: ReaderConfig
) -> tuple[tuple[str, ...], str | None, tuple[str, ...]]:
    """Collect in-buffer settings: file tags, title and TODO keywords."""
    filetags: list[str] = []
    title: str | None = None
    todo_keywords: list[str] = []
    for _offset, line in lines:
        m = _KEYWORD_RE.match(line.rstrip("\r\n"))
        if m is None:
            continue
        key = m["key"].upper()
        value = m["value"]
        if key == "FILETAGS":
            filetags.extend(t for t in re.split(r"[:\s]+", value) if t)
        elif key == "TITLE":
            title = value if title is None else f"{title} {value}"
        elif key in _TODO_SETTINGS:
            todo_keywords.extend(_FAST_KEY_RE.sub("", w) for w in value.split() if w != "|")
    return (
        tuple(dict.fromkeys(filetags)),
        title or None,
        tuple(todo_keywords) or config.todo_keywords,
    )


class _OrgReader:
    """Single-pass line reader building the node arena."""

    def __init__(self, text: str, config: ReaderConfig) -> None:
        self.text = text
        self.config = config
        self.lines = _split_lines(text)
        self.filetags, self.title, self.todo_keywords = _scan_settings(self.lines, config)
        self.builders: list[_Builder] = []
        # Stack of open heading indices, outermost first.
        self.headings: list[int] = []
        self.paragraph: int | None = None
        self._new(NodeKind.DOCUMENT, 0, len(text), parent=None)

    @property
    def container(self) -> int:
        return self.headings[-1] if self.headings else 0

    def read(self) -> Document:
        i = 0
        while i < len(self.lines):
            i = self._read_line(i)
        self._close_paragraph()
        while self.headings:
            self._close_heading(self.headings.pop(), len(self.text))
        if self.text:
            self.builders[0].attrs.update(contents_begin=0, contents_end=len(self.text))

        return Document(
            source=self.text,
            nodes=tuple(b.freeze() for b in self.builders),
            filetags=self.filetags,
            tags_exclude_from_inheritance=self.config.tags_exclude_from_inheritance,
            title=self.title,
        )

    # --- node helpers ---

    def _new(
        self, kind: NodeKind, begin: int, end: int, *, parent: int | None, **attrs: Any
    ) -> _Builder:
        builder = _Builder(
            index=len(self.builders), kind=kind, begin=begin, end=end, parent=parent, attrs=attrs
        )
        self.builders.append(builder)
        if parent is not None:
            self.builders[parent].children.append(builder.index)
        return builder

    def _wrapped(
        self, kind: NodeKind, first: int, last: int, *, parent: int, **attrs: Any
    ) -> _Builder:
        """Create a node for lines first..last whose contents are the lines in between."""
        begin = self.lines[first][0]
        last_begin, last_line = self.lines[last]
        if last > first + 1:
            attrs.update(contents_begin=self.lines[first + 1][0], contents_end=last_begin)
        return self._new(kind, begin, last_begin + len(last_line), parent=parent, **attrs)

    def _find_line(self, start: int, pattern: re.Pattern[str]) -> int | None:
        """Find the closing line of a drawer or block. Headings end the search."""
        for j in range(start, len(self.lines)):
            line = self.lines[j][1].rstrip("\r\n")
            if _HEADING_RE.match(line):
                return None
            if pattern.match(line):
                return j
        return None

    def _close_paragraph(self) -> None:
        self.paragraph = None

    def _close_section(self, heading: _Builder, end: int) -> None:
        """End the heading's direct contents at its first sub-heading or its own end."""
        if "contents_end" in heading.attrs or heading.attrs["contents_begin"] is None:
            return
        if heading.attrs["contents_begin"] < end:
            heading.attrs["contents_end"] = end
        else:
            heading.attrs["contents_begin"] = None

    def _close_heading(self, index: int, end: int) -> None:
        heading = self.builders[index]
        heading.end = end
        self._close_section(heading, end)

    # --- line handlers ---

    def _read_line(self, i: int) -> int:
        begin, line = self.lines[i]
        stripped = line.rstrip("\r\n")

        heading_match = _HEADING_RE.match(stripped)
        if heading_match:
            return self._read_heading(i, heading_match)

        if not stripped.strip():
            self._close_paragraph()
            return i + 1

        block = _BLOCK_BEGIN_RE.match(stripped)
        if block:
            end_re = re.compile(rf"^[ \t]*#\+end_{re.escape(block['name'])}[ \t]*$", re.IGNORECASE)
            last = self._find_line(i + 1, end_re)
            if last is not None:
                self._close_paragraph()
                name = block["name"].upper()
                self._wrapped(NodeKind.BLOCK, i, last, parent=self.container, key=name)
                return last + 1

        keyword = _KEYWORD_RE.match(stripped)
        if keyword:
            self._close_paragraph()
            self._new(
                NodeKind.KEYWORD,
                begin,
                begin + len(line),
                parent=self.container,
                key=keyword["key"].upper(),
                value=keyword["value"],
            )
            return i + 1

        drawer = _DRAWER_RE.match(stripped)
        if drawer and drawer["name"].upper() != "END":
            last = self._find_line(i + 1, _DRAWER_END_RE)
            if last is not None:
                self._close_paragraph()
                self._wrapped(NodeKind.DRAWER, i, last, parent=self.container, key=drawer["name"])
                return last + 1

        self._extend_paragraph(begin, line)
        return i + 1

    def _extend_paragraph(self, begin: int, line: str) -> None:
        end = begin + len(line)
        if self.paragraph is None:
            paragraph = self._new(
                NodeKind.PARAGRAPH,
                begin,
                end,
                parent=self.container,
                contents_begin=begin,
                contents_end=end,
            )
            self.paragraph = paragraph.index
        else:
            paragraph = self.builders[self.paragraph]
            paragraph.end = end
            paragraph.attrs["contents_end"] = end

    def _read_heading(self, i: int, match: re.Match[str]) -> int:
        self._close_paragraph()
        begin, line = self.lines[i]
        level = len(match["stars"])
        while self.headings and self.builders[self.headings[-1]].attrs["level"] >= level:
            self._close_heading(self.headings.pop(), begin)
        if self.headings:
            self._close_section(self.builders[self.headings[-1]], begin)

        heading = self._new(
            NodeKind.HEADING,
            begin,
            len(self.text),
            parent=self.container,
            level=level,
            contents_begin=begin + len(line),
            **self._parse_heading_text(match["rest"] or ""),
        )
        self.headings.append(heading.index)
        i = self._read_planning(i + 1, heading)
        return self._read_property_drawer(i, heading)

    def _parse_heading_text(self, text: str) -> dict[str, Any]:
        """Split a heading line (after the stars) into its attributes."""
        todo_keyword: str | None = None
        words = text.split(maxsplit=1)
        if words and words[0] in self.todo_keywords:
            todo_keyword = words[0]
            text = words[1] if len(words) > 1 else ""

        priority: str | None = None
        m = _PRIORITY_RE.match(text)
        if m:
            priority = m["priority"]
            text = text[m.end() :]

        commented = text == "COMMENT" or text.startswith(("COMMENT ", "COMMENT\t"))
        if commented:
            text = text[len("COMMENT") :].lstrip()

        tags: tuple[str, ...] = ()
        m = _TAGS_RE.search(text)
        if m:
            tags = tuple(dict.fromkeys(t for t in m["tags"].split(":") if t))
            text = text[: m.start()]

        title = text.strip()
        return {
            "title": title or None,
            "todo_keyword": todo_keyword,
            "priority": priority,
            "commented": commented,
            "tags": tags,
            "archived": self.config.archive_tag in tags,
        }

    def _read_planning(self, i: int, heading: _Builder) -> int:
        if i >= len(self.lines):
            return i
        begin, line = self.lines[i]
        stripped = line.rstrip("\r\n")
        if not _PLANNING_LINE_RE.match(stripped):
            return i

        planning = self._new(NodeKind.PLANNING, begin, begin + len(line), parent=heading.index)
        for m in _PLANNING_RE.finditer(stripped):
            ts_begin = begin + m.start("ts")
            ts_end = begin + m.end("ts")
            timestamp = self._new(
                NodeKind.TIMESTAMP,
                ts_begin,
                ts_end,
                parent=planning.index,
                contents_begin=ts_begin,
                contents_end=ts_end,
                key=m["kind"],
                raw=m["ts"],
            )
            if m["kind"] == "SCHEDULED":
                heading.attrs["scheduled"] = timestamp.index
            elif m["kind"] == "DEADLINE":
                heading.attrs["deadline"] = timestamp.index
        return i + 1

    def _read_property_drawer(self, i: int, heading: _Builder) -> int:
        if i >= len(self.lines) or not _PROPERTIES_RE.match(self.lines[i][1].rstrip("\r\n")):
            return i
        last = self._find_line(i + 1, _DRAWER_END_RE)
        if last is None:
            return i

        drawer = self._wrapped(NodeKind.PROPERTY_DRAWER, i, last, parent=heading.index)
        for begin, line in self.lines[i + 1 : last]:
            m = _PROPERTY_RE.match(line.rstrip("\r\n"))
            if m is None:
                continue
            self._new(
                NodeKind.NODE_PROPERTY,
                begin,
                begin + len(line),
                parent=drawer.index,
                key=m["key"],
                value=m["value"] or "",
            )
        return last + 1


def parse_org_text(text: str, *, config: ReaderConfig | None = None) -> Document:
    """Parse outline text into a Document.

    Args:
        text: Full source text of the document.
        config: Reader settings (TODO keywords, archive tag, tag inheritance
            exclusions). Defaults to ReaderConfig().

    Returns:
        Document whose nodes carry spans into ``text``.
    """
    doc = _OrgReader(text, config or ReaderConfig()).read()
    logger.debug(
        "Parsed {} nodes ({} headings)",
        len(doc.nodes),
        sum(1 for n in doc.nodes if n.is_heading),
    )
    return doc


def load_document(path: Path, *, config: ReaderConfig | None = None) -> Document:
    """Read and parse an outline file."""
    logger.debug("Reading {}", path)
    return parse_org_text(path.read_text(encoding="utf-8"), config=config)
