"""Tag/property match expressions for selecting headings.

Supports the common subset of Org match strings::

    work+urgent-someday|home       tags, with + / - / & joiners and | alternatives
    TODO="NEXT"  LEVEL>1  EFFORT="2h"   comparisons on keyword, level, properties
    work/TODO|NEXT                 restrict by TODO keyword after a slash
"""

import operator
import re
from collections.abc import Callable
from dataclasses import dataclass

from org_extract.core.extract.properties import flatten_properties
from org_extract.core.tree.navigation import inherited_tags
from org_extract.models.node import Document, Node

_TERM_RE = re.compile(
    r"""
    (?P<sign>[+&-]?)
    (?:
        (?P<attr>[A-Za-z_][\w-]*)(?P<op><>|!=|<=|>=|=|<|>)(?P<value>"[^"]*"|-?\d+)
      | (?P<tag>[\w@#%]+)
    )
    """,
    re.VERBOSE,
)
_TODO_WORD_RE = re.compile(r"[^\s|]+")
_TODO_KEYWORD_RE = re.compile(r"[\w-]+")

_OPERATORS: dict[str, Callable[[object, object], bool]] = {
    "=": operator.eq,
    "<>": operator.ne,
    "!=": operator.ne,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
}


class MatcherSyntaxError(ValueError):
    """Raised when a match expression cannot be parsed."""

    def __init__(self, expression: str, position: int, reason: str) -> None:
        msg = f"Invalid match expression {expression!r} at position {position}: {reason}"
        super().__init__(msg)
        self.expression = expression
        self.position = position


@dataclass(frozen=True)
class Term:
    """A single condition: a tag or an attribute comparison, possibly negated."""

    negated: bool
    tag: str | None = None
    attr: str | None = None
    op: str | None = None
    value: str | int | None = None


@dataclass(frozen=True)
class TagMatcher:
    """Compiled match expression.

    ``alternatives`` is a disjunction of conjunctions of terms.
    ``todo_keywords`` restricts by TODO keyword when non-empty.
    """

    expression: str
    alternatives: tuple[tuple[Term, ...], ...]
    todo_keywords: tuple[str, ...] = ()
    use_inheritance: bool = True

    def matches(self, document: Document, heading: Node) -> bool:
        if self.todo_keywords and heading.todo_keyword not in self.todo_keywords:
            return False
        if not self.alternatives:
            return True
        tags = set(inherited_tags(document, heading) if self.use_inheritance else heading.tags)
        return any(
            all(self._term_holds(document, heading, tags, term) for term in alternative)
            for alternative in self.alternatives
        )

    def _term_holds(self, document: Document, heading: Node, tags: set[str], term: Term) -> bool:
        if term.tag is not None:
            result = term.tag in tags
        else:
            result = _compare(document, heading, term)
        return result != term.negated


def _compare(document: Document, heading: Node, term: Term) -> bool:
    attr = (term.attr or "").upper()
    actual: str | int | None
    if attr == "TODO":
        actual = heading.todo_keyword
    elif attr == "LEVEL":
        actual = heading.level
    elif attr == "PRIORITY":
        actual = heading.priority
    else:
        actual = next(
            (v for k, v in flatten_properties(document, heading) if k.upper() == attr),
            None,
        )

    expected = term.value
    if isinstance(expected, int):
        try:
            actual = int(actual) if actual is not None else None
        except (TypeError, ValueError):
            return False
    elif actual is not None:
        actual = str(actual)

    compare = _OPERATORS[term.op or "="]
    if actual is None:
        # Missing values compare as unequal to everything.
        return compare is operator.ne
    try:
        return compare(actual, expected)
    except TypeError:
        return False


def _parse_alternative(expression: str, text: str, offset: int) -> tuple[Term, ...]:
    if not text:
        raise MatcherSyntaxError(expression, offset, "empty alternative")
    terms: list[Term] = []
    pos = 0
    while pos < len(text):
        m = _TERM_RE.match(text, pos)
        if m is None or m.end() == pos:
            raise MatcherSyntaxError(expression, offset + pos, f"unexpected {text[pos]!r}")
        if m["tag"] is not None:
            terms.append(Term(negated=m["sign"] == "-", tag=m["tag"]))
        else:
            raw = m["value"]
            value: str | int = raw[1:-1] if raw.startswith('"') else int(raw)
            terms.append(Term(negated=m["sign"] == "-", attr=m["attr"], op=m["op"], value=value))
        pos = m.end()
    return tuple(terms)


def compile_matcher(expression: str | None, *, use_inheritance: bool = True) -> TagMatcher | None:
    """Compile a match expression.

    Returns None for a missing or blank expression, meaning "match all".

    Raises:
        MatcherSyntaxError: If the expression is malformed.
    """
    if expression is None or not expression.strip():
        return None

    text = expression.strip()
    tag_part, slash, todo_part = text.partition("/")
    todo_keywords: tuple[str, ...] = ()
    if slash:
        todo_keywords = tuple(_TODO_WORD_RE.findall(todo_part))
        if not todo_keywords:
            raise MatcherSyntaxError(expression, len(tag_part) + 1, "no TODO keywords after '/'")
        if not all(_TODO_KEYWORD_RE.fullmatch(word) for word in todo_keywords):
            raise MatcherSyntaxError(expression, len(tag_part) + 1, "invalid TODO keyword")

    alternatives: list[tuple[Term, ...]] = []
    if tag_part.strip():
        offset = 0
        for chunk in tag_part.split("|"):
            alternatives.append(_parse_alternative(expression, chunk.strip(), offset))
            offset += len(chunk) + 1

    return TagMatcher(
        expression=expression,
        alternatives=tuple(alternatives),
        todo_keywords=todo_keywords,
        use_inheritance=use_inheritance,
    )
