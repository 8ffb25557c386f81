"""Two-tier (summary + detail) rendering of doc comments."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator
from dataclasses import dataclass, field

from typecrumb.models import DocElement, DocString, ElementKind

logger = logging.getLogger(__name__)

_URL = re.compile(r"https?://[^\s/$.?#].[^\s]*", re.IGNORECASE)
_FIRST_SENTENCE = re.compile(r"^.+?[.?!]")

ELLIPSIS = " ..."


@dataclass
class Node:
    """A minimal document node.

    Elements carry children; text runs use the tag ``#text`` and carry text.
    """

    tag: str
    text: str = ""
    attrs: dict[str, str] = field(default_factory=dict)
    children: list[Node] = field(default_factory=list)
    hidden: bool = False

    def append(self, child: Node) -> Node:
        self.children.append(child)
        return child

    def iter(self) -> Iterator[Node]:
        """Depth-first iteration over this node and its descendants."""
        yield self
        for child in self.children:
            yield from child.iter()

    def find_all(self, tag: str) -> list[Node]:
        return [n for n in self.iter() if n.tag == tag]

    def text_content(self) -> str:
        """Concatenated text of all text runs; ``br`` counts as a newline."""
        if self.tag == "#text":
            return self.text
        if self.tag == "br":
            return "\n"
        return "".join(child.text_content() for child in self.children)


def text_node(text: str) -> Node:
    return Node("#text", text=text)


@dataclass
class DocView:
    """A rendered doc comment. Exactly one of summary/detail is visible."""

    summary: Node
    detail: Node
    expandable: bool = False
    expanded: bool = False

    def __post_init__(self) -> None:
        self._sync()

    def toggle(self) -> bool:
        """Flip between summary and detail; returns whether anything changed."""
        if not self.expandable:
            return False
        self.expanded = not self.expanded
        self._sync()
        return True

    def _sync(self) -> None:
        self.summary.hidden = self.expanded
        self.detail.hidden = not self.expanded

    @property
    def is_empty(self) -> bool:
        return not self.summary.children and not self.detail.children


def first_sentence(text: str) -> str:
    """Leading run up to the first sentence terminator, else the whole text."""
    if not text:
        return ""
    match = _FIRST_SENTENCE.match(text)
    return match.group(0) if match else text


def linkify(text: str) -> list[Node]:
    """Split text into plain runs and ``a`` nodes for every http(s) URL.

    The match is greedy up to the next whitespace; no validation happens
    beyond the pattern.
    """
    nodes: list[Node] = []
    last = 0
    for match in _URL.finditer(text):
        if match.start() > last:
            nodes.append(text_node(text[last : match.start()]))
        url = match.group(0)
        nodes.append(Node("a", attrs={"href": url}, children=[text_node(url)]))
        last = match.end()
    if last < len(text):
        nodes.append(text_node(text[last:]))
    return nodes


def render(doc: DocString) -> DocView:
    """Render a doc string into a collapsed DocView.

    Plain strings get a first-sentence summary and a single paragraph of
    detail. Structured docs get the block-by-block detail and an ellipsis
    affordance when there is more than the first sentence to show.
    """
    summary = Node("div", attrs={"class": "summary"})
    detail = Node("div", attrs={"class": "detail"})

    if doc is None or doc == "":
        return DocView(summary, detail)

    if isinstance(doc, str):
        summary.append(text_node(first_sentence(doc)))
        detail.append(Node("p", children=[text_node(doc)]))
        return DocView(summary, detail)

    if not doc.elements:
        logger.warning("Structured doc string has no elements")
        return DocView(summary, detail)

    first = doc.elements[0]
    summary.children.extend(linkify(first_sentence(_head(first))))

    expandable = len(doc.elements) > 1 or len(first.content) > 1
    if expandable:
        summary.append(
            Node("span", attrs={"class": "ellipsis"}, children=[text_node(ELLIPSIS)])
        )

    for element in doc.elements:
        block = _render_element(element)
        if block is not None:
            detail.append(block)

    return DocView(summary, detail, expandable=expandable)


def _render_element(element: DocElement) -> Node | None:
    if element.kind is ElementKind.PARAGRAPH:
        return Node("p", children=_lines(_head(element)))
    if element.kind is ElementKind.HEADING:
        return Node(
            "div",
            attrs={"class": "heading"},
            children=[text_node(_head(element))],
        )
    if element.kind is ElementKind.LIST:
        items = [Node("li", children=_lines(item)) for item in element.content]
        return Node("ul", children=items)
    if element.kind is ElementKind.CODE:
        code = Node("code", children=[text_node(_head(element))])
        return Node("pre", children=[code])
    # Directives are parsed but not shown.
    return None


def _head(element: DocElement) -> str:
    return element.content[0] if element.content else ""


def _lines(text: str) -> list[Node]:
    """Linkified runs with an explicit ``br`` between embedded lines."""
    nodes: list[Node] = []
    lines = text.split("\n")
    for i, line in enumerate(lines):
        nodes.extend(linkify(line))
        if i < len(lines) - 1:
            nodes.append(Node("br"))
    return nodes

