"""Parse raw Go-style doc comments into the structured element form."""

from __future__ import annotations

from typecrumb.models import DocElement, ElementKind, StructuredDoc

_BULLETS = ("*", "+", "-", "•")


def parse_doc_comment(comment: str) -> StructuredDoc:
    """Split a raw doc comment into paragraph, heading, list, code and directive blocks.

    Args:
        comment: The comment text with comment markers already removed.

    Returns:
        A StructuredDoc; empty input yields no elements.
    """
    parser = _DocParser(comment.split("\n") if comment else [])
    return StructuredDoc(tuple(parser.parse()))


class _DocParser:
    """Line cursor over a doc comment."""

    def __init__(self, lines: list[str]) -> None:
        self.lines = lines
        self.pos = 0

    def parse(self) -> list[DocElement]:
        elements: list[DocElement] = []
        while self.pos < len(self.lines):
            line = self.lines[self.pos]

            if not line.strip():
                self.pos += 1
                continue

            if _is_list_item(line):
                elements.append(self._parse_list())
            elif line[0] in " \t":
                elements.append(self._parse_code_block())
            elif line.startswith("+"):
                # '+' lines are directives, e.g. "+optional".
                self.pos += 1
                elements.append(DocElement(ElementKind.DIRECTIVE, (line,)))
            elif self._is_heading():
                self.pos += 1
                elements.append(
                    DocElement(ElementKind.HEADING, (line.lstrip("#").strip(),))
                )
            else:
                elements.append(self._parse_paragraph())
        return elements

    def _is_heading(self) -> bool:
        """Markdown-style heading: '#'s, a space, and blank lines on both sides."""
        if self.pos == 0 or self.pos == len(self.lines) - 1:
            return False
        before = self.lines[self.pos - 1]
        after = self.lines[self.pos + 1]
        line = self.lines[self.pos]
        if before.strip() or after.strip():
            return False
        if line == "#" or not line.startswith("#"):
            return False
        return line.lstrip("#").startswith(" ")

    def _parse_paragraph(self) -> DocElement:
        content: list[str] = []
        while self.pos < len(self.lines) and self.lines[self.pos].strip():
            line = self.lines[self.pos]
            if line.startswith("+"):
                break
            content.append(line)
            self.pos += 1
        return DocElement(ElementKind.PARAGRAPH, (" ".join(content),))

    def _parse_code_block(self) -> DocElement:
        first = self.lines[self.pos]
        indent = len(first) - len(first.lstrip(" \t"))

        start = self.pos
        while self.pos < len(self.lines):
            line = self.lines[self.pos]
            if line.strip() and line[0] not in " \t":
                break
            self.pos += 1

        content = [
            line[indent:] if len(line) >= indent else line
            for line in self.lines[start : self.pos]
        ]
        return DocElement(ElementKind.CODE, ("\n".join(content),))

    def _parse_list(self) -> DocElement:
        items: list[str] = []
        while self.pos < len(self.lines) and _is_list_item(self.lines[self.pos]):
            line = self.lines[self.pos]
            trimmed = line.lstrip(" \t")
            text = trimmed[_marker_end(trimmed) :].lstrip(" \t")
            text_indent = len(line) - len(text)
            item = [text]
            self.pos += 1

            while self.pos < len(self.lines):
                nxt = self.lines[self.pos]
                if not nxt.strip() or _is_list_item(nxt):
                    break
                nxt_indent = len(nxt) - len(nxt.lstrip(" \t"))
                if nxt_indent < text_indent:
                    break
                item.append(nxt[text_indent:])
                self.pos += 1
            items.append("\n".join(item))
        return DocElement(ElementKind.LIST, tuple(items))


def _marker_end(trimmed: str) -> int:
    """Return the index just past a list marker at the start of trimmed."""
    if trimmed[:1] in _BULLETS:
        return 1
    i = 0
    while i < len(trimmed) and trimmed[i].isalnum():
        i += 1
    if i < len(trimmed) and trimmed[i] in ".)":
        return i + 1
    return 0


def _is_list_item(line: str) -> bool:
    trimmed = line.lstrip(" \t")
    if not trimmed:
        return False

    if trimmed[0] in _BULLETS and trimmed[1:2] in (" ", "\t"):
        return True

    i = 0
    while i < len(trimmed) and trimmed[i].isalnum():
        i += 1
    return (
        0 < i < len(trimmed) - 1
        and trimmed[i] in ".)"
        and trimmed[i + 1] in " \t"
    )
