"""Tests for the raw doc comment parser."""

from __future__ import annotations

import pytest

from typecrumb.godoc import parse_doc_comment
from typecrumb.models import DocElement, ElementKind

P = ElementKind.PARAGRAPH
H = ElementKind.HEADING
L = ElementKind.LIST
C = ElementKind.CODE
D = ElementKind.DIRECTIVE


def _elements(*pairs: tuple[ElementKind, tuple[str, ...]]) -> tuple[DocElement, ...]:
    return tuple(DocElement(kind, content) for kind, content in pairs)


class TestParseDocComment:
    """Tests for parse_doc_comment."""

    def test_empty(self) -> None:
        assert parse_doc_comment("").elements == ()

    @pytest.mark.parametrize(
        ("comment", "expected"),
        [
            ("This is a simple paragraph.", [(P, ("This is a simple paragraph.",))]),
            (
                "Paragraph one.\n\nParagraph two.",
                [(P, ("Paragraph one.",)), (P, ("Paragraph two.",))],
            ),
            (
                "This is a line with a colon:\nbut it's part of a paragraph.",
                [
                    (
                        P,
                        (
                            "This is a line with a colon: "
                            "but it's part of a paragraph.",
                        ),
                    )
                ],
            ),
        ],
        ids=["simple", "two-paragraphs", "joined-lines"],
    )
    def test_paragraphs(
        self, comment: str, expected: list[tuple[ElementKind, tuple[str, ...]]]
    ) -> None:
        assert parse_doc_comment(comment).elements == _elements(*expected)

    @pytest.mark.parametrize(
        "comment", ["\n# This is a heading\n", "\n#### This is a heading\n"]
    )
    def test_heading(self, comment: str) -> None:
        assert parse_doc_comment(comment).elements == _elements(
            (H, ("This is a heading",))
        )

    @pytest.mark.parametrize(
        ("comment", "text"),
        [
            ("# not a heading", "# not a heading"),
            ("\n#\n", "#"),
            ("\n#text\n", "#text"),
            ("\n# text", "# text"),
        ],
    )
    def test_not_heading(self, comment: str, text: str) -> None:
        assert parse_doc_comment(comment).elements == _elements((P, (text,)))

    def test_directive(self) -> None:
        assert parse_doc_comment("+directive: Do not use.").elements == _elements(
            (D, ("+directive: Do not use.",))
        )

    def test_directive_ends_paragraph(self) -> None:
        assert parse_doc_comment("Some text.\n+optional").elements == _elements(
            (P, ("Some text.",)), (D, ("+optional",))
        )

    @pytest.mark.parametrize(
        ("comment", "code"),
        [
            ("  code line 1\n  code line 2", "code line 1\ncode line 2"),
            ("  line 1\n  \n  line 3", "line 1\n\nline 3"),
        ],
    )
    def test_code_block(self, comment: str, code: str) -> None:
        assert parse_doc_comment(comment).elements == _elements((C, (code,)))

    def test_code_block_followed_by_paragraph(self) -> None:
        assert parse_doc_comment("  code\n\npara").elements == _elements(
            (C, ("code\n",)), (P, ("para",))
        )

    @pytest.mark.parametrize(
        "comment",
        ["* item 1\n* item 2", "1. item 1\na) item 2", "- item 1\n• item 2"],
    )
    def test_list(self, comment: str) -> None:
        assert parse_doc_comment(comment).elements == _elements(
            (L, ("item 1", "item 2"))
        )

    def test_list_multiline_item(self) -> None:
        comment = "* item 1\n  more text for item 1\n* item 2"
        assert parse_doc_comment(comment).elements == _elements(
            (L, ("item 1\nmore text for item 1", "item 2"))
        )

    def test_blank_line_splits_list(self) -> None:
        assert parse_doc_comment("* item 1\n\n* item 2").elements == _elements(
            (L, ("item 1",)), (L, ("item 2",))
        )

    def test_mixed_content(self) -> None:
        comment = (
            "This is a paragraph.\n\n# A Heading\n\n* list item 1\n* list item 2"
            "\n\n  code block\n\nAnother paragraph."
        )
        assert parse_doc_comment(comment).elements == _elements(
            (P, ("This is a paragraph.",)),
            (H, ("A Heading",)),
            (L, ("list item 1", "list item 2")),
            (C, ("code block\n",)),
            (P, ("Another paragraph.",)),
        )
