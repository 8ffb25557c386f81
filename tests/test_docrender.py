"""Tests for doc comment rendering."""

from __future__ import annotations

import logging

import pytest

from typecrumb.docrender import ELLIPSIS, Node, first_sentence, linkify, render
from typecrumb.models import DocElement, ElementKind, StructuredDoc


def _structured(*elements: tuple[str, tuple[str, ...]]) -> StructuredDoc:
    return StructuredDoc(tuple(DocElement(ElementKind(k), c) for k, c in elements))


class TestFirstSentence:
    """Tests for first_sentence."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("One. Two.", "One."),
            ("Really? Yes.", "Really?"),
            ("Stop! Now.", "Stop!"),
            ("no terminator here", "no terminator here"),
            ("", ""),
        ],
    )
    def test_first_sentence(self, text: str, expected: str) -> None:
        assert first_sentence(text) == expected


class TestLinkify:
    """Tests for linkify."""

    def test_plain_text(self) -> None:
        nodes = linkify("nothing to see")
        assert [n.tag for n in nodes] == ["#text"]
        assert nodes[0].text == "nothing to see"

    def test_url_in_middle(self) -> None:
        nodes = linkify("More info: https://k8s.io/docs for details")
        assert [n.tag for n in nodes] == ["#text", "a", "#text"]
        assert nodes[1].attrs["href"] == "https://k8s.io/docs"
        assert nodes[1].text_content() == "https://k8s.io/docs"
        assert nodes[2].text == " for details"

    def test_scheme_case_insensitive(self) -> None:
        nodes = linkify("HTTP://example.com")
        assert nodes[0].tag == "a"

    def test_multiple_urls(self) -> None:
        nodes = linkify("http://a.io and http://b.io")
        assert [n.attrs.get("href") for n in nodes if n.tag == "a"] == [
            "http://a.io",
            "http://b.io",
        ]

    def test_empty(self) -> None:
        assert linkify("") == []


class TestRenderPlain:
    """Tests for rendering raw doc strings."""

    def test_none_renders_nothing(self) -> None:
        view = render(None)
        assert view.is_empty
        assert not view.expandable

    def test_empty_string_renders_nothing(self) -> None:
        assert render("").is_empty

    def test_plain_string(self) -> None:
        view = render("First sentence. Second one.")
        assert view.summary.text_content() == "First sentence."
        assert view.detail.text_content() == "First sentence. Second one."
        assert not view.expandable
        assert not view.summary.hidden
        assert view.detail.hidden

    def test_plain_string_does_not_toggle(self) -> None:
        view = render("Only. Text.")
        assert view.toggle() is False
        assert not view.summary.hidden


class TestRenderStructured:
    """Tests for rendering parsed doc strings."""

    def test_two_paragraphs(self) -> None:
        doc = _structured(
            ("p", ("Spec of the pod. Read carefully.",)),
            ("p", ("More info: https://k8s.io/docs",)),
        )
        view = render(doc)

        assert view.expandable
        assert view.summary.text_content() == "Spec of the pod." + ELLIPSIS
        assert [n.tag for n in view.detail.children] == ["p", "p"]
        assert view.detail.find_all("a")[0].attrs["href"] == "https://k8s.io/docs"

    def test_toggle_never_shows_both(self) -> None:
        doc = _structured(("p", ("One.",)), ("p", ("Two.",)))
        view = render(doc)

        assert not view.summary.hidden and view.detail.hidden
        assert view.toggle() is True
        assert view.summary.hidden and not view.detail.hidden
        assert view.toggle() is True
        assert not view.summary.hidden and view.detail.hidden

    def test_single_paragraph_not_expandable(self) -> None:
        view = render(_structured(("p", ("Just this. And this.",))))
        assert not view.expandable
        assert view.summary.find_all("span") == []

    def test_multi_item_first_element_is_expandable(self) -> None:
        view = render(_structured(("l", ("one", "two"))))
        assert view.expandable

    def test_summary_is_linkified(self) -> None:
        view = render(_structured(("p", ("See http://localhost/a",))))
        assert view.summary.find_all("a")[0].attrs["href"] == "http://localhost/a"

    def test_heading_list_and_code(self) -> None:
        doc = _structured(
            ("h", ("Usage",)),
            ("l", ("first", "second\nline")),
            ("c", ("x := 1\ny := 2",)),
        )
        detail = render(doc).detail

        heading, ul, pre = detail.children
        assert heading.tag == "div" and heading.attrs["class"] == "heading"
        assert heading.text_content() == "Usage"
        assert [li.text_content() for li in ul.children] == ["first", "second\nline"]
        assert len(ul.children[1].find_all("br")) == 1
        assert pre.tag == "pre"
        assert pre.children[0].tag == "code"
        assert pre.text_content() == "x := 1\ny := 2"

    def test_paragraph_lines_split_with_br(self) -> None:
        detail = render(_structured(("p", ("a\nb\nc",)))).detail
        assert len(detail.find_all("br")) == 2

    def test_directive_renders_nothing(self) -> None:
        doc = _structured(("p", ("Text.",)), ("d", ("+k8s:openapi-gen=true",)))
        detail = render(doc).detail
        assert [n.tag for n in detail.children] == ["p"]

    def test_empty_elements_logs_warning(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.WARNING, logger="typecrumb.docrender"):
            view = render(StructuredDoc(()))
        assert view.is_empty
        assert "no elements" in caplog.text

    def test_null_elements_logs_warning(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.WARNING, logger="typecrumb.docrender"):
            view = render(StructuredDoc(None))
        assert view.is_empty
        assert "no elements" in caplog.text


class TestNode:
    """Tests for the Node helpers."""

    def test_iter_is_depth_first(self) -> None:
        root = Node("div", children=[Node("p", children=[Node("a")]), Node("ul")])
        assert [n.tag for n in root.iter()] == ["div", "p", "a", "ul"]
