"""Quick-open search over root-eligible types."""

from __future__ import annotations

import locale
import logging

from typecrumb.graph import TypeGraph

logger = logging.getLogger(__name__)


def _short_name(type_name: str) -> str:
    return type_name.rsplit(".", 1)[-1]


def _sort_key(type_name: str) -> tuple[str, str, str]:
    short = _short_name(type_name)
    return (
        locale.strxfrm(short.casefold()),
        locale.strxfrm(short),
        locale.strxfrm(type_name),
    )


class SearchIndex:
    """Filters and orders the graph's root types."""

    def __init__(self, graph: TypeGraph) -> None:
        self._roots = graph.root_names()

    def __len__(self) -> int:
        return len(self._roots)

    def query(self, filter_text: str = "") -> list[str]:
        """Root type names containing filter_text, case-insensitively.

        Results are ordered by short name (the text after the last dot) and
        then by full name, using the current locale's collation.
        """
        needle = filter_text.casefold()
        matches = [name for name in self._roots if needle in name.casefold()]
        matches.sort(key=_sort_key)
        return matches


class SearchOverlay:
    """State of the quick-open overlay: filter text, results and highlight."""

    def __init__(self, index: SearchIndex) -> None:
        self._index = index
        self.is_open = False
        self.filter_text = ""
        self.results: list[str] = []
        self.highlight = 0

    @property
    def highlighted(self) -> str | None:
        if not self.results:
            return None
        return self.results[self.highlight]

    def open(self) -> None:
        logger.debug("Showing search overlay")
        self.is_open = True
        self.set_filter("")

    def close(self) -> None:
        logger.debug("Hiding search overlay")
        self.is_open = False
        self.filter_text = ""

    def set_filter(self, text: str) -> None:
        """Re-run the query and highlight the first result."""
        self.filter_text = text
        self.results = self._index.query(text)
        self.highlight = 0

    def move(self, delta: int) -> bool:
        target = self.highlight + delta
        if not self.results or not 0 <= target < len(self.results):
            return False
        self.highlight = target
        return True

    def confirm(self, type_name: str | None = None) -> str | None:
        """Close the overlay and return the chosen (or highlighted) type name.

        With nothing to choose the overlay stays open and None is returned.
        """
        chosen = type_name or self.highlighted
        if chosen is not None:
            self.close()
        return chosen
