"""TOON (Token-Oriented Object Notation) encoder for render plans."""

from __future__ import annotations

import re

from typecrumb.docrender import DocView
from typecrumb.hashcodec import encode as encode_fragment
from typecrumb.navigation import RenderPlan

_NEEDS_QUOTING = re.compile(r'[,:"\\{}\[\]]')
_LOOKS_NUMERIC = re.compile(r"^-?(?:0|[1-9]\d*)(?:\.\d+)?$")
_KEYWORDS = frozenset({"true", "false", "null"})


def encode(plan: RenderPlan) -> str:
    """Encode a RenderPlan into TOON format.

    Args:
        plan: The plan to encode.

    Returns:
        TOON-formatted string (no trailing newline).
    """
    parts: list[str] = []

    fragment = encode_fragment(plan.path) if plan.path else ""
    parts.append(f"fragment: {_encode_value(fragment)}")
    active = "" if plan.active is None else f"{plan.active[0]}/{plan.active[1]}"
    parts.append(f"active: {_encode_value(active)}")

    column_rows: list[list[str | bool]] = []
    for index, column in enumerate(plan.columns):
        selected = column.selected_entry
        column_rows.append(
            [
                str(index),
                column.info.type_name,
                column.info.package,
                selected.name if selected else "",
            ]
        )
    parts.append(
        _format_tabular(
            "columns", ["index", "type", "package", "selected"], column_rows
        )
    )

    entry_rows: list[list[str | bool]] = []
    for col, column in enumerate(plan.columns):
        for idx, entry in enumerate(column.entries):
            view = plan.doc_view(col, idx)
            entry_rows.append(
                [
                    str(col),
                    entry.name,
                    entry.display_type,
                    entry.opens_column,
                    column.selected == idx,
                    _doc_text(view),
                ]
            )
    parts.append(
        _format_tabular(
            "entries",
            ["column", "name", "type", "opens", "selected", "doc"],
            entry_rows,
        )
    )

    return "\n".join(parts)


def _doc_text(view: DocView) -> str:
    """The visible doc text; expanded blocks are separated by newlines."""
    if view.expanded:
        return "\n".join(block.text_content() for block in view.detail.children)
    return view.summary.text_content()


def _format_tabular(
    name: str,
    columns: list[str],
    rows: list[list[str | bool]],
) -> str:
    """Format a tabular array in TOON notation.

    Args:
        name: The array field name.
        columns: Column header names.
        rows: List of row data; booleans become bare true/false.

    Returns:
        TOON tabular array string.
    """
    header = f"{name}[{len(rows)}]{{{','.join(columns)}}}:"
    lines = [header]
    for row in rows:
        lines.append(f"  {','.join(_encode_cell(cell) for cell in row)}")
    return "\n".join(lines)


def _encode_cell(value: str | bool) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return _encode_value(value)


def _encode_value(value: str) -> str:
    """Encode a single value, quoting if necessary per TOON rules.

    Args:
        value: The raw string value.

    Returns:
        The value, possibly double-quoted with escapes applied.
    """
    if not value:
        return '""'

    if value != value.strip():
        return _quote(value)

    if any(c in value for c in "\n\r\t"):
        return _quote(value)

    if value.lower() in _KEYWORDS:
        return _quote(value)

    if _LOOKS_NUMERIC.match(value):
        return value

    if _NEEDS_QUOTING.search(value):
        return _quote(value)

    if value.startswith("-"):
        return _quote(value)

    return value


def _quote(value: str) -> str:
    """Double-quote a string with TOON escape rules."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    escaped = escaped.replace("\n", "\\n").replace("\r", "\\r").replace("\t", "\\t")
    return f'"{escaped}"'
