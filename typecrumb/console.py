"""Terminal rendering of render plans with rich."""

from __future__ import annotations

from rich.columns import Columns
from rich.console import Group
from rich.panel import Panel
from rich.text import Text

from typecrumb.docrender import Node
from typecrumb.navigation import Column, RenderPlan
from typecrumb.search import SearchOverlay


def node_to_text(node: Node, text: Text | None = None) -> Text:
    """Flatten a doc node tree into styled rich Text, skipping hidden nodes."""
    if text is None:
        text = Text()
    if node.hidden:
        return text
    if node.tag == "#text":
        text.append(node.text)
    elif node.tag == "br":
        text.append("\n")
    elif node.tag == "a":
        style = f"underline cyan link {node.attrs['href']}"
        text.append(node.text_content(), style=style)
    elif node.tag == "pre":
        text.append("\n")
        text.append(node.text_content(), style="dim")
        text.append("\n")
    elif node.tag == "li":
        text.append("\n  • ")
        for child in node.children:
            node_to_text(child, text)
    elif node.attrs.get("class") == "heading":
        text.append("\n")
        text.append(node.text_content(), style="bold")
        text.append("\n")
    elif node.tag == "p":
        if text.plain.strip():
            text.append("\n\n")
        for child in node.children:
            node_to_text(child, text)
    else:
        for child in node.children:
            node_to_text(child, text)
    return text


def render_column(plan: RenderPlan, column_index: int) -> Panel:
    """Render one column as a panel of entries."""
    column: Column = plan.columns[column_index]
    rows = []
    for idx, entry in enumerate(column.entries):
        active = plan.active == (column_index, idx)
        selected = column.selected == idx
        line = Text("▶ " if active else "  ")
        line.append(entry.name, style="bold reverse" if selected else "bold")
        if not entry.is_enum:
            line.append(" ")
            line.append(entry.display_type, style="green")
            if entry.opens_column:
                line.append(" ›", style="dim")
        rows.append(line)
        if entry.type_package:
            rows.append(Text(f"    {entry.type_package}", style="dim"))

        view = plan.doc_view(column_index, idx)
        if not view.is_empty:
            doc = Text("    ", style="italic")
            node_to_text(view.summary, doc)
            node_to_text(view.detail, doc)
            rows.append(doc)

    title = Text(column.info.type_name, style="bold cyan")
    return Panel(
        Group(*rows),
        title=title,
        subtitle=column.info.package or None,
        border_style="cyan" if column_index == plan.scroll_to else "blue",
    )


def render_plan(plan: RenderPlan) -> Columns | Text:
    """Render every column of a plan side by side."""
    if not plan.columns:
        return Text("No types to show.", style="yellow")
    return Columns(
        [render_column(plan, i) for i in range(len(plan.columns))],
        expand=False,
    )


def render_overlay(overlay: SearchOverlay) -> Panel:
    """Render the quick-open overlay with its highlighted result."""
    rows = [Text(f"/ {overlay.filter_text}", style="bold")]
    for i, name in enumerate(overlay.results):
        short = name.rsplit(".", 1)[-1]
        package = name[: -len(short) - 1] if short != name else ""
        line = Text("▶ " if i == overlay.highlight else "  ")
        line.append(short, style="bold reverse" if i == overlay.highlight else "bold")
        if package:
            line.append(f"  {package}", style="dim")
        rows.append(line)
    if not overlay.results:
        rows.append(Text("No matching types.", style="dim"))
    return Panel(Group(*rows), title="Search types", border_style="magenta")
