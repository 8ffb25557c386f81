"""CLI entry point for typecrumb."""

from __future__ import annotations

import enum
import locale
import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.prompt import Prompt

from typecrumb.console import render_overlay, render_plan
from typecrumb.graph import GraphLoadError, TypeGraph, load_type_graph
from typecrumb.hashcodec import decode
from typecrumb.location import FragmentLocation, TaskQueue
from typecrumb.navigation import NavigationEngine
from typecrumb.router import InputRouter, Key, KeyEvent
from typecrumb.search import SearchIndex, SearchOverlay
from typecrumb.toon import encode

logger = logging.getLogger(__name__)

_LOG_LEVELS = (logging.WARNING, logging.INFO, logging.DEBUG)

_COMMAND_KEYS: dict[str, Key] = {
    "up": Key.UP,
    "k": Key.UP,
    "down": Key.DOWN,
    "j": Key.DOWN,
    "left": Key.LEFT,
    "h": Key.LEFT,
    "right": Key.RIGHT,
    "l": Key.RIGHT,
    "enter": Key.ENTER,
    "": Key.ENTER,
    "/": Key.SLASH,
    "esc": Key.ESCAPE,
}
_OVERLAY_COMMANDS = frozenset({"up", "down", "enter", "", "esc"})


class OutputFormat(str, enum.Enum):
    """How `show` prints the plan."""

    RICH = "rich"
    TOON = "toon"


GraphArg = Annotated[
    Path,
    typer.Argument(
        help="Type graph JSON written by the generator.",
        exists=True,
        dir_okay=False,
        resolve_path=True,
    ),
]
StartTypeOpt = Annotated[
    str | None,
    typer.Option(
        "--start-type",
        "-t",
        envvar="TYPECRUMB_START_TYPE",
        help="Type to show when no fragment is given.",
    ),
]
ParseDocsOpt = Annotated[
    bool,
    typer.Option("--parse-docs", help="Parse raw doc comments into blocks."),
]
InferRootsOpt = Annotated[
    bool,
    typer.Option("--infer-roots", help="Recompute which types are searchable."),
]
PathOpt = Annotated[
    str | None,
    typer.Option("--path", "-p", help="Fragment to open, e.g. '#pkg.Type/Field'."),
]


app = typer.Typer(
    name="typecrumb",
    help="Explore a type graph one column at a time.",
    no_args_is_help=True,
)


@app.callback()
def main(
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Log more (repeat for debug)."
        ),
    ] = 0,
) -> None:
    """Explore a type graph one column at a time."""
    logging.basicConfig(
        level=_LOG_LEVELS[min(verbose, len(_LOG_LEVELS) - 1)],
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        locale.setlocale(locale.LC_COLLATE, "")
    except locale.Error as exc:
        logger.warning("Cannot use the locale collation: %s", exc)


def _load(graph_path: Path, parse_docs: bool, infer_roots: bool) -> TypeGraph:
    try:
        graph = load_type_graph(
            graph_path, parse_docs=parse_docs, infer_roots=infer_roots
        )
    except (GraphLoadError, OSError, UnicodeDecodeError) as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1) from exc
    if not graph:
        typer.echo("Error: the type graph is empty.", err=True)
        raise typer.Exit(1)
    return graph


def _check_fragment(graph: TypeGraph, fragment: str | None) -> None:
    if fragment and decode(fragment, graph) is None:
        typer.echo(
            f"Warning: {fragment}: no such type, showing the default view", err=True
        )


@app.command()
def show(
    graph_path: GraphArg,
    path: PathOpt = None,
    start_type: StartTypeOpt = None,
    output: Annotated[
        OutputFormat,
        typer.Option("--format", "-f", help="Output format."),
    ] = OutputFormat.RICH,
    expand: Annotated[
        bool,
        typer.Option("--expand", help="Show full docs instead of summaries."),
    ] = False,
    parse_docs: ParseDocsOpt = False,
    infer_roots: InferRootsOpt = False,
) -> None:
    """Print the columns for a fragment and exit."""
    graph = _load(graph_path, parse_docs, infer_roots)
    _check_fragment(graph, path)

    location = FragmentLocation(path or "")
    engine = NavigationEngine(graph, location, start_type=start_type)
    plan = engine.start()
    if expand:
        for col, column in enumerate(plan.columns):
            for idx in range(len(column.entries)):
                engine.toggle_doc(col, idx)
        plan = engine.plan

    if output is OutputFormat.TOON:
        typer.echo(encode(plan))
    else:
        Console().print(render_plan(plan))


@app.command()
def search(
    graph_path: GraphArg,
    filter_text: Annotated[
        str, typer.Argument(help="Case-insensitive substring to match.")
    ] = "",
    limit: Annotated[
        int | None,
        typer.Option("--limit", "-n", min=1, help="Maximum number of results."),
    ] = None,
    infer_roots: InferRootsOpt = False,
) -> None:
    """List root types matching a filter, ordered by short name."""
    graph = _load(graph_path, False, infer_roots)
    results = SearchIndex(graph).query(filter_text)
    if not results:
        typer.echo("No matching types.", err=True)
        raise typer.Exit(1)
    for name in results[:limit]:
        typer.echo(name)


@app.command()
def browse(
    graph_path: GraphArg,
    path: PathOpt = None,
    start_type: StartTypeOpt = None,
    parse_docs: ParseDocsOpt = False,
    infer_roots: InferRootsOpt = False,
) -> None:
    """Browse interactively.

    Commands: up/k, down/j, left/h, right/l, enter, / (search), esc, back,
    forward, #fragment, q.
    """
    graph = _load(graph_path, parse_docs, infer_roots)
    _check_fragment(graph, path)

    queue = TaskQueue()
    location = FragmentLocation(path or "", scheduler=queue)
    engine = NavigationEngine(graph, location, queue, start_type=start_type)
    router = InputRouter(engine, SearchOverlay(SearchIndex(graph)))
    console = Console()

    engine.start()
    while True:
        queue.run_until_idle()
        if router.overlay.is_open:
            console.print(render_overlay(router.overlay))
        else:
            console.print(render_plan(engine.plan))
            console.print(location.fragment or "#", style="dim", markup=False)
        try:
            command = Prompt.ask(">", console=console, default="", show_default=False)
        except (EOFError, KeyboardInterrupt):
            break
        if not _dispatch(router, location, command.strip()):
            break


def _dispatch(router: InputRouter, location: FragmentLocation, command: str) -> bool:
    """Apply one browse command; returns False to end the session."""
    if router.overlay.is_open:
        if command in _OVERLAY_COMMANDS:
            key = _COMMAND_KEYS[command]
            router.handle_key(KeyEvent(key.value, in_text_input=True))
        else:
            router.handle_search_input(command)
        return True

    if command in ("q", "quit"):
        return False
    if command == "back":
        location.back()
    elif command == "forward":
        location.forward()
    elif command.startswith("#"):
        location.assign(command)
    elif command in _COMMAND_KEYS:
        router.handle_key(KeyEvent(_COMMAND_KEYS[command].value))
    else:
        typer.echo(f"Unknown command: {command}", err=True)
    return True
