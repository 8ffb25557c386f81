"""Column navigation state machine kept in sync with the URL fragment."""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field, replace

from typecrumb.docrender import DocView, render
from typecrumb.graph import TypeGraph
from typecrumb.hashcodec import HashCodec
from typecrumb.location import FragmentLocation, Scheduler
from typecrumb.models import DocString, TypeInfo, format_decorators, split_type_name

logger = logging.getLogger(__name__)

PlanListener = Callable[["RenderPlan"], None]


class NavigationError(LookupError):
    """Raised for a column index or field name that is not on screen."""


@dataclass(frozen=True)
class Entry:
    """One row of a column: a struct field or an enum member.

    ``name``, ``type_name`` and ``owner`` are the addressable attributes a
    renderer exposes; enum members have an empty ``type_name`` and cannot be
    selected.
    """

    name: str
    type_name: str
    owner: str
    decorators: str = ""
    doc: DocString = None
    is_enum: bool = False
    opens_column: bool = False

    @property
    def selectable(self) -> bool:
        return not self.is_enum

    @property
    def display_type(self) -> str:
        """Decorated short type name, e.g. ``[]*Container``."""
        return self.decorators + split_type_name(self.type_name)[1]

    @property
    def type_package(self) -> str:
        return split_type_name(self.type_name)[0]


@dataclass(frozen=True)
class Column:
    """The member list of one type in the drill-down path."""

    type_name: str
    info: TypeInfo
    entries: tuple[Entry, ...] = ()
    selected: int | None = None

    def index_of(self, field_name: str) -> int | None:
        """Index of the selectable entry with this field name."""
        for i, entry in enumerate(self.entries):
            if entry.selectable and entry.name == field_name:
                return i
        return None

    @property
    def selected_entry(self) -> Entry | None:
        return None if self.selected is None else self.entries[self.selected]


@dataclass(frozen=True)
class RenderPlan:
    """Everything a renderer needs to draw the current navigation state."""

    path: tuple[str, ...] = ()
    columns: tuple[Column, ...] = ()
    active: tuple[int, int] | None = None
    scroll_to: int | None = None
    expanded: frozenset[tuple[int, str]] = field(default_factory=frozenset)

    def active_entry(self) -> Entry | None:
        if self.active is None:
            return None
        col, idx = self.active
        return self.columns[col].entries[idx]

    def doc_view(self, column_index: int, entry_index: int) -> DocView:
        """Render an entry's doc with its current expansion state."""
        entry = self.columns[column_index].entries[entry_index]
        view = render(entry.doc)
        if (column_index, entry.name) in self.expanded:
            view.toggle()
        return view


def build_column(graph: TypeGraph, type_name: str) -> Column:
    """Derive a column for a graph type: fields first, then enum members."""
    info = graph[type_name]
    entries = [
        Entry(
            name=fi.field_name,
            type_name=fi.type_name,
            owner=type_name,
            decorators=format_decorators(fi.type_decorators),
            doc=fi.doc,
            opens_column=fi.type_name in graph,
        )
        for fi in info.fields or ()
    ]
    entries.extend(
        Entry(name=ev.name, type_name="", owner=type_name, doc=ev.doc, is_enum=True)
        for ev in info.enum_values or ()
    )
    return Column(type_name=type_name, info=info, entries=tuple(entries))


def build_plan(
    graph: TypeGraph,
    path: Sequence[str],
    expanded: frozenset[tuple[int, str]] = frozenset(),
) -> RenderPlan:
    """Walk a navigation path and derive the columns it renders.

    Restoration is partial: the walk stops at the first field name that is
    not in the current column, and after a selection whose target is not a
    graph type. The plan's ``path`` holds only the part that validated.

    Args:
        graph: The type graph.
        path: ``[root_type, field1, field2, ...]``.
        expanded: (column index, entry name) pairs whose docs are expanded.

    Returns:
        The RenderPlan; empty when the path is empty or its root is unknown.
    """
    if not path or path[0] not in graph:
        return RenderPlan()

    columns = [build_column(graph, path[0])]
    valid = [path[0]]
    for i, field_name in enumerate(path[1:], start=1):
        column = columns[-1]
        index = column.index_of(field_name)
        if index is None:
            logger.debug(
                "Field %s not found in %s; dropping %s",
                field_name,
                column.type_name,
                list(path[i:]),
            )
            break
        columns[-1] = replace(column, selected=index)
        valid.append(field_name)
        entry = column.entries[index]
        if not entry.opens_column:
            if i + 1 < len(path):
                logger.debug(
                    "%s is not a graph type; dropping %s",
                    entry.type_name,
                    list(path[i + 1 :]),
                )
            break
        columns.append(build_column(graph, entry.type_name))

    active = None
    for col in reversed(range(len(columns))):
        if columns[col].selected is not None:
            active = (col, columns[col].selected)
            break

    return RenderPlan(
        path=tuple(valid),
        columns=tuple(columns),
        active=active,
        scroll_to=len(columns) - 1,
        expanded=frozenset(k for k in expanded if k[0] < len(columns)),
    )


class NavigationEngine:
    """Owns the navigation path and keeps it in sync with the URL fragment.

    The path is the model; every change rebuilds the RenderPlan and pushes it
    to subscribers. Changes made by the engine are written to the fragment.
    Each write is remembered until its change notification arrives or the
    scheduler's next turn clears it, so the engine never restores from its
    own writes. Without an explicit scheduler the location's is used.
    """

    def __init__(
        self,
        graph: TypeGraph,
        location: FragmentLocation,
        scheduler: Scheduler | None = None,
        *,
        start_type: str | None = None,
    ) -> None:
        self._graph = graph
        self._codec = HashCodec(graph)
        self._location = location
        self._scheduler = scheduler if scheduler is not None else location.scheduler
        self._start_type = start_type
        self._plan = RenderPlan()
        self._listeners: list[PlanListener] = []
        # Fragments the engine wrote whose change notification is still due.
        self._own_writes: deque[tuple[int, str]] = deque()
        self._write_count = 0
        location.subscribe(self.on_fragment_change)

    @property
    def graph(self) -> TypeGraph:
        return self._graph

    @property
    def plan(self) -> RenderPlan:
        return self._plan

    @property
    def columns(self) -> tuple[Column, ...]:
        return self._plan.columns

    @property
    def active(self) -> tuple[int, int] | None:
        return self._plan.active

    @property
    def updating_fragment(self) -> bool:
        return bool(self._own_writes)

    def subscribe(self, listener: PlanListener) -> None:
        self._listeners.append(listener)

    def start(self) -> RenderPlan:
        """Show the fragment's path, else the start type, else the first type."""
        path = self._codec.decode(self._location.fragment)
        if path is None or not self.restore_from_path(path):
            self._show_default()
        return self._plan

    def current_path(self) -> list[str]:
        """The path the current columns render; restore_from_path reproduces it."""
        return list(self._plan.path)

    def restore_from_path(self, path: Sequence[str]) -> bool:
        """Rebuild every column from a path, as far as it validates.

        Returns:
            False, leaving the view untouched, when the root type is unknown.
        """
        if not path or path[0] not in self._graph:
            logger.info("Cannot restore %s: unknown root", list(path))
            return False
        logger.debug("Restoring %s", list(path))
        self._update(path, frozenset())
        return True

    def select_field(self, column_index: int, field_name: str) -> None:
        """Select a field in a column, replacing everything to its right.

        Raises:
            NavigationError: If the column or the field does not exist.
        """
        column = self._column(column_index)
        if column.index_of(field_name) is None:
            raise NavigationError(
                f"{column.type_name} has no selectable field {field_name!r}"
            )
        logger.debug("Selected %s.%s", column.type_name, field_name)
        path = [*self._plan.path[: column_index + 1], field_name]
        self._update(path, self._expanded_up_to(column_index))
        self._sync_fragment()

    def collapse_to_column(self, column_index: int) -> bool:
        """Remove every column after column_index; the root column always stays.

        Returns:
            False when there was nothing to remove.
        """
        if column_index < 0 or column_index >= len(self.columns) - 1:
            return False
        self._update(
            self._plan.path[: column_index + 1], self._expanded_up_to(column_index)
        )
        self._sync_fragment()
        return True

    def navigate_left(self) -> bool:
        """Collapse the rightmost column unless it is the root column."""
        if self._plan.active is None:
            return self._select_first(0)
        return self.collapse_to_column(len(self.columns) - 2)

    def navigate_right(self) -> bool:
        """Drill into the active entry's type and select its first field."""
        entry = self._plan.active_entry()
        if entry is None:
            return self._select_first(0)
        if not entry.opens_column:
            return False
        return self._select_first(self._plan.active[0] + 1)

    def move_active(self, delta: int) -> bool:
        """Move the active selection up (negative) or down within its column."""
        if self._plan.active is None:
            return self._select_first(0)
        col, idx = self._plan.active
        entries = self.columns[col].entries
        target = idx + delta
        while 0 <= target < len(entries) and not entries[target].selectable:
            target += 1 if delta > 0 else -1
        if target == idx or not 0 <= target < len(entries):
            return False
        self.select_field(col, entries[target].name)
        return True

    def toggle_doc(self, column_index: int, entry_index: int) -> bool:
        """Flip an entry between doc summary and detail.

        Returns:
            False when the entry's doc has nothing more to show.
        """
        entries = self._column(column_index).entries
        if not 0 <= entry_index < len(entries):
            raise NavigationError(f"column {column_index} has no entry {entry_index}")
        entry = entries[entry_index]
        if not render(entry.doc).expandable:
            return False
        key = (column_index, entry.name)
        self._update(self._plan.path, self._plan.expanded ^ {key})
        return True

    def toggle_active_doc(self) -> bool:
        if self._plan.active is None:
            return False
        return self.toggle_doc(*self._plan.active)

    def navigate_to_type(self, type_name: str) -> bool:
        """Point the fragment at a type; the change notification restores it."""
        logger.debug("Navigating to type %s", type_name)
        return self._location.assign(self._codec.encode([type_name]))

    def on_fragment_change(self, fragment: str) -> None:
        """React to a fragment change the engine did not make itself."""
        if self._own_writes and self._own_writes[0][1] == fragment:
            self._own_writes.popleft()
            logger.debug("Ignoring own fragment change %r", fragment)
            return
        logger.debug("Fragment changed to %r", fragment)
        path = self._codec.decode(fragment)
        if path is None or not self.restore_from_path(path):
            self._show_default()

    def _show_default(self) -> None:
        root = self._graph.default_root(self._start_type)
        if root is None:
            logger.warning("Type graph is empty; nothing to show")
            self._update([], frozenset())
            return
        self._update([root], frozenset())

    def _select_first(self, column_index: int) -> bool:
        if column_index >= len(self.columns):
            return False
        for entry in self.columns[column_index].entries:
            if entry.selectable:
                self.select_field(column_index, entry.name)
                return True
        return False

    def _column(self, column_index: int) -> Column:
        if not 0 <= column_index < len(self.columns):
            raise NavigationError(f"no column {column_index}")
        return self.columns[column_index]

    def _expanded_up_to(self, column_index: int) -> frozenset[tuple[int, str]]:
        return frozenset(k for k in self._plan.expanded if k[0] <= column_index)

    def _update(
        self, path: Sequence[str], expanded: frozenset[tuple[int, str]]
    ) -> None:
        self._plan = build_plan(self._graph, path, expanded)
        for listener in self._listeners:
            listener(self._plan)

    def _sync_fragment(self) -> None:
        """Write the current path to the fragment, guarding against our own echo."""
        fragment = self._codec.encode(self._plan.path) if self._plan.path else ""
        if fragment == self._location.fragment:
            return
        self._write_count += 1
        write = (self._write_count, fragment)
        self._own_writes.append(write)
        self._location.assign(fragment)
        if self._scheduler is None:
            self._clear_guard(write)
        else:
            self._scheduler.call_soon(self._clear_guard, write)

    def _clear_guard(self, write: tuple[int, str]) -> None:
        # The echo normally consumed the entry already.
        if write in self._own_writes:
            self._own_writes.remove(write)
