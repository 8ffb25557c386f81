"""Read-only type graph loading and reference graph construction."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator, Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Any

import networkx as nx

from typecrumb.godoc import parse_doc_comment
from typecrumb.models import (
    DocElement,
    DocString,
    ElementKind,
    EnumValue,
    FieldInfo,
    StructuredDoc,
    TypeInfo,
)

logger = logging.getLogger(__name__)


class GraphLoadError(ValueError):
    """Raised when generator output cannot be turned into a TypeGraph."""


class TypeGraph(Mapping[str, TypeInfo]):
    """Immutable mapping from fully-qualified type name to TypeInfo.

    Iteration order is the order of the generator output, which decides the
    default root when no start type is given.
    """

    def __init__(self, types: Mapping[str, TypeInfo]) -> None:
        self._types = MappingProxyType(dict(types))

    def __getitem__(self, type_name: str) -> TypeInfo:
        return self._types[type_name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._types)

    def __len__(self) -> int:
        return len(self._types)

    def __repr__(self) -> str:
        return f"TypeGraph({len(self)} types)"

    @classmethod
    def from_json_data(
        cls,
        data: Any,
        *,
        parse_docs: bool = False,
        infer_roots: bool = False,
    ) -> TypeGraph:
        """Build a graph from decoded generator JSON.

        Args:
            data: Mapping of type name to the generator's type object.
            parse_docs: Parse raw doc comments that lack a parsed form.
            infer_roots: Recompute isRoot, see infer_root_types.

        Returns:
            The loaded TypeGraph.

        Raises:
            GraphLoadError: If the data does not have the expected shape.
        """
        if not isinstance(data, dict):
            raise GraphLoadError(
                f"expected a JSON object of types, got {type(data).__name__}"
            )
        try:
            types = {
                name: _type_from_json(name, raw, parse_docs)
                for name, raw in data.items()
            }
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise GraphLoadError(f"malformed type data: {exc}") from exc

        graph = cls(types)
        if infer_roots:
            roots = infer_root_types(graph)
            graph = cls(
                {
                    name: _with_root(info, name in roots)
                    for name, info in graph.items()
                }
            )
        logger.info("Loaded %d types (%d roots)", len(graph), len(graph.root_names()))
        return graph

    def root_names(self) -> list[str]:
        """Names of types eligible for the search overlay, in graph order."""
        return [name for name, info in self.items() if info.is_root]

    def default_root(self, start_type: str | None = None) -> str | None:
        """The start type when it is in the graph, else the first entry."""
        if start_type and start_type in self:
            return start_type
        if start_type:
            logger.debug("Start type %s not in graph", start_type)
        return next(iter(self), None)

    def reference_graph(self) -> nx.MultiDiGraph:
        """Build a directed graph of field references between graph types.

        Nodes are type names. An edge from A to B exists for every field of A
        whose target type B is itself in the graph; the edge carries the
        field name.
        """
        graph = nx.MultiDiGraph()
        for name in self:
            graph.add_node(name)
        for name, info in self.items():
            for fi in info.fields or ():
                if fi.type_name in self:
                    graph.add_edge(name, fi.type_name, field=fi.field_name)
        return graph


def load_type_graph(
    path: Path,
    *,
    parse_docs: bool = False,
    infer_roots: bool = False,
) -> TypeGraph:
    """Load a TypeGraph from a generator JSON file.

    Raises:
        GraphLoadError: If the file is not valid JSON or not a type map.
        OSError: If the file cannot be read.
    """
    try:
        data = json.loads(path.read_text("utf-8"))
    except json.JSONDecodeError as exc:
        raise GraphLoadError(f"{path}: invalid JSON: {exc}") from exc
    return TypeGraph.from_json_data(
        data, parse_docs=parse_docs, infer_roots=infer_roots
    )


def infer_root_types(graph: TypeGraph) -> set[str]:
    """Compute root-eligible types.

    A type is a root when it looks like a top-level API object (both
    TypeMeta and ObjectMeta fields, or a Request/Response suffix), the same
    test the generator applies. On top of that, a type no other graph type
    references is also a root, since nothing else leads to it.
    """
    refs = graph.reference_graph()
    roots: set[str] = set()
    for name, info in graph.items():
        field_names = {fi.field_name for fi in info.fields or ()}
        if {"TypeMeta", "ObjectMeta"} <= field_names:
            roots.add(name)
        elif info.type_name.endswith(("Request", "Response")):
            roots.add(name)
        elif not any(src != name for src in refs.predecessors(name)):
            roots.add(name)
    return roots


def _with_root(info: TypeInfo, is_root: bool) -> TypeInfo:
    return TypeInfo(
        type_name=info.type_name,
        package=info.package,
        is_root=is_root,
        fields=info.fields,
        enum_values=info.enum_values,
        doc=info.doc,
    )


def _type_from_json(name: str, raw: dict[str, Any], parse_docs: bool) -> TypeInfo:
    fields = raw.get("fields")
    enum_values = raw.get("enumValues")
    package = raw.get("package")
    type_name = raw.get("typeName")
    if package is None and type_name is None:
        package, _, type_name = name.rpartition(".")
    return TypeInfo(
        type_name=type_name or "",
        package=package or "",
        is_root=bool(raw.get("isRoot", False)),
        fields=(
            None
            if fields is None
            else tuple(
                FieldInfo(
                    field_name=f["fieldName"],
                    type_name=f["typeName"],
                    type_decorators=tuple(f.get("typeDecorators") or ()),
                    doc=_doc_from_json(f, parse_docs),
                )
                for f in fields
            )
        ),
        enum_values=(
            None
            if enum_values is None
            else tuple(
                EnumValue(name=e["name"], doc=_doc_from_json(e, parse_docs))
                for e in enum_values
            )
        ),
        doc=_doc_from_json(raw, parse_docs),
    )


def _doc_from_json(raw: dict[str, Any], parse_docs: bool) -> DocString:
    """Pick the doc for a type or member.

    The parsed form wins when the member has a raw doc string; a raw string
    without one stays plain unless parse_docs is set.
    """
    text = raw.get("docString") or ""
    if not text:
        return None
    parsed = raw.get("parsedDocString")
    if isinstance(parsed, dict):
        elements = parsed.get("elements")
        if elements is None:
            return StructuredDoc(None)
        return StructuredDoc(
            tuple(
                DocElement(ElementKind(e["type"]), tuple(e.get("content") or ()))
                for e in elements
            )
        )
    if parse_docs:
        return parse_doc_comment(text)
    return text
