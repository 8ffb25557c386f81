"""Core data structures for typecrumb."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Union


class ElementKind(enum.Enum):
    """The block kind of a structured doc comment element."""

    PARAGRAPH = "p"
    HEADING = "h"
    LIST = "l"
    CODE = "c"
    DIRECTIVE = "d"


@dataclass(frozen=True)
class DocElement:
    """A single block of a structured doc comment.

    For lists each item is one entry of ``content``; other kinds usually
    carry a single string.
    """

    kind: ElementKind
    content: tuple[str, ...] = ()


@dataclass(frozen=True)
class StructuredDoc:
    """A parsed doc comment. ``elements`` is None when the form is present but empty."""

    elements: tuple[DocElement, ...] | None = ()


DocString = Union[str, StructuredDoc, None]


@dataclass(frozen=True)
class FieldInfo:
    """A struct field: its name, target type and decorators."""

    field_name: str
    type_name: str
    type_decorators: tuple[str, ...] = ()
    doc: DocString = None


@dataclass(frozen=True)
class EnumValue:
    """A named member of an enum type."""

    name: str
    doc: DocString = None


@dataclass(frozen=True)
class TypeInfo:
    """Metadata for one named type in the graph."""

    type_name: str
    package: str = ""
    is_root: bool = False
    fields: tuple[FieldInfo, ...] | None = None
    enum_values: tuple[EnumValue, ...] | None = None
    doc: DocString = None

    @property
    def full_name(self) -> str:
        """The package-qualified name, or the bare name without a package."""
        if not self.package:
            return self.type_name
        return f"{self.package}.{self.type_name}"

    def field(self, field_name: str) -> FieldInfo | None:
        """Look up a field by name."""
        for fi in self.fields or ():
            if fi.field_name == field_name:
                return fi
        return None


def split_type_name(full_type_name: str) -> tuple[str, str]:
    """Split a type name into (package, short name) at the last dot.

    Args:
        full_type_name: A name such as ``k8s.io/api/core/v1.Pod`` or ``string``.

    Returns:
        Tuple of (package, short name); package is empty for bare names.
    """
    package, sep, short = full_type_name.rpartition(".")
    if not sep:
        return "", full_type_name
    return package, short


def format_decorators(decorators: tuple[str, ...] | list[str] | None) -> str:
    """Compose type decorators into a display prefix.

    Decorators apply in encounter order without de-duplication:
    ``Ptr`` becomes ``*``, ``List`` becomes ``[]`` and ``Map[k]`` becomes
    ``map[k]``. Anything else contributes nothing.
    """
    prefix = ""
    for dec in decorators or ():
        if dec == "Ptr":
            prefix += "*"
        elif dec == "List":
            prefix += "[]"
        elif dec.startswith("Map["):
            prefix += f"map[{dec[4:-1]}]"
    return prefix
