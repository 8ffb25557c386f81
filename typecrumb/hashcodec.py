"""Bidirectional mapping between navigation paths and URL fragments."""

from __future__ import annotations

import logging
import re
from collections.abc import Container, Sequence
from urllib.parse import quote, unquote_to_bytes

logger = logging.getLogger(__name__)

# Characters a URL fragment may carry unescaped (RFC 3986 pchar plus '/' and '?').
_FRAGMENT_SAFE = "/?:@!$&'()*+,;=-._~"
_BAD_PERCENT = re.compile(r"%(?![0-9A-Fa-f]{2})")


def encode(path: Sequence[str]) -> str:
    """Encode a navigation path as a URL fragment.

    Args:
        path: ``[root_type, field1, field2, ...]``.

    Returns:
        ``"#"`` followed by the segments joined with ``/``.
    """
    return "#" + "/".join(quote(segment, safe=_FRAGMENT_SAFE) for segment in path)


def split_fragment(fragment: str) -> tuple[str | None, list[str]]:
    """Split a fragment into (root type name, field names).

    Package paths and the field separator both use ``/``. The root type is
    everything up to and including the last segment containing a ``.``; with
    no ``.`` anywhere the first segment is the root.

    Returns:
        ``(None, [])`` when the fragment is empty or not percent-decodable.
    """
    if fragment.startswith("#"):
        fragment = fragment[1:]
    if not fragment:
        return None, []

    text = _percent_decode(fragment)
    if not text:
        logger.warning("Cannot decode fragment %r", fragment)
        return None, []

    parts = text.split("/")
    last_dot = -1
    for i, part in enumerate(parts):
        if "." in part:
            last_dot = i

    if last_dot == -1:
        return parts[0], parts[1:]
    return "/".join(parts[: last_dot + 1]), parts[last_dot + 1 :]


def decode(fragment: str, type_names: Container[str]) -> list[str] | None:
    """Decode a URL fragment into a navigation path.

    Args:
        fragment: The fragment, with or without the leading ``#``.
        type_names: Known type names; the root must be one of them.

    Returns:
        The path, or None when the fragment is empty, undecodable or names an
        unknown root type.
    """
    root, fields = split_fragment(fragment)
    if root is None:
        return None
    if root not in type_names:
        logger.info("Fragment root %s not found", root)
        return None
    return [root, *fields]


class HashCodec:
    """Fragment codec bound to a set of known type names."""

    def __init__(self, type_names: Container[str]) -> None:
        self._type_names = type_names

    def encode(self, path: Sequence[str]) -> str:
        return encode(path)

    def decode(self, fragment: str) -> list[str] | None:
        return decode(fragment, self._type_names)


def _percent_decode(text: str) -> str | None:
    if _BAD_PERCENT.search(text):
        return None
    try:
        return unquote_to_bytes(text).decode("utf-8")
    except UnicodeDecodeError:
        return None
