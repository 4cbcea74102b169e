# topmark:header:start
#
#   project      : HTMLIncluder
#   file         : data.py
#   file_relpath : src/htmlincluder/core/data.py
#   license      : MIT
#   copyright    : (c) 2025 HTMLIncluder contributors
#
# topmark:header:end

"""Dotted-path lookup into the injected data tree.

Lookups are permissive: a missing key or an out-of-range index yields the
default instead of raising, so that templates degrade gracefully when optional
data is absent. Lookups never mutate the tree.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping, Sequence
from typing import Any, Final

# ``items[0]`` is accepted as ``items.0``
_BRACKET_INDEX_RE: Final[re.Pattern[str]] = re.compile(r"\[(\d+)\]")


class _Missing:
    """Marker for a path that is absent from the data tree."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Final[_Missing] = _Missing()


def split_path(dotted_path: str) -> list[str]:
    """Split a dotted path into its segments (``a.b[0]`` -> ``["a", "b", "0"]``)."""
    normalized: str = _BRACKET_INDEX_RE.sub(r".\1", dotted_path.strip())
    return [segment for segment in normalized.split(".") if segment]


def lookup(tree: Any, dotted_path: str) -> Any:
    """Return the value at ``dotted_path``, or `MISSING` if any segment is absent.

    Array segments must be ASCII decimal indices; anything else is absent.
    """
    node: Any = tree
    for segment in split_path(dotted_path):
        if isinstance(node, Mapping):
            if segment not in node:
                return MISSING
            node = node[segment]
        elif isinstance(node, Sequence) and not isinstance(node, (str, bytes)):
            if not (segment.isascii() and segment.isdecimal()):
                return MISSING
            index: int = int(segment)
            if index >= len(node):
                return MISSING
            node = node[index]
        else:
            return MISSING
    return node


def resolve(tree: Any, dotted_path: str, default: Any = None) -> Any:
    """Resolve ``dotted_path`` against ``tree``.

    Args:
        tree: JSON-shaped data.
        dotted_path: Path such as ``site.nav.0.title``. An empty path selects
            the tree itself.
        default: Value returned when any segment is absent. When None, the
            empty string is returned instead.

    Returns:
        Any: The located value, or the default.
    """
    value: Any = lookup(tree, dotted_path)
    if value is MISSING:
        return "" if default is None else default
    return value


def to_json_text(value: Any) -> str:
    """Render ``value`` as JSON text; a `MISSING` value renders as empty text."""
    if value is MISSING:
        return ""
    return json.dumps(value, ensure_ascii=False)


def stringify(value: Any) -> str:
    """Render ``value`` for verbatim splicing: strings as-is, anything else as JSON."""
    if value is MISSING:
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False)
