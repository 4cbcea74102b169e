# topmark:header:start
#
#   project      : HTMLIncluder
#   file         : render.py
#   file_relpath : src/htmlincluder/config/io/render.py
#   license      : MIT
#   copyright    : (c) 2025 HTMLIncluder contributors
#
# topmark:header:end

"""Render TOML for config dumps and starter files.

TOML has no `null` value, so `None` entries are stripped during rendering.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, cast

import tomlkit
from tomlkit.exceptions import ParseError as TomlkitParseError

from htmlincluder.config.logging import get_logger

if TYPE_CHECKING:
    from htmlincluder.config.logging import IncluderLogger

    from .types import TomlTable

logger: IncluderLogger = get_logger(__name__)


def _strip_none_for_toml(value: object) -> object:
    """Remove TOML-incompatible `None` from mappings/lists."""
    if isinstance(value, Mapping):
        out: dict[str, object] = {}
        m: Mapping[object, object] = cast("Mapping[object, object]", value)
        for k_any, v_any in m.items():
            if v_any is None:
                logger.debug("Ignoring `None` entry in Mapping for key %s", k_any)
                continue
            k: str = k_any if isinstance(k_any, str) else str(k_any)
            out[k] = _strip_none_for_toml(v_any)
        return out

    if isinstance(value, list):
        seq: list[object] = cast("list[object]", value)
        return [_strip_none_for_toml(v) for v in seq if v is not None]

    return value


def to_toml(toml_dict: TomlTable) -> str:
    """Serialize a TOML mapping to a string.

    Args:
        toml_dict (TomlTable): TOML mapping to render.

    Returns:
        str: The rendered TOML document as a string.
    """
    cleaned: Any = _strip_none_for_toml(toml_dict)
    return cast("str", cast("Any", tomlkit).dumps(cast("Mapping[str, Any]", cleaned)))


def nest_toml_under_section(toml_text: str, dotted_section: str) -> str:
    r"""Return a new TOML document nested under a dotted section path.

    Used to turn a standalone ``htmlincluder.toml`` document into a
    ``[tool.htmlincluder]`` block for ``pyproject.toml``::

        nest_toml_under_section("[build]\nsrc_dir = 'src'\n", "tool.htmlincluder")

    yields a document equivalent to::

        [tool.htmlincluder.build]
        src_dir = 'src'

    Leading comments (before the first keyed entry) and trailing comments are
    kept in place; keyed content is moved under the final section table.

    Args:
        toml_text (str): The TOML document to nest.
        dotted_section (str): Section path such as ``"tool.htmlincluder"``.

    Returns:
        str: The nested TOML document.

    Raises:
        ValueError: If ``dotted_section`` has no non-empty component.
        RuntimeError: If the TOML document cannot be parsed.
    """
    try:
        doc: tomlkit.TOMLDocument = tomlkit.parse(toml_text)
    except TomlkitParseError as exc:
        raise RuntimeError(f"Error parsing TOML document: {exc}") from exc

    keys: list[str] = [k for k in dotted_section.split(".") if k]
    if not keys:
        raise ValueError("dotted_section must contain at least one non-empty component")

    keyed: list[int] = [i for i, (key, _item) in enumerate(doc.body) if key is not None]
    start_index: int = keyed[0] if keyed else len(doc.body)
    end_index: int = keyed[-1] if keyed else len(doc.body) - 1

    new_doc: tomlkit.TOMLDocument = tomlkit.document()
    new_doc.body.extend(doc.body[0:start_index])

    current_level: Any = new_doc
    for key in keys:
        current_level.add(key, tomlkit.table(is_super_table=key != keys[-1]))
        current_level = current_level[key]

    for item_key, item_value in cast("Any", doc).items():
        current_level.add(item_key, item_value)

    new_doc.body.extend(doc.body[end_index + 1 :])
    return new_doc.as_string()
