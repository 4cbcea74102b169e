# topmark:header:start
#
#   project      : HTMLIncluder
#   file         : loaders.py
#   file_relpath : src/htmlincluder/config/io/loaders.py
#   license      : MIT
#   copyright    : (c) 2025 HTMLIncluder contributors
#
# topmark:header:end

"""Load TOML configuration sources.

This module provides I/O helpers for reading HTMLIncluder configuration from:
- the packaged default TOML template, and
- on-disk TOML files (``htmlincluder.toml`` / ``pyproject.toml``).

Parsing is done with `tomlkit` and returned as plain `dict` structures.
"""

from __future__ import annotations

from importlib.resources import files
from typing import TYPE_CHECKING, Any, cast

import tomlkit
from tomlkit.exceptions import ParseError as TomlkitParseError

from htmlincluder.config.io.render import nest_toml_under_section, to_toml
from htmlincluder.config.keys import Toml
from htmlincluder.config.logging import get_logger
from htmlincluder.constants import DEFAULT_TOML_CONFIG_NAME, DEFAULT_TOML_CONFIG_PACKAGE

if TYPE_CHECKING:
    from importlib.resources.abc import Traversable
    from pathlib import Path

    from htmlincluder.config.logging import IncluderLogger
    from htmlincluder.diagnostic.model import DiagnosticLog

    from .types import TomlTable

logger: IncluderLogger = get_logger(__name__)

HEADER_END_MARKER: str = "# topmark:header:end"


def load_defaults_dict() -> TomlTable:
    """Return HTMLIncluder's **runtime defaults** as a Python dict.

    This function performs **no I/O**. The bundled ``htmlincluder-default.toml``
    is an annotated template for ``htmlincluder init``; runtime defaults are
    defined in code so the tool works even if the template is unreadable.

    Returns:
        A new TOML-table-compatible dict containing the runtime defaults.
    """
    return {
        Toml.SECTION_BUILD: {
            Toml.KEY_SRC_DIR: "src",
            Toml.KEY_DEST_DIR: "dist",
            Toml.KEY_FILES: [],
            Toml.KEY_INCLUDE: [],
            Toml.KEY_EXCLUDE: [],
            Toml.KEY_WATCH: False,
        },
        Toml.SECTION_DIRECTIVES: {
            Toml.KEY_TAG_KEYWORD: "insert",
            Toml.KEY_FILE_PATH_ATTRIBUTE: "path",
            Toml.KEY_JSON_PATH_ATTRIBUTE: "jsonPath",
            Toml.KEY_EXPRESSION_ATTRIBUTE: "rawJson",
            Toml.KEY_CAPABILITY_NAME: "plugins",
        },
        Toml.SECTION_FRAGMENTS: {
            Toml.KEY_INSERT_PREFIX: "-",
            Toml.KEY_WRAP_PREFIX: "_",
        },
        Toml.SECTION_DATA: {
            Toml.KEY_JSON_INPUT: {},
            Toml.KEY_JSON_FILES: [],
            Toml.KEY_PLUGINS: [],
        },
        Toml.SECTION_DEV: {
            # limit_iterations is unset (unbounded) by default
            Toml.KEY_STRICT_CYCLES: False,
            Toml.KEY_PRINT_ITERATIONS: False,
            Toml.KEY_PRINT_RESULT: False,
            Toml.KEY_PRINT_PATHS: False,
        },
    }


def load_default_config_template_toml_text() -> str:
    """Load the bundled, annotated default TOML template as text.

    The file header block is stripped so the output starts at the template
    content. If the resource cannot be read, a document generated from the
    runtime defaults is returned instead.
    """
    resource: Traversable = files(DEFAULT_TOML_CONFIG_PACKAGE).joinpath(DEFAULT_TOML_CONFIG_NAME)
    try:
        toml_text: str = resource.read_text(encoding="utf8")
    except OSError as exc:
        logger.warning("Cannot read packaged default config template %s: %s", resource, exc)
        return to_toml(load_defaults_dict())

    lines: list[str] = toml_text.splitlines(keepends=True)
    for i, line in enumerate(lines):
        if line.strip() == HEADER_END_MARKER:
            toml_text = "".join(lines[i + 1 :]).lstrip("\n")
            break
    return toml_text


def render_config_template(*, for_pyproject: bool) -> str:
    """Return the starter configuration written by ``htmlincluder init``.

    Args:
        for_pyproject: If True, nest the template under ``[tool.htmlincluder]``.

    Returns:
        TOML document text.
    """
    toml_text: str = load_default_config_template_toml_text()
    if for_pyproject:
        toml_text = nest_toml_under_section(
            toml_text, f"{Toml.SECTION_TOOL}.{Toml.SECTION_TOOL_NAME}"
        )
    return toml_text


def load_toml_dict(path: Path, diagnostics: DiagnosticLog | None = None) -> TomlTable:
    """Load and parse a TOML file from the filesystem.

    Args:
        path: Path to a TOML document (``htmlincluder.toml`` or ``pyproject.toml``).
        diagnostics: When given, read and parse failures are recorded as errors.

    Returns:
        The parsed TOML content, or an empty dict on failure.
    """
    try:
        text: str = path.read_text(encoding="utf-8")
        doc: tomlkit.TOMLDocument = tomlkit.parse(text)
        data_any: Any = doc.unwrap()
        return cast("TomlTable", data_any) if isinstance(data_any, dict) else {}
    except OSError as e:
        logger.error("Error loading TOML from %s: %s", path, e)
        if diagnostics is not None:
            diagnostics.add_error(f"Cannot read config file {path}: {e}")
        return {}
    except TomlkitParseError as e:
        logger.error("Error decoding TOML from %s: %s", path, e)
        if diagnostics is not None:
            diagnostics.add_error(f"Invalid TOML in {path}: {e}")
        return {}
