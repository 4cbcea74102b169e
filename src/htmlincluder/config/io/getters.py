# topmark:header:start
#
#   project      : HTMLIncluder
#   file         : getters.py
#   file_relpath : src/htmlincluder/config/io/getters.py
#   license      : MIT
#   copyright    : (c) 2025 HTMLIncluder contributors
#
# topmark:header:end

"""Value getters for TOML config tables.

Two families of getters exist:
- *Unchecked* getters: return defaults and only emit **debug** logs.
- *Checked* getters: validate the expected shape and record problems in a
  `DiagnosticLog` (and also log them).

Shape problems that make a configuration unusable (a list-typed key that is
not a list, a non-integer iteration limit) are recorded as
**errors**; the CLI refuses to run with such a configuration. Recoverable
problems (a non-string entry inside a list) are recorded as **warnings**.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Final

from htmlincluder.config.logging import get_logger

if TYPE_CHECKING:
    from htmlincluder.config.logging import IncluderLogger
    from htmlincluder.diagnostic.model import DiagnosticLog

    from .types import TomlTable

logger: IncluderLogger = get_logger(__name__)


def get_table_value(table: TomlTable, key: str) -> TomlTable:
    """Extract a sub-table from a TOML table.

    Args:
        table (TomlTable): Table to query.
        key (str): Key of the sub-table.

    Returns:
        TomlTable: The sub-table, or an empty dict when missing or not a table.
    """
    value: Any | None = table.get(key)
    if isinstance(value, dict):
        return value
    if value is not None:
        logger.debug("Expected table for %r, got %s", key, type(value).__name__)
    return {}


def get_string_value_or_none(table: TomlTable, key: str) -> str | None:
    """Extract an optional string value from a TOML table.

    If the value is a ``str``, it is returned as is. If the value is of type
    ``int``, ``float``, or ``bool``, it is coerced to a string using ``str(...)``.
    When the key is missing or the value is not coercible, ``None`` is returned.
    """
    value: Any | None = table.get(key)
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float, bool)):
        return str(value)
    logger.debug("Cannot coerce %r to string, returning None", value)
    return None


def get_bool_value_or_none_checked(
    table: TomlTable,
    key: str,
    *,
    where: str,
    diagnostics: DiagnosticLog,
) -> bool | None:
    """Return an optional bool value, warning when present but not `bool`."""
    value: Any | None = table.get(key)
    if value is None or isinstance(value, bool):
        return value
    loc: Final[str] = f"{where}.{key}"
    logger.warning("Expected bool in %s, got %s: %r", loc, type(value).__name__, value)
    diagnostics.add_warning(f"Expected bool in {loc}, got {type(value).__name__}: {value!r}")
    return None


def get_int_value_or_none_checked(
    table: TomlTable,
    key: str,
    *,
    where: str,
    diagnostics: DiagnosticLog,
) -> int | None:
    """Return an optional int value, recording an error when present but not `int`.

    Notes:
        - Missing key / None -> None
        - `bool` is rejected (since `bool` is a subclass of `int`).
    """
    value: Any | None = table.get(key)
    if value is None:
        return None

    loc: Final[str] = f"{where}.{key}"

    if isinstance(value, int) and not isinstance(value, bool):
        return value

    logger.error("Expected int in %s, got %s: %r", loc, type(value).__name__, value)
    diagnostics.add_error(f"Expected int in {loc}, got {type(value).__name__}: {value!r}")
    return None


def get_string_list_value_checked(
    table: TomlTable,
    key: str,
    *,
    where: str,
    diagnostics: DiagnosticLog,
) -> list[str] | None:
    """Extract a list of strings from a TOML table.

    Behavior:
        - If the key is missing, returns None (so merging keeps lower layers).
        - If the value is not a list, records an error and returns None.
        - Non-string items are dropped with a warning.

    Args:
        table (TomlTable): TOML table to query.
        key (str): Key to extract.
        where (str): TOML location prefix (e.g. "[build]").
        diagnostics (DiagnosticLog): DiagnosticLog to record problems.

    Returns:
        list[str] | None: Filtered list containing only string entries, or None.
    """
    value: Any | None = table.get(key)
    if value is None:
        return None

    loc: Final[str] = f"{where}.{key}"

    if not isinstance(value, list):
        logger.error("Expected list in %s, got %s: %r", loc, type(value).__name__, value)
        diagnostics.add_error(f"Expected list in {loc}, got {type(value).__name__}: {value!r}")
        return None

    out: list[str] = []
    for v in value:
        if isinstance(v, str):
            out.append(v)
        else:
            logger.warning("Ignoring non-string entry in %s: %r", loc, v)
            diagnostics.add_warning(f"Ignoring non-string entry in {loc}: {v!r}")
    return out
