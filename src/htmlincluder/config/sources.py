# topmark:header:start
#
#   project      : HTMLIncluder
#   file         : sources.py
#   file_relpath : src/htmlincluder/config/sources.py
#   license      : MIT
#   copyright    : (c) 2025 HTMLIncluder contributors
#
# topmark:header:end

"""Data tree and capability table sources.

The data tree starts from the inline ``[data].json_input`` table; every file
listed in ``[data].json_files`` is then merged over it (later files win,
shallow per top-level key).

The capability table is built from ``[data].plugins`` specs:

* ``"package.module"`` contributes every public callable defined in the module
  (or the names listed in its ``__all__``).
* ``"package.module:attr"`` contributes ``attr`` under its own name, or all of
  its entries when ``attr`` is a mapping.
"""

from __future__ import annotations

import importlib
import inspect
import json
import sys
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from htmlincluder.config.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path
    from types import ModuleType

    from htmlincluder.config.logging import IncluderLogger
    from htmlincluder.config.model import Config

logger: IncluderLogger = get_logger(__name__)


class DataSourceError(ValueError):
    """Raised when a JSON data file cannot be used as part of the data tree."""


class PluginLoadError(ImportError):
    """Raised when a plugin spec cannot be imported."""


def load_json_file(path: Path) -> Any:
    """Load one JSON data file.

    Raises:
        OSError: If the file cannot be read.
        DataSourceError: If the file is not valid JSON.
    """
    logger.debug("Loading JSON data file: %s", path)
    with path.open("r", encoding="utf-8") as fh:
        try:
            return json.load(fh)
        except json.JSONDecodeError as exc:
            raise DataSourceError(f"invalid JSON in {path}: {exc}") from exc


def load_data_tree(config: Config) -> dict[str, Any]:
    """Build the data tree of a build.

    Args:
        config (Config): The runtime configuration.

    Returns:
        dict[str, Any]: ``json_input`` with every ``json_files`` entry merged over it.

    Raises:
        OSError: If a data file cannot be read.
        DataSourceError: If a data file is not a JSON object.
    """
    tree: dict[str, Any] = dict(config.json_input)
    for path in config.json_files:
        loaded: Any = load_json_file(path)
        if not isinstance(loaded, dict):
            raise DataSourceError(
                f"{path}: top-level JSON value must be an object, got {type(loaded).__name__}"
            )
        tree.update(loaded)
    logger.trace("Data tree keys: %s", sorted(tree))
    return tree


def _public_callables(module: ModuleType) -> dict[str, Any]:
    names: Iterable[str]
    exported: Any = getattr(module, "__all__", None)
    if exported is not None:
        names = list(exported)
    else:
        names = [
            name
            for name, obj in vars(module).items()
            if not name.startswith("_")
            and callable(obj)
            and getattr(obj, "__module__", None) == module.__name__
        ]
    return {name: getattr(module, name) for name in names}


def load_capabilities(
    specs: Iterable[str], *, search_path: Path | None = None
) -> dict[str, Any]:
    """Import plugin specs and merge them into one capability mapping.

    Args:
        specs (Iterable[str]): ``module`` or ``module:attr`` specs.
        search_path (Path | None): Directory made importable first (typically
            the project root), so local plugin modules can be found.

    Returns:
        dict[str, Any]: Capability name to callable or value; later specs win.

    Raises:
        PluginLoadError: If a module or attribute cannot be found.
    """
    specs = list(specs)
    if not specs:
        return {}
    if search_path is not None and str(search_path) not in sys.path:
        sys.path.insert(0, str(search_path))

    table: dict[str, Any] = {}
    for spec in specs:
        module_name, _, attr = spec.partition(":")
        try:
            module: ModuleType = importlib.import_module(module_name)
        except ImportError as exc:
            raise PluginLoadError(f"cannot import plugin module '{module_name}': {exc}") from exc
        if not attr:
            entries: dict[str, Any] = _public_callables(module)
        else:
            try:
                obj: Any = getattr(module, attr)
            except AttributeError as exc:
                raise PluginLoadError(f"plugin '{spec}': no attribute '{attr}'") from exc
            if isinstance(obj, Mapping) and not inspect.isclass(obj):
                entries = {str(k): v for k, v in obj.items()}
            else:
                entries = {attr: obj}
        logger.debug("Plugin %s contributes: %s", spec, sorted(entries))
        table.update(entries)
    return table
