# topmark:header:start
#
#   project      : HTMLIncluder
#   file         : __init__.py
#   file_relpath : src/htmlincluder/config/io/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 HTMLIncluder contributors
#
# topmark:header:end

"""TOML I/O helpers for HTMLIncluder configuration.

HTMLIncluder uses `tomlkit` for parsing and rendering:

- `load_toml_dict()` parses on-disk TOML and returns plain dicts.
- `to_toml()` renders a dict (after stripping TOML-incompatible `None` values).
- `nest_toml_under_section()` re-roots a document under ``[tool.htmlincluder]``
  while keeping its comments, for ``init --pyproject``.

Typical flow:
    1. Load defaults (``load_defaults_dict``).
    2. Load project TOML files (``load_toml_dict``).
    3. Read values with typed getters (unchecked or checked variants).
"""

from __future__ import annotations

from .getters import (
    get_bool_value_or_none_checked,
    get_int_value_or_none_checked,
    get_string_list_value_checked,
    get_string_value_or_none,
    get_table_value,
)
from .loaders import (
    load_default_config_template_toml_text,
    load_defaults_dict,
    load_toml_dict,
    render_config_template,
)
from .render import nest_toml_under_section, to_toml
from .types import TomlTable

__all__ = [
    "TomlTable",
    "get_bool_value_or_none_checked",
    "get_int_value_or_none_checked",
    "get_string_list_value_checked",
    "get_string_value_or_none",
    "get_table_value",
    "load_default_config_template_toml_text",
    "load_defaults_dict",
    "load_toml_dict",
    "nest_toml_under_section",
    "render_config_template",
    "to_toml",
]
