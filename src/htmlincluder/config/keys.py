# topmark:header:start
#
#   project      : HTMLIncluder
#   file         : keys.py
#   file_relpath : src/htmlincluder/config/keys.py
#   license      : MIT
#   copyright    : (c) 2025 HTMLIncluder contributors
#
# topmark:header:end

"""Canonical TOML section and key names for HTMLIncluder configuration.

These constants are the external configuration API as it appears in
``htmlincluder.toml`` and in ``[tool.htmlincluder]`` inside ``pyproject.toml``.
Renaming or removing a key is a breaking change.
"""

from __future__ import annotations

from typing import Final


class Toml:
    """TOML section names and keys used by HTMLIncluder configuration.

    The ordering of constants mirrors ``htmlincluder-default.toml``.
    """

    # pyproject.toml nesting
    SECTION_TOOL: Final[str] = "tool"
    SECTION_TOOL_NAME: Final[str] = "htmlincluder"

    # [build]
    SECTION_BUILD: Final[str] = "build"

    KEY_SRC_DIR: Final[str] = "src_dir"
    KEY_DEST_DIR: Final[str] = "dest_dir"
    KEY_FILES: Final[str] = "files"
    KEY_INCLUDE: Final[str] = "include"
    KEY_EXCLUDE: Final[str] = "exclude"
    KEY_WATCH: Final[str] = "watch"

    # [directives]
    SECTION_DIRECTIVES: Final[str] = "directives"

    KEY_TAG_KEYWORD: Final[str] = "tag_keyword"
    KEY_FILE_PATH_ATTRIBUTE: Final[str] = "file_path_attribute"
    KEY_JSON_PATH_ATTRIBUTE: Final[str] = "json_path_attribute"
    KEY_EXPRESSION_ATTRIBUTE: Final[str] = "expression_attribute"
    KEY_CAPABILITY_NAME: Final[str] = "capability_name"

    # [fragments]
    SECTION_FRAGMENTS: Final[str] = "fragments"

    KEY_INSERT_PREFIX: Final[str] = "insert_prefix"
    KEY_WRAP_PREFIX: Final[str] = "wrap_prefix"

    # [data]
    SECTION_DATA: Final[str] = "data"

    KEY_JSON_INPUT: Final[str] = "json_input"
    KEY_JSON_FILES: Final[str] = "json_files"
    KEY_PLUGINS: Final[str] = "plugins"

    # [dev]
    SECTION_DEV: Final[str] = "dev"

    KEY_LIMIT_ITERATIONS: Final[str] = "limit_iterations"
    KEY_STRICT_CYCLES: Final[str] = "strict_cycles"
    KEY_PRINT_ITERATIONS: Final[str] = "print_iterations"
    KEY_PRINT_RESULT: Final[str] = "print_result"
    KEY_PRINT_PATHS: Final[str] = "print_paths"
