# topmark:header:start
#
#   project      : HTMLIncluder
#   file         : __init__.py
#   file_relpath : src/htmlincluder/config/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 HTMLIncluder contributors
#
# topmark:header:end

"""Configuration layer for HTMLIncluder.

Modules:
    - ``logging``: TRACE-aware logger class and colored log formatting.
    - ``keys``: canonical TOML section and key names.
    - ``io``: tomlkit-based loading and rendering helpers.
    - ``model``: the frozen `Config` and the `MutableConfig` builder.
    - ``sources``: data tree and capability table loading.

This package does not import ``model`` eagerly so that low-level modules can
import ``htmlincluder.config.logging`` without pulling in the core engine.
"""

from __future__ import annotations
