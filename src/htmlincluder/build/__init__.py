# topmark:header:start
#
#   project      : HTMLIncluder
#   file         : __init__.py
#   file_relpath : src/htmlincluder/build/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 HTMLIncluder contributors
#
# topmark:header:end

"""Directory builds on top of the resolution engine.

Modules:
    - ``discovery``: source discovery with include/exclude filtering.
    - ``runner``: per-build registries, page resolution and exit codes.
    - ``writer``: output paths and file writing.
    - ``watch``: polling rebuild loop.
"""

from __future__ import annotations

from htmlincluder.build.discovery import discover_files
from htmlincluder.build.runner import (
    BuildReport,
    load_dependencies,
    process_content,
    process_directory,
    process_single_file,
)

__all__ = [
    "BuildReport",
    "discover_files",
    "load_dependencies",
    "process_content",
    "process_directory",
    "process_single_file",
]
