# topmark:header:start
#
#   project      : HTMLIncluder
#   file         : __init__.py
#   file_relpath : src/htmlincluder/core/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 HTMLIncluder contributors
#
# topmark:header:end

"""Directive resolution core.

The ``htmlincluder.core`` package holds the I/O-free machinery that turns a
page with directives into a directive-free page:

- ``scanner``: tokenizes directive tags and their attributes.
- ``directives``: the directive model (kinds, spans, syntax settings).
- ``clip``: registration-time clipping of fragment content.
- ``registry``: per-build store of fragments, partitioned by category.
- ``data``: dotted-path lookup into the injected data tree.
- ``evaluator``: capability-scoped evaluation of inline expressions.
- ``engine``: the fixed-point resolution loop.

Nothing here touches the filesystem; the engine reads fragments through a
loader callback supplied by the caller.
"""

from __future__ import annotations
