# topmark:header:start
#
#   project      : HTMLIncluder
#   file         : __init__.py
#   file_relpath : src/htmlincluder/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 HTMLIncluder contributors
#
# topmark:header:end

"""HTMLIncluder package.

HTMLIncluder is a build-time preprocessor for HTML sources. It resolves
SSI-style directives embedded as comment tags (fragment inserts, layout wraps,
JSON data injection, clipping and inline expressions) until every page reaches
a directive-free fixed point, and exposes both a CLI and a small typed API.
"""

from __future__ import annotations
