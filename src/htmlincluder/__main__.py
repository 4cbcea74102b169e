# topmark:header:start
#
#   project      : HTMLIncluder
#   file         : __main__.py
#   file_relpath : src/htmlincluder/__main__.py
#   license      : MIT
#   copyright    : (c) 2025 HTMLIncluder contributors
#
# topmark:header:end

"""Module entry point for running HTMLIncluder via ``python -m htmlincluder``.

Delegates to :func:`htmlincluder.cli.main.cli`, the same entry point as the
``htmlincluder`` console script.

Examples:
    Build the configured source tree::

        python -m htmlincluder build -s src -d dist
"""

from __future__ import annotations

from htmlincluder.cli.main import cli

if __name__ == "__main__":
    cli()
