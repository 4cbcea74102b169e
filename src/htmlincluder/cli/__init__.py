# topmark:header:start
#
#   project      : HTMLIncluder
#   file         : __init__.py
#   file_relpath : src/htmlincluder/cli/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 HTMLIncluder contributors
#
# topmark:header:end

"""Click-based command line interface for HTMLIncluder."""
