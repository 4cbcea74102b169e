# topmark:header:start
#
#   project      : HTMLIncluder
#   file         : __init__.py
#   file_relpath : src/htmlincluder/cli/commands/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 HTMLIncluder contributors
#
# topmark:header:end

"""HTMLIncluder CLI subcommands."""
