# topmark:header:start
#
#   project      : HTMLIncluder
#   file         : constants.py
#   file_relpath : src/htmlincluder/constants.py
#   license      : MIT
#   copyright    : (c) 2025 HTMLIncluder contributors
#
# topmark:header:end

"""HTMLIncluder Constants."""

from __future__ import annotations

from importlib.metadata import version as get_version

HTMLINCLUDER_VERSION: str = get_version("htmlincluder")

# Name of the bundled default config inside the package `htmlincluder.config`:
DEFAULT_TOML_CONFIG_PACKAGE: str = "htmlincluder.config"
DEFAULT_TOML_CONFIG_NAME: str = "htmlincluder-default.toml"

# Project config files discovered in the working directory, in order of preference
PROJECT_CONFIG_NAME: str = "htmlincluder.toml"
PYPROJECT_TOML_NAME: str = "pyproject.toml"

# File name of the virtual document used when resolving a bare string
VIRTUAL_FILE_NAME: str = "virtual-file.html"
