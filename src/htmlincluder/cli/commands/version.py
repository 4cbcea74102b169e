# topmark:header:start
#
#   project      : HTMLIncluder
#   file         : version.py
#   file_relpath : src/htmlincluder/cli/commands/version.py
#   license      : MIT
#   copyright    : (c) 2025 HTMLIncluder contributors
#
# topmark:header:end

"""HTMLIncluder `version` command.

Prints the HTMLIncluder version as installed in the active Python environment.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from htmlincluder.cli.cmd_common import get_console, get_effective_verbosity
from htmlincluder.constants import HTMLINCLUDER_VERSION

if TYPE_CHECKING:
    from htmlincluder.cli_shared.console_api import ConsoleLike


@click.command(
    name="version",
    help="Show the current version of HTMLIncluder.",
)
def version_command() -> None:
    """Show the current version of HTMLIncluder."""
    ctx: click.Context = click.get_current_context()
    console: ConsoleLike = get_console(ctx)

    if get_effective_verbosity(ctx) > 0:
        console.print(console.styled("HTMLIncluder version:", bold=True, underline=True))
        console.print(f"    {console.styled(HTMLINCLUDER_VERSION, bold=True)}")
    else:
        console.print(console.styled(HTMLINCLUDER_VERSION, bold=True))
