# topmark:header:start
#
#   project      : HTMLIncluder
#   file         : init.py
#   file_relpath : src/htmlincluder/cli/commands/init.py
#   license      : MIT
#   copyright    : (c) 2025 HTMLIncluder contributors
#
# topmark:header:end

"""HTMLIncluder `init` command.

Writes the annotated starter configuration. An existing file is never
overwritten. With ``--pyproject`` the tables are nested under
``[tool.htmlincluder]`` so they can be pasted into ``pyproject.toml``;
``-o -`` prints to stdout instead of writing a file.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from htmlincluder.cli.cmd_common import cli_error_for, get_console, get_effective_verbosity
from htmlincluder.cli.errors import IncluderCliError
from htmlincluder.config.io import render_config_template
from htmlincluder.constants import PROJECT_CONFIG_NAME

if TYPE_CHECKING:
    from htmlincluder.cli_shared.console_api import ConsoleLike


@click.command(
    name="init",
    help=f"Write a starter configuration ({PROJECT_CONFIG_NAME} by default).",
)
@click.option(
    "-o",
    "--output",
    "output",
    type=str,
    default=PROJECT_CONFIG_NAME,
    show_default=True,
    help="File to create ('-' prints to stdout).",
)
@click.option(
    "--pyproject",
    "for_pyproject",
    is_flag=True,
    help="Nest the tables under [tool.htmlincluder] for pyproject.toml.",
)
def init_command(*, output: str, for_pyproject: bool) -> None:
    """Write a starter configuration file."""
    ctx: click.Context = click.get_current_context()
    console: ConsoleLike = get_console(ctx)

    toml_text: str = render_config_template(for_pyproject=for_pyproject)
    if output == "-":
        console.print(toml_text, nl=False)
        return

    target = Path(output)
    if target.exists():
        raise IncluderCliError(f"{target} already exists; not overwriting it.")
    try:
        target.write_text(toml_text, encoding="utf-8")
    except OSError as exc:
        raise cli_error_for(exc) from exc
    if get_effective_verbosity(ctx) >= 0:
        console.note(f"Wrote {target}")
