# topmark:header:start
#
#   project      : HTMLIncluder
#   file         : main.py
#   file_relpath : src/htmlincluder/cli/main.py
#   license      : MIT
#   copyright    : (c) 2025 HTMLIncluder contributors
#
# topmark:header:end

"""HTMLIncluder command line entry point.

Group-level options are resolved once and placed into ``ctx.obj``:

- ``verbosity``: ``-v`` count minus ``-q`` count, gating program output.
- ``log_level``: ``HTMLINCLUDER_LOG_LEVEL`` when set, else the level implied by ``-v/-q``.
- ``console``: the `ClickConsole` every subcommand writes through.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from htmlincluder.cli.commands.build import build_command
from htmlincluder.cli.commands.init import init_command
from htmlincluder.cli.commands.process import process_command
from htmlincluder.cli.commands.version import version_command
from htmlincluder.cli.console import ClickConsole
from htmlincluder.cli.options import (
    common_color_options,
    common_verbose_options,
    resolve_verbosity,
)
from htmlincluder.config.logging import get_logger, resolve_env_log_level, setup_logging

if TYPE_CHECKING:
    from htmlincluder.cli_shared.console_api import ConsoleLike

logger = get_logger(__name__)


def init_common_state(
    ctx: click.Context,
    *,
    verbose: int,
    quiet: int,
    no_color: bool,
) -> None:
    """Initialize shared state (verbosity, logging and color) on the Click context.

    Args:
        ctx (click.Context): Current Click context; will have ``obj`` and ``color`` set.
        verbose (int): Count of ``-v`` flags.
        quiet (int): Count of ``-q`` flags.
        no_color (bool): Whether ``--no-color`` was passed; forces color off.
    """
    ctx.ensure_object(dict)

    level_cli: int = resolve_verbosity(verbose, quiet)
    ctx.obj["verbosity"] = verbose - quiet

    level_env: int | None = resolve_env_log_level()
    ctx.obj["log_level"] = level_env if level_env is not None else level_cli
    setup_logging(level=ctx.obj["log_level"])

    ctx.color = not no_color
    ctx.obj["color_enabled"] = not no_color
    ctx.obj["console"] = ClickConsole(enable_color=not no_color)


@click.group(
    cls=click.Group,
    context_settings={"help_option_names": ["-h", "--help"]},
    invoke_without_command=True,
    help="HTMLIncluder: resolve SSI-style include, wrap and data directives in HTML.",
)
@common_verbose_options
@common_color_options
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: int,
    quiet: int,
    no_color: bool,
) -> None:
    """Entry point for the HTMLIncluder CLI."""
    init_common_state(ctx, verbose=verbose, quiet=quiet, no_color=no_color)
    console: ConsoleLike = ctx.obj["console"]

    if ctx.invoked_subcommand is None:
        console.print("Hint: use 'htmlincluder build' to resolve the pages of your project.")
        console.print()
        console.print(ctx.get_help())


cli.add_command(build_command)

cli.add_command(process_command)

cli.add_command(init_command)

cli.add_command(version_command)

if __name__ == "__main__":
    cli()
