# topmark:header:start
#
#   project      : HTMLIncluder
#   file         : process.py
#   file_relpath : src/htmlincluder/cli/commands/process.py
#   license      : MIT
#   copyright    : (c) 2025 HTMLIncluder contributors
#
# topmark:header:end

"""HTMLIncluder `process` command.

Resolves a single file against the fragments of the source directory and
prints the result (or writes it with ``-o``). A ``-`` FILE reads the document
from STDIN; its relative references resolve against the working directory.

Examples:
    $ htmlincluder process src/index.html > index.html
    $ cat page.html | htmlincluder process - -o out/page.html
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import TYPE_CHECKING

import click

from htmlincluder.build.runner import process_content, process_single_file
from htmlincluder.build.writer import write_output
from htmlincluder.cli.cmd_common import (
    cli_error_for,
    get_console,
    get_effective_verbosity,
    report_diagnostics,
    resolve_config_from_click,
)
from htmlincluder.cli.options import common_config_options
from htmlincluder.config.sources import DataSourceError, PluginLoadError
from htmlincluder.core.errors import CyclicIncludeError, MissingFragmentError

if TYPE_CHECKING:
    from htmlincluder.cli_shared.console_api import ConsoleLike
    from htmlincluder.config.model import Config
    from htmlincluder.core.engine import ResolutionResult


@click.command(
    name="process",
    help="Resolve one file and print the result (or write it with -o).",
)
@click.argument("file", type=str)
@common_config_options
@click.option("-s", "--src", "src_dir", type=click.Path(file_okay=False), help="Source directory.")
@click.option("-o", "--output", "output", type=click.Path(dir_okay=False), help="Output file.")
@click.option(
    "--limit-iterations",
    "limit_iterations",
    type=click.IntRange(min=1),
    default=None,
    help="Maximum number of resolution passes.",
)
@click.option("--strict-cycles", "strict_cycles", is_flag=True, help="Fail on a cyclic include.")
def process_command(
    *,
    file: str,
    config_paths: tuple[str, ...],
    no_config: bool,
    src_dir: str | None,
    output: str | None,
    limit_iterations: int | None,
    strict_cycles: bool,
) -> None:
    """Resolve one file and print the result (or write it with -o)."""
    ctx: click.Context = click.get_current_context()
    console: ConsoleLike = get_console(ctx)
    verbosity: int = get_effective_verbosity(ctx)

    config: Config = resolve_config_from_click(
        config_paths=config_paths,
        no_config=no_config,
        overrides={
            "src_dir": src_dir,
            "limit_iterations": limit_iterations,
            "strict_cycles": strict_cycles,
        },
    )

    try:
        result: ResolutionResult
        if file == "-":
            text: str = click.get_text_stream("stdin").read()
            result = asyncio.run(process_content(text, Path.cwd(), config))
        else:
            result = asyncio.run(process_single_file(Path(file), config))
    except (
        MissingFragmentError,
        CyclicIncludeError,
        OSError,
        DataSourceError,
        PluginLoadError,
    ) as exc:
        raise cli_error_for(exc) from exc

    report_diagnostics(console, result.diagnostics, verbosity=verbosity)

    if output is None:
        console.print(result.content, nl=False)
        return
    try:
        write_output(result.content, Path(output))
    except OSError as exc:
        raise cli_error_for(exc) from exc
    if config.print_result:
        console.print(result.content, nl=False)
