# topmark:header:start
#
#   project      : HTMLIncluder
#   file         : build.py
#   file_relpath : src/htmlincluder/cli/commands/build.py
#   license      : MIT
#   copyright    : (c) 2025 HTMLIncluder contributors
#
# topmark:header:end

"""HTMLIncluder `build` command.

Resolves every page of the source directory and writes the results to the
output directory, preserving the directory structure.

Examples:
  Build with the project config (``htmlincluder.toml`` or ``pyproject.toml``):

    $ htmlincluder build

  Override the directories and rebuild on changes:

    $ htmlincluder build -s site -d public --watch

  Fail pages that include themselves:

    $ htmlincluder build --strict-cycles
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import click

from htmlincluder.build.runner import process_directory
from htmlincluder.build.watch import watch
from htmlincluder.cli.cmd_common import (
    cli_error_for,
    get_color_enabled,
    get_console,
    get_effective_verbosity,
    report_diagnostics,
    resolve_config_from_click,
)
from htmlincluder.cli.options import common_config_options
from htmlincluder.config.sources import DataSourceError, PluginLoadError
from htmlincluder.diagnostic.model import DiagnosticLevel

if TYPE_CHECKING:
    from htmlincluder.build.runner import BuildReport
    from htmlincluder.cli_shared.console_api import ConsoleLike
    from htmlincluder.config.model import Config
    from htmlincluder.core.engine import ResolutionResult
    from htmlincluder.diagnostic.model import DiagnosticStats


def _plural(n: int, word: str) -> str:
    return f"{n} {word}" + ("" if n == 1 else "s")


def render_page_line(result: ResolutionResult, *, color: bool) -> str:
    """Return a one-line status for a page: path, final state and condition counts.

    Args:
        result (ResolutionResult): The resolved page.
        color (bool): Colorize the state and the counts.

    Returns:
        str: e.g. ``src/index.html - stable - 1 error, 2 warnings``.
    """
    state: str = result.state.color(result.state.value) if color else result.state.value
    parts: list[str] = [result.path, "-", state]

    stats: DiagnosticStats = result.diagnostics.stats()
    triage: list[str] = []
    for level, count, word in (
        (DiagnosticLevel.ERROR, stats.n_error, "error"),
        (DiagnosticLevel.WARNING, stats.n_warning, "warning"),
    ):
        if count:
            text: str = _plural(count, word)
            triage.append(level.color(text) if color else text)
    if triage:
        parts.extend(["-", ", ".join(triage)])
    return " ".join(parts)


def report_build(
    console: ConsoleLike,
    report: BuildReport,
    config: Config,
    verbosity: int,
    *,
    color: bool = True,
) -> None:
    """Print the outcome of one build."""
    if config.print_result:
        for result in report.results:
            console.print(console.styled(f"<!-- {result.path} -->", dim=True))
            console.print(result.content)
    report_diagnostics(console, report.all_diagnostics(), verbosity=verbosity)
    if verbosity > 0:
        for result in report.results:
            console.note(render_page_line(result, color=color))
        unstable: int = sum(1 for r in report.results if not r.is_stable)
        console.note(
            f"Resolved {len(report.results)} page(s), wrote {len(report.written)} file(s)"
            + (f", {unstable} hit the iteration limit" if unstable else "")
        )


@click.command(
    name="build",
    help="Resolve every page of the source directory into the output directory.",
)
@common_config_options
@click.option("-s", "--src", "src_dir", type=click.Path(file_okay=False), help="Source directory.")
@click.option(
    "-d", "--dest", "dest_dir", type=click.Path(file_okay=False), help="Output directory."
)
@click.option("-w", "--watch", "watch_flag", is_flag=True, help="Rebuild when sources change.")
@click.option(
    "--limit-iterations",
    "limit_iterations",
    type=click.IntRange(min=1),
    default=None,
    help="Maximum number of resolution passes per page.",
)
@click.option(
    "--strict-cycles",
    "strict_cycles",
    is_flag=True,
    help="Fail a page on a cyclic include.",
)
def build_command(
    *,
    config_paths: tuple[str, ...],
    no_config: bool,
    src_dir: str | None,
    dest_dir: str | None,
    watch_flag: bool,
    limit_iterations: int | None,
    strict_cycles: bool,
) -> None:
    """Resolve every page of the source directory into the output directory."""
    ctx: click.Context = click.get_current_context()
    console: ConsoleLike = get_console(ctx)
    verbosity: int = get_effective_verbosity(ctx)
    color: bool = get_color_enabled(ctx)

    config: Config = resolve_config_from_click(
        config_paths=config_paths,
        no_config=no_config,
        overrides={
            "src_dir": src_dir,
            "dest_dir": dest_dir,
            "watch": watch_flag,
            "limit_iterations": limit_iterations,
            "strict_cycles": strict_cycles,
        },
    )

    def on_build(report: BuildReport) -> None:
        report_build(console, report, config, verbosity, color=color)

    try:
        if config.watch:
            try:
                watch(config, on_build)
            except KeyboardInterrupt:
                console.note("Stopped watching.")
            return
        report: BuildReport = asyncio.run(process_directory(config))
    except (OSError, DataSourceError, PluginLoadError) as exc:
        raise cli_error_for(exc) from exc

    on_build(report)
    if report.error_code is not None:
        ctx.exit(report.error_code)
