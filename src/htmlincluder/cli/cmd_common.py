# topmark:header:start
#
#   project      : HTMLIncluder
#   file         : cmd_common.py
#   file_relpath : src/htmlincluder/cli/cmd_common.py
#   license      : MIT
#   copyright    : (c) 2025 HTMLIncluder contributors
#
# topmark:header:end

"""Helpers shared by the CLI commands.

Config resolution from Click parameters, mapping of per-file exceptions to
CLI errors, and human-readable condition reports.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

import click

from htmlincluder.cli.errors import (
    IncluderCliError,
    IncluderConfigError,
    IncluderEncodingError,
    IncluderFileNotFoundError,
    IncluderIOError,
    IncluderPermissionDeniedError,
)
from htmlincluder.config.logging import get_logger
from htmlincluder.config.model import MutableConfig
from htmlincluder.core.errors import CyclicIncludeError, MissingFragmentError
from htmlincluder.diagnostic.model import DiagnosticLevel

if TYPE_CHECKING:
    from collections.abc import Iterable

    from htmlincluder.cli_shared.console_api import ConsoleLike
    from htmlincluder.config.logging import IncluderLogger
    from htmlincluder.config.model import Config
    from htmlincluder.diagnostic.model import Diagnostic

logger: IncluderLogger = get_logger(__name__)


def get_console(ctx: click.Context) -> ConsoleLike:
    """Return the console stored on the root context."""
    ctx.ensure_object(dict)
    return ctx.obj["console"]


def get_color_enabled(ctx: click.Context) -> bool:
    """Return False if ``--no-color`` was passed on the root command."""
    ctx.ensure_object(dict)
    return bool(ctx.obj.get("color_enabled", True))


def get_effective_verbosity(ctx: click.Context) -> int:
    """Return the program-output verbosity (``-v`` count minus ``-q`` count)."""
    ctx.ensure_object(dict)
    return int(ctx.obj.get("verbosity", 0))


def resolve_config_from_click(
    *,
    config_paths: Iterable[str],
    no_config: bool,
    overrides: dict[str, Any],
) -> Config:
    """Build the effective config for a command.

    Args:
        config_paths (Iterable[str]): Explicit ``--config`` files.
        no_config (bool): Skip project discovery.
        overrides (dict[str, Any]): CLI values (None = not given).

    Returns:
        Config: The frozen configuration.

    Raises:
        IncluderConfigError: If loading or validation recorded an error.
    """
    draft: MutableConfig = MutableConfig.load_merged(
        extra_config_files=[Path(p) for p in config_paths],
        no_config=no_config,
    )
    draft.apply_cli_args(overrides)
    config: Config = draft.freeze()
    logger.debug("Effective config: %s", config)
    if config.has_errors():
        raise IncluderConfigError("\n".join(config.error_messages()))
    return config


def cli_error_for(exc: BaseException) -> IncluderCliError:
    """Map a per-file exception to the matching CLI error."""
    if isinstance(exc, MissingFragmentError):
        return IncluderFileNotFoundError(f"File not found: {exc.fragment}")
    if isinstance(exc, CyclicIncludeError):
        return IncluderCliError(str(exc))
    if isinstance(exc, (FileNotFoundError, IsADirectoryError)):
        return IncluderFileNotFoundError(str(exc))
    if isinstance(exc, PermissionError):
        return IncluderPermissionDeniedError(str(exc))
    if isinstance(exc, UnicodeDecodeError):
        return IncluderEncodingError(str(exc))
    if isinstance(exc, OSError):
        return IncluderIOError(str(exc))
    return IncluderConfigError(str(exc))


def report_diagnostics(
    console: ConsoleLike, diagnostics: Iterable[Diagnostic], *, verbosity: int
) -> None:
    """Print conditions to stderr.

    Errors and warnings are always shown; info conditions only with ``-v``.
    With ``-q`` only errors are shown.
    """
    for d in diagnostics:
        line: str = f"[{d.level.value}] {d.render()}"
        if d.level == DiagnosticLevel.ERROR:
            console.error(line)
        elif d.level == DiagnosticLevel.WARNING:
            if verbosity >= 0:
                console.warn(line)
        elif verbosity > 0:
            console.note(line)
