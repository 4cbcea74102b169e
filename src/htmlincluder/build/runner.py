# topmark:header:start
#
#   project      : HTMLIncluder
#   file         : runner.py
#   file_relpath : src/htmlincluder/build/runner.py
#   license      : MIT
#   copyright    : (c) 2025 HTMLIncluder contributors
#
# topmark:header:end

"""Build orchestration: registries, engines and per-page error handling.

Every entry point creates a fresh `FragmentRegistry`, so no state survives
between builds. Pages are resolved one at a time.

Exit code mapping (first error wins, later pages still run):
    FILE_NOT_FOUND
        A source or page is missing (`FileNotFoundError`, `IsADirectoryError`,
        `MissingFragmentError` for the page itself).
    PERMISSION_DENIED
        Insufficient permissions (`PermissionError`).
    ENCODING_ERROR
        A source is not valid UTF-8 (`UnicodeDecodeError`).
    IO_ERROR
        An output file cannot be written.
    FAILURE
        A page failed on a cyclic include in strict mode.
    PIPELINE_ERROR
        Any other exception raised while resolving a page.

Conditions recorded while resolving (missing fragments, invalid directives,
failed expressions) are reported but do not change the exit code.

Helpers in this module never print; they only log.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, replace
from pathlib import Path
from typing import TYPE_CHECKING, Any

from htmlincluder.build.discovery import discover_files, list_html_files
from htmlincluder.build.writer import output_path_for, write_output
from htmlincluder.cli_shared.exit_codes import ExitCode
from htmlincluder.config.logging import get_logger
from htmlincluder.config.sources import load_capabilities, load_data_tree
from htmlincluder.constants import VIRTUAL_FILE_NAME
from htmlincluder.core.engine import ResolutionEngine
from htmlincluder.core.errors import CyclicIncludeError, MissingFragmentError
from htmlincluder.core.registry import FragmentRegistry, normalize_path
from htmlincluder.diagnostic.model import (
    ConditionKind,
    DiagnosticLevel,
    DiagnosticLog,
    FrozenDiagnosticLog,
)

if TYPE_CHECKING:
    from htmlincluder.config.logging import IncluderLogger
    from htmlincluder.config.model import Config
    from htmlincluder.core.engine import ResolutionResult, ResolverSettings
    from htmlincluder.diagnostic.model import Diagnostic

logger: IncluderLogger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class BuildReport:
    """Outcome of a directory build.

    Attributes:
        results: One result per page that resolved (fully or partially).
        written: Output files written, in page order.
        diagnostics: Build-level conditions (registration problems, failed pages).
        error_code: First non-success exit code encountered, or None.
    """

    results: tuple[ResolutionResult, ...]
    written: tuple[Path, ...]
    diagnostics: FrozenDiagnosticLog
    error_code: ExitCode | None = None

    @property
    def exit_code(self) -> ExitCode:
        """Return the exit code of the build."""
        return self.error_code or ExitCode.SUCCESS

    def all_diagnostics(self) -> list[Diagnostic]:
        """Return build-level conditions followed by every page's conditions."""
        collected: list[Diagnostic] = list(self.diagnostics)
        for result in self.results:
            collected.extend(result.diagnostics)
        return collected


async def read_fragment(path: str) -> str | None:
    """Load a fragment from disk, returning None if it does not exist.

    Raises:
        OSError: If the file exists but cannot be read.
        UnicodeDecodeError: If the file is not valid UTF-8.
    """
    p = Path(path)
    if not p.is_file():
        return None
    return await asyncio.to_thread(p.read_text, encoding="utf-8")


def error_code_for(exc: BaseException) -> ExitCode:
    """Map a per-file exception to its exit code."""
    if isinstance(exc, (FileNotFoundError, IsADirectoryError, MissingFragmentError)):
        return ExitCode.FILE_NOT_FOUND
    if isinstance(exc, PermissionError):
        return ExitCode.PERMISSION_DENIED
    if isinstance(exc, UnicodeDecodeError):
        return ExitCode.ENCODING_ERROR
    if isinstance(exc, CyclicIncludeError):
        return ExitCode.FAILURE
    if isinstance(exc, OSError):
        return ExitCode.IO_ERROR
    return ExitCode.PIPELINE_ERROR


def make_engine(
    config: Config,
    registry: FragmentRegistry,
    *,
    data: Any = None,
    capabilities: dict[str, Any] | None = None,
) -> ResolutionEngine:
    """Create an engine for one build.

    The data tree and capability table are loaded from the configuration
    unless given.

    Raises:
        OSError: If a JSON data file cannot be read.
        htmlincluder.config.sources.DataSourceError: If a JSON data file is invalid.
        htmlincluder.config.sources.PluginLoadError: If a plugin cannot be imported.
    """
    if data is None:
        data = load_data_tree(config)
    if capabilities is None:
        capabilities = load_capabilities(config.plugins, search_path=Path.cwd())
    return ResolutionEngine(
        registry,
        loader=read_fragment,
        data=data,
        capabilities=capabilities,
        settings=config.resolver_settings(),
    )


def new_registry(config: Config) -> FragmentRegistry:
    """Return an empty registry using the configured naming and syntax."""
    settings: ResolverSettings = config.resolver_settings()
    return FragmentRegistry(settings.naming, settings.syntax())


def load_dependencies(registry: FragmentRegistry, base_dir: Path) -> list[Diagnostic]:
    """Register every insert and wrap fragment found below ``base_dir``.

    Pages are skipped. Unreadable files are logged and skipped; a later
    lookup loads them lazily and reports them as missing.

    Returns:
        list[Diagnostic]: Conditions reported while registering (malformed clips).
    """
    diagnostics: list[Diagnostic] = []
    for path in list_html_files(base_dir):
        key: str = normalize_path(str(path))
        if not registry.naming.is_dependency(key):
            continue
        try:
            content: str = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.error("Cannot read fragment %s: %s", path, exc)
            continue
        _record, found = registry.register(key, content)
        diagnostics.extend(found)
    logger.debug("Loaded %d dependency fragment(s) from %s", len(registry), base_dir)
    return diagnostics


async def process_directory(config: Config, *, write: bool = True) -> BuildReport:
    """Resolve every page of ``src_dir`` (or only the configured files).

    Args:
        config (Config): The runtime configuration.
        write (bool): Write each result to ``dest_dir`` (when configured).

    Returns:
        BuildReport: Results, written files, build-level conditions and exit code.
    """
    registry: FragmentRegistry = new_registry(config)
    engine: ResolutionEngine = make_engine(config, registry)
    log = DiagnosticLog()
    error_code: ExitCode | None = None

    for path in discover_files(config):
        key: str = normalize_path(str(path))
        try:
            content: str = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.error("Cannot read %s: %s", path, exc)
            log.record(
                ConditionKind.OTHER,
                f"cannot read source: {exc}",
                path=key,
                level=DiagnosticLevel.ERROR,
            )
            error_code = error_code or error_code_for(exc)
            continue
        _record, found = registry.register(key, content)
        log.extend(found)

    pages: list[str]
    if config.files:
        pages = [normalize_path(str(p)) for p in config.files]
    else:
        pages = [record.path for record in registry.pages()]
    logger.info("Resolving %d page(s) from %s", len(pages), config.src_dir)

    results: list[ResolutionResult] = []
    written: list[Path] = []
    for page in pages:
        try:
            result: ResolutionResult = await engine.resolve(page)
        except CyclicIncludeError as exc:
            logger.error("%s", exc)
            log.record(ConditionKind.CYCLIC_INCLUDE, exc.message, path=page, span=exc.span)
            error_code = error_code or error_code_for(exc)
            continue
        except MissingFragmentError as exc:
            logger.error("Page not found: %s", page)
            log.record(ConditionKind.MISSING_FRAGMENT, exc.message, path=page)
            error_code = error_code or error_code_for(exc)
            continue
        except Exception as exc:
            logger.exception("Unexpected error resolving %s: %s", page, exc)
            log.record(
                ConditionKind.OTHER,
                f"unexpected error: {type(exc).__name__}: {exc}",
                path=page,
                level=DiagnosticLevel.ERROR,
            )
            error_code = error_code or error_code_for(exc)
            continue
        results.append(result)

        if write and config.dest_dir is not None:
            target: Path = output_path_for(Path(page), config.src_dir, config.dest_dir)
            try:
                written.append(write_output(result.content, target))
            except OSError as exc:
                logger.error("Cannot write %s: %s", target, exc)
                log.record(
                    ConditionKind.OTHER,
                    f"cannot write output: {exc}",
                    path=page,
                    level=DiagnosticLevel.ERROR,
                )
                error_code = error_code or ExitCode.IO_ERROR

    return BuildReport(
        results=tuple(results),
        written=tuple(written),
        diagnostics=log.freeze(),
        error_code=error_code,
    )


async def process_single_file(path: Path, config: Config) -> ResolutionResult:
    """Resolve one file against the fragments of ``src_dir``.

    Raises:
        MissingFragmentError: If ``path`` cannot be loaded.
        CyclicIncludeError: On a cyclic include in strict mode.
    """
    registry: FragmentRegistry = new_registry(config)
    diagnostics: list[Diagnostic] = load_dependencies(registry, config.src_dir)
    engine: ResolutionEngine = make_engine(config, registry)
    result: ResolutionResult = await engine.resolve(str(path))
    return _with_diagnostics(result, diagnostics)


async def process_content(text: str, base_path: Path, config: Config) -> ResolutionResult:
    """Resolve ``text`` as a virtual document located in ``base_path``.

    Relative references resolve against ``base_path``; insert and wrap
    fragments of ``src_dir`` are registered first.

    Raises:
        CyclicIncludeError: On a cyclic include in strict mode.
    """
    registry: FragmentRegistry = new_registry(config)
    diagnostics: list[Diagnostic] = load_dependencies(registry, config.src_dir)
    engine: ResolutionEngine = make_engine(config, registry)
    virtual: Path = base_path / VIRTUAL_FILE_NAME
    result: ResolutionResult = await engine.resolve(str(virtual), text)
    return _with_diagnostics(result, diagnostics)


def _with_diagnostics(result: ResolutionResult, extra: list[Diagnostic]) -> ResolutionResult:
    """Return ``result`` with registration conditions prepended."""
    if not extra:
        return result
    merged: FrozenDiagnosticLog = DiagnosticLog.from_iterable(
        [*extra, *result.diagnostics]
    ).freeze()
    return replace(result, diagnostics=merged)
