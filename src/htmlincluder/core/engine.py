# topmark:header:start
#
#   project      : HTMLIncluder
#   file         : engine.py
#   file_relpath : src/htmlincluder/core/engine.py
#   license      : MIT
#   copyright    : (c) 2025 HTMLIncluder contributors
#
# topmark:header:end

"""Fixed-point directive resolution.

`ResolutionEngine` resolves one page at a time. Each pass scans the current
text, dispatches every actionable directive left-to-right, splices the
substitutions (right-to-left, so earlier offsets stay valid) and scans again,
until no actionable directive remains or the iteration budget runs out.

Actionable directives:
    * ``insert``: the fragment is looked up (loaded on a miss), its own
      directives are resolved depth-first relative to its directory, and the
      result replaces the tag.
    * ``wrap`` ... ``endwrap``: once the body holds no actionable directive,
      the layout replaces the whole block with the body spliced at every
      ``middle`` marker; the combined text is resolved relative to the
      layout's directory.
    * ``data`` / ``jsonInsert``: replaced by a data lookup or an expression
      result, rendered as text or as JSON.

The iteration budget is shared by the whole depth-first resolution of one
page and only counts passes that found directives: a page without directives
takes zero passes, an A -> B -> C insert chain takes two.

Cyclic includes are handled three ways. With ``strict_cycles`` they raise
`CyclicIncludeError`. With an iteration limit the limit truncates them. With
neither, the cyclic directive is replaced by empty text and an
UNRESOLVED_DIRECTIVE condition is recorded.

Nesting is bounded by `MAX_INCLUDE_DEPTH`. A directive that would nest deeper
is left in place and the page ends as ITERATION_EXCEEDED.
"""

from __future__ import annotations

import inspect
import logging
import os
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Final

from yachalk import chalk

from htmlincluder.config.logging import TRACE_LEVEL, get_logger
from htmlincluder.core.data import MISSING, lookup, resolve, stringify, to_json_text
from htmlincluder.core.directives import DirectiveKind, DirectiveSyntax
from htmlincluder.core.errors import CyclicIncludeError, EvaluationError, MissingFragmentError
from htmlincluder.core.evaluator import (
    DEFAULT_CAPABILITY_NAME,
    CapabilityTable,
    ExpressionEvaluator,
)
from htmlincluder.core.registry import FragmentNaming, FragmentRegistry, normalize_path
from htmlincluder.core.scanner import scan
from htmlincluder.diagnostic.model import ConditionKind, DiagnosticLog, FrozenDiagnosticLog
from htmlincluder.rendering.colored_enum import ColoredStrEnum

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Mapping

    from htmlincluder.config.logging import IncluderLogger
    from htmlincluder.core.directives import Directive, InvalidTag, Span
    from htmlincluder.core.registry import FragmentRecord
    from htmlincluder.core.scanner import ScanResult

    FragmentLoader = Callable[[str], "str | None | Awaitable[str | None]"]

logger: IncluderLogger = get_logger(__name__)

# Each nesting level costs a few interpreter frames; stay well below the recursion limit
MAX_INCLUDE_DEPTH: Final[int] = 100

SINGLE_ACTIONABLE: tuple[DirectiveKind, ...] = (
    DirectiveKind.INSERT,
    DirectiveKind.DATA,
    DirectiveKind.JSON_INSERT,
)


class ResolutionState(ColoredStrEnum):
    """States of the resolution of one page."""

    SCANNING = ("scanning", chalk.blue)
    DISPATCHING = ("dispatching", chalk.blue)
    SUBSTITUTING = ("substituting", chalk.blue)
    STABLE = ("stable", chalk.green)
    ITERATION_EXCEEDED = ("iteration-exceeded", chalk.yellow)


@dataclass(frozen=True, slots=True)
class ResolverSettings:
    """Options of the resolution engine.

    Attributes:
        tag_keyword: Alternate insert keyword (``"include virtual"`` style
            values also set the insert's path attribute).
        file_path_attribute: Attribute naming fragment paths.
        json_path_attribute: Attribute naming data paths.
        expression_attribute: Attribute holding inline expressions.
        capability_name: Name the capability table is bound to in expressions.
        iteration_limit: Maximum number of passes per page (None = unbounded).
        strict_cycles: Fail a page on a cyclic include.
        naming: File-name convention for fragment categories.
        root_dir: Directory that paths with a leading ``/`` resolve against.
        log_passes: Log every pass at INFO instead of TRACE.
        log_paths: Log every resolved fragment path at INFO instead of TRACE.
    """

    tag_keyword: str | None = None
    file_path_attribute: str = "path"
    json_path_attribute: str = "jsonPath"
    expression_attribute: str = "rawJson"
    capability_name: str = DEFAULT_CAPABILITY_NAME
    iteration_limit: int | None = None
    strict_cycles: bool = False
    naming: FragmentNaming = field(default_factory=FragmentNaming)
    root_dir: str = ""
    log_passes: bool = False
    log_paths: bool = False

    def syntax(self) -> DirectiveSyntax:
        """Return the directive syntax described by these settings."""
        return DirectiveSyntax.from_settings(
            tag_keyword=self.tag_keyword,
            file_path_attribute=self.file_path_attribute,
            json_path_attribute=self.json_path_attribute,
            expression_attribute=self.expression_attribute,
        )


@dataclass(frozen=True, slots=True)
class ResolutionResult:
    """Outcome of resolving one page.

    Attributes:
        path: Path of the page.
        content: Resolved (or partially resolved) text.
        state: STABLE or ITERATION_EXCEEDED.
        passes: Number of passes that found directives.
        diagnostics: Every condition recorded while resolving the page.
    """

    path: str
    content: str
    state: ResolutionState
    passes: int
    diagnostics: FrozenDiagnosticLog

    @property
    def is_stable(self) -> bool:
        """Return True if the page reached a directive-free fixed point."""
        return self.state is ResolutionState.STABLE


@dataclass
class _Run:
    """Mutable bookkeeping for the resolution of one page."""

    page: str
    limit: int | None
    log: DiagnosticLog = field(default_factory=DiagnosticLog)
    passes: int = 0
    exceeded: bool = False
    too_deep: bool = False
    state: ResolutionState = ResolutionState.SCANNING
    reported: set[tuple[str, int, int, str]] = field(default_factory=lambda: set())

    @property
    def exhausted(self) -> bool:
        return self.limit is not None and self.passes >= self.limit

    def enter(self, state: ResolutionState) -> None:
        if state is not self.state:
            logger.trace("%s: %s -> %s", self.page, self.state.value, state.value)
        self.state = state


def splice(text: str, substitutions: list[tuple[Span, str]]) -> str:
    """Replace each span of ``text`` with its substitution.

    Spans must not overlap. They are applied right-to-left so that earlier
    offsets stay valid.
    """
    for span, replacement in sorted(substitutions, key=lambda s: s[0].start, reverse=True):
        text = text[: span.start] + replacement + text[span.end :]
    return text


class ResolutionEngine:
    """Resolve pages against a fragment registry, a data tree and a capability table.

    Args:
        registry: Fragment registry of the current build.
        loader: Called with a normalized path when a fragment is not
            registered; returns its text (or None). May be a coroutine function.
        data: JSON-shaped data tree. Never mutated.
        capabilities: Callables visible to inline expressions. Never mutated.
        settings: Engine options.
    """

    def __init__(
        self,
        registry: FragmentRegistry,
        *,
        loader: FragmentLoader | None = None,
        data: Any = None,
        capabilities: Mapping[str, Any] | None = None,
        settings: ResolverSettings | None = None,
    ) -> None:
        self.registry: FragmentRegistry = registry
        self.loader: FragmentLoader | None = loader
        self.data: Any = {} if data is None else data
        self.capabilities: CapabilityTable = (
            capabilities
            if isinstance(capabilities, CapabilityTable)
            else CapabilityTable(capabilities)
        )
        self.settings: ResolverSettings = settings or ResolverSettings()
        self.syntax: DirectiveSyntax = self.settings.syntax()
        self.evaluator = ExpressionEvaluator(self.settings.capability_name)
        self._pass_level: int = logging.INFO if self.settings.log_passes else TRACE_LEVEL
        self._path_level: int = logging.INFO if self.settings.log_paths else TRACE_LEVEL

    async def resolve(self, path: str, content: str | None = None) -> ResolutionResult:
        """Resolve one page.

        Args:
            path: Path of the page; relative references resolve against its directory.
            content: Page text. When None, the page is taken from the registry
                (loading it through the loader on a miss).

        Returns:
            ResolutionResult: The resolved text, final state, pass count and conditions.

        Raises:
            CyclicIncludeError: On a cyclic include when ``strict_cycles`` is set.
            MissingFragmentError: If ``content`` is None and the page cannot be loaded.
        """
        page: str = normalize_path(path)
        run = _Run(page=page, limit=self.settings.iteration_limit)
        if content is None:
            record: FragmentRecord | None = await self._fetch(page, run)
            if record is None:
                raise MissingFragmentError(page)
            content = record.content

        text: str = await self._resolve_text(content, page, self.data, (page,), run)

        state: ResolutionState = ResolutionState.STABLE
        if run.exceeded:
            state = ResolutionState.ITERATION_EXCEEDED
            remaining: int = len(self._actionable(scan(text, self.syntax)))
            bound: str = (
                f"include depth {MAX_INCLUDE_DEPTH}" if run.too_deep else f"limit {run.limit}"
            )
            run.log.record(
                ConditionKind.UNRESOLVED_DIRECTIVE,
                f"{remaining} directive(s) left unresolved after {run.passes} pass(es)"
                f" ({bound})",
                path=page,
            )
        run.enter(state)
        logger.log(self._pass_level, "%s: %s after %d pass(es)", page, state.value, run.passes)
        return ResolutionResult(
            path=page,
            content=text,
            state=state,
            passes=run.passes,
            diagnostics=run.log.freeze(),
        )

    def _actionable(self, result: ScanResult) -> list[Directive]:
        """Return directives that can be dispatched in the current pass."""
        selected: list[Directive] = []
        for directive in result.directives:
            if directive.kind in SINGLE_ACTIONABLE:
                selected.append(directive)
            elif directive.kind is DirectiveKind.WRAP:
                inner: Span = directive.inner_span
                blocked: bool = any(
                    (other.kind in SINGLE_ACTIONABLE or other.kind is DirectiveKind.WRAP)
                    and inner.start <= other.span.start
                    and other.span.end <= inner.end
                    for other in result.directives
                )
                if not blocked:
                    selected.append(directive)
        return selected

    def _report_invalid(self, tags: tuple[InvalidTag, ...], host: str, run: _Run) -> None:
        """Record each malformed tag once per occurrence.

        Repeated inclusions of the same fragment yield the same host and span
        and are reported a single time.
        """
        for tag in tags:
            key: tuple[str, int, int, str] = (host, tag.span.start, tag.span.end, tag.reason)
            if key in run.reported:
                continue
            run.reported.add(key)
            run.log.record(
                ConditionKind.INVALID_DIRECTIVE,
                f"{tag.reason}: {tag.text}",
                path=host,
                span=tag.span.as_tuple(),
            )

    async def _resolve_text(
        self,
        text: str,
        host: str,
        data: Any,
        chain: tuple[str, ...],
        run: _Run,
        *,
        report: bool = True,
    ) -> str:
        """Drive ``text`` to a fixed point (or until the budget runs out).

        Malformed tags are reported from the first scan only: later passes
        see the same tags at shifted offsets, plus tags spliced in from
        fragments that reported them already.
        """
        first: bool = True
        while True:
            run.enter(ResolutionState.SCANNING)
            result: ScanResult = scan(text, self.syntax)
            if first and report:
                self._report_invalid(result.invalid, host, run)
            first = False
            actionable: list[Directive] = self._actionable(result)
            if not actionable:
                return text
            if run.exceeded or run.exhausted:
                run.exceeded = True
                return text
            run.passes += 1
            logger.log(
                self._pass_level,
                "%s: pass %d over %s (%d directive(s))",
                run.page,
                run.passes,
                host,
                len(actionable),
            )

            run.enter(ResolutionState.DISPATCHING)
            substitutions: list[tuple[Span, str]] = []
            for directive in actionable:
                replacement: str = await self._dispatch(directive, text, host, data, chain, run)
                substitutions.append((directive.block_span, replacement))

            run.enter(ResolutionState.SUBSTITUTING)
            text = splice(text, substitutions)

    async def _dispatch(
        self,
        directive: Directive,
        text: str,
        host: str,
        data: Any,
        chain: tuple[str, ...],
        run: _Run,
    ) -> str:
        if directive.kind is DirectiveKind.INSERT:
            return await self._insert(directive, host, data, chain, run)
        if directive.kind is DirectiveKind.WRAP:
            return await self._wrap(directive, text, host, data, chain, run)
        return await self._data(directive, host, data, run)

    def resolve_fragment_path(self, reference: str, host: str) -> str:
        """Resolve a fragment reference found in ``host``.

        A leading ``/`` resolves against the build root, anything else against
        the host's directory.
        """
        if reference.startswith("/"):
            return normalize_path(os.path.join(self.settings.root_dir, reference.lstrip("/")))
        return normalize_path(os.path.join(os.path.dirname(host), reference))

    async def _fetch(
        self,
        path: str,
        run: _Run,
        *,
        host: str | None = None,
        span: tuple[int, int] | None = None,
    ) -> FragmentRecord | None:
        """Look up ``path``, loading and registering it on a miss."""
        try:
            return self.registry.lookup(path)
        except MissingFragmentError:
            pass
        reason: str = "not registered"
        if self.loader is not None:
            reason = "loader returned nothing"
            try:
                loaded: Any = self.loader(path)
                if inspect.isawaitable(loaded):
                    loaded = await loaded
            except (OSError, UnicodeDecodeError) as exc:
                loaded = None
                reason = str(exc)
            if loaded is not None:
                _record, diagnostics = self.registry.register(path, loaded)
                run.log.extend(diagnostics)
        try:
            return self.registry.lookup(path)
        except MissingFragmentError as exc:
            run.log.record(
                ConditionKind.MISSING_FRAGMENT,
                f"{exc.message} ({reason})",
                path=host,
                span=span,
            )
            return None

    def _check_cycle(
        self, target: str, directive: Directive, host: str, chain: tuple[str, ...], run: _Run
    ) -> bool:
        """Return True if including ``target`` must be skipped as a cycle."""
        if target not in chain:
            return False
        if self.settings.strict_cycles:
            raise CyclicIncludeError(
                (*chain, target), path=host, span=directive.span.as_tuple()
            )
        if self.settings.iteration_limit is not None:
            return False
        run.log.record(
            ConditionKind.UNRESOLVED_DIRECTIVE,
            f"cyclic include of {target} skipped: {' -> '.join((*chain, target))}",
            path=host,
            span=directive.span.as_tuple(),
        )
        return True

    def _too_deep(self, target: str, host: str, chain: tuple[str, ...], run: _Run) -> bool:
        """Return True (and end the run) if ``target`` would nest past `MAX_INCLUDE_DEPTH`."""
        if len(chain) < MAX_INCLUDE_DEPTH:
            return False
        if not run.too_deep:
            logger.warning(
                "%s: include depth %d reached in %s at %s",
                run.page,
                MAX_INCLUDE_DEPTH,
                host,
                target,
            )
        run.too_deep = True
        run.exceeded = True
        return True

    async def _scoped_data(self, directive: Directive, host: str, data: Any) -> Any:
        """Return the data scope for an inserted fragment or wrapped layout.

        Raises:
            EvaluationError: If the scope expression fails.
        """
        expression: str | None = directive.get(self.syntax.expression_attribute)
        if expression is not None:
            data = await self.evaluator.evaluate(
                expression, self.capabilities, path=host, span=directive.span.as_tuple()
            )
        json_path: str | None = directive.get(self.syntax.json_path_attribute)
        if json_path is not None:
            data = resolve(data, json_path)
        return data

    async def _insert(
        self,
        directive: Directive,
        host: str,
        data: Any,
        chain: tuple[str, ...],
        run: _Run,
    ) -> str:
        reference: str = self.syntax.fragment_path(directive) or ""
        target: str = self.resolve_fragment_path(reference, host)
        logger.log(self._path_level, "%s: insert %s", host, target)
        if self._check_cycle(target, directive, host, chain, run):
            return ""
        if self._too_deep(target, host, chain, run):
            return directive.text
        record: FragmentRecord | None = await self._fetch(
            target, run, host=host, span=directive.span.as_tuple()
        )
        if record is None:
            return ""
        try:
            scope: Any = await self._scoped_data(directive, host, data)
        except EvaluationError as exc:
            run.log.record(ConditionKind.EVALUATION_ERROR, exc.message, path=host, span=exc.span)
            return ""
        return await self._resolve_text(record.content, record.path, scope, (*chain, target), run)

    async def _wrap(
        self,
        directive: Directive,
        text: str,
        host: str,
        data: Any,
        chain: tuple[str, ...],
        run: _Run,
    ) -> str:
        reference: str = self.syntax.fragment_path(directive) or ""
        target: str = self.resolve_fragment_path(reference, host)
        logger.log(self._path_level, "%s: wrap with %s", host, target)
        if self._check_cycle(target, directive, host, chain, run):
            return ""
        if self._too_deep(target, host, chain, run):
            block: Span = directive.block_span
            return text[block.start : block.end]
        record: FragmentRecord | None = await self._fetch(
            target, run, host=host, span=directive.span.as_tuple()
        )
        if record is None:
            return ""
        try:
            scope: Any = await self._scoped_data(directive, host, data)
        except EvaluationError as exc:
            run.log.record(ConditionKind.EVALUATION_ERROR, exc.message, path=host, span=exc.span)
            return ""

        inner: Span = directive.inner_span
        body: str = text[inner.start : inner.end]
        layout: ScanResult = scan(record.content, self.syntax)
        # The body's malformed tags were reported by the host
        self._report_invalid(layout.invalid, record.path, run)
        middles: list[Directive] = layout.of_kind(DirectiveKind.MIDDLE)
        combined: str = record.content
        if middles:
            combined = splice(combined, [(m.span, body) for m in middles])
        else:
            run.log.record(
                ConditionKind.INVALID_DIRECTIVE,
                f"layout {target} has no 'middle' marker; wrapped body dropped",
                path=host,
                span=directive.block_span.as_tuple(),
            )
        return await self._resolve_text(
            combined, record.path, scope, (*chain, target), run, report=False
        )

    async def _data(self, directive: Directive, host: str, data: Any, run: _Run) -> str:
        default: str | None = directive.get(self.syntax.default_attribute)
        value: Any = data
        expression: str | None = directive.get(self.syntax.expression_attribute)
        if expression is not None:
            try:
                value = await self.evaluator.evaluate(
                    expression, self.capabilities, path=host, span=directive.span.as_tuple()
                )
            except EvaluationError as exc:
                run.log.record(
                    ConditionKind.EVALUATION_ERROR, exc.message, path=host, span=exc.span
                )
                return ""
        json_path: str | None = directive.get(self.syntax.json_path_attribute)
        if json_path is not None:
            value = lookup(value, json_path)
            if value is MISSING and default is not None:
                value = default
        if directive.kind is DirectiveKind.JSON_INSERT:
            return to_json_text(value)
        return stringify(value)


async def resolve_document(
    text: str,
    *,
    path: str = "document.html",
    registry: FragmentRegistry | None = None,
    loader: FragmentLoader | None = None,
    data: Any = None,
    capabilities: Mapping[str, Any] | None = None,
    settings: ResolverSettings | None = None,
) -> ResolutionResult:
    """Resolve a single document with a throwaway registry (unless one is given).

    Args:
        text: Document text.
        path: Path the document is resolved as.
        registry: Registry to use; a fresh one is created when None.
        loader: Fragment loader, see `ResolutionEngine`.
        data: Data tree.
        capabilities: Capability table.
        settings: Engine options.

    Returns:
        ResolutionResult: The resolution outcome.
    """
    settings = settings or ResolverSettings()
    if registry is None:
        registry = FragmentRegistry(settings.naming, settings.syntax())
    engine = ResolutionEngine(
        registry,
        loader=loader,
        data=data,
        capabilities=capabilities,
        settings=settings,
    )
    return await engine.resolve(path, text)
