# topmark:header:start
#
#   project      : HTMLIncluder
#   file         : model.py
#   file_relpath : src/htmlincluder/diagnostic/model.py
#   license      : MIT
#   copyright    : (c) 2025 HTMLIncluder contributors
#
# topmark:header:end

"""Core diagnostic types and helpers for HTMLIncluder.

Resolution never aborts a build over a single broken directive. Instead, every
non-fatal condition met while resolving a document is recorded as a
`Diagnostic` and surfaced to the caller for reporting.

Sections:
    * DiagnosticLevel: severity levels with associated terminal colors.
    * ConditionKind: the resolution condition taxonomy (invalid directive,
      missing fragment, unresolved directive, evaluation error).
    * Diagnostic: immutable structured diagnostic payload.
    * DiagnosticStats: aggregated per-level counts.
    * DiagnosticLog: mutable per-document collection with helpers for
      adding and summarizing diagnostics.
    * FrozenDiagnosticLog: immutable snapshot container for results.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, cast

from yachalk import chalk

from htmlincluder.config.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator

    from htmlincluder.config.logging import IncluderLogger


logger: IncluderLogger = get_logger(__name__)


class DiagnosticLevel(Enum):
    """Severity levels for diagnostics collected during processing.

    Levels map to terminal colors and are ordered by importance: ERROR > WARNING > INFO.
    """

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"

    @property
    def color(self) -> Callable[[str], str]:
        """Return the `yachalk` color function associated with this severity level.

        Intended for human-readable output only; machine formats should not use colors.

        Returns:
            Callable[[str], str]: The `yachalk` color function associated with this severity level.
        """
        return cast(
            "Callable[[str], str]",
            {
                DiagnosticLevel.INFO: chalk.blue,
                DiagnosticLevel.WARNING: chalk.yellow,
                DiagnosticLevel.ERROR: chalk.red_bright,
            }[self],
        )


class ConditionKind(Enum):
    """Non-fatal conditions raised while resolving a document.

    Attributes:
        INVALID_DIRECTIVE: Malformed tag, missing attribute or mismatched pair.
            The directive is skipped.
        MISSING_FRAGMENT: An insert or wrap target could not be loaded. The
            directive is replaced by empty text.
        UNRESOLVED_DIRECTIVE: Directives remained when resolution stopped
            (iteration cap reached or cycle truncated).
        EVALUATION_ERROR: An inline expression failed to parse, run or settle.
            The directive is replaced by empty text.
        CYCLIC_INCLUDE: A cyclic include was detected in strict mode; the
            document failed.
        OTHER: Anything not covered above (configuration, I/O).
    """

    INVALID_DIRECTIVE = "invalid-directive"
    MISSING_FRAGMENT = "missing-fragment"
    UNRESOLVED_DIRECTIVE = "unresolved-directive"
    EVALUATION_ERROR = "evaluation-error"
    CYCLIC_INCLUDE = "cyclic-include"
    OTHER = "other"

    @property
    def default_level(self) -> DiagnosticLevel:
        """Return the severity a condition of this kind is recorded with."""
        if self in (
            ConditionKind.MISSING_FRAGMENT,
            ConditionKind.EVALUATION_ERROR,
            ConditionKind.CYCLIC_INCLUDE,
        ):
            return DiagnosticLevel.ERROR
        if self is ConditionKind.OTHER:
            return DiagnosticLevel.INFO
        return DiagnosticLevel.WARNING


@dataclass(frozen=True)
class Diagnostic:
    """Structured diagnostic with a severity level and message.

    Attributes:
        level: Severity of the diagnostic.
        message: Human-readable message.
        kind: Condition category.
        path: Document (or fragment) the condition was raised in, if known.
        span: ``(start, end)`` offsets of the offending text in that document.
    """

    level: DiagnosticLevel
    message: str
    kind: ConditionKind = ConditionKind.OTHER
    path: str | None = None
    span: tuple[int, int] | None = None

    def render(self) -> str:
        """Return a one-line, uncolored rendering (``path[start:end]: kind: message``)."""
        where: str = self.path or "<unknown>"
        if self.span is not None:
            where = f"{where}[{self.span[0]}:{self.span[1]}]"
        return f"{where}: {self.kind.value}: {self.message}"


@dataclass(frozen=True)
class DiagnosticStats:
    """Aggregated counts for diagnostics by severity level."""

    n_info: int
    n_warning: int
    n_error: int

    @property
    def total(self) -> int:
        """Return the total count of diagnostics."""
        return self.n_info + self.n_warning + self.n_error


@dataclass
class DiagnosticLog:
    """Mutable, per-document collection of diagnostics.

    This wrapper keeps track of all diagnostics emitted while resolving a
    single document. It provides helpers for recording conditions and exposes
    simple aggregation helpers (`stats`, `to_dict`) for reporting.
    """

    items: list[Diagnostic] = field(default_factory=lambda: [])

    @classmethod
    def from_iterable(cls, diagnostics: Iterable[Diagnostic]) -> DiagnosticLog:
        """Create a DiagnosticLog from an iterable of diagnostics.

        Args:
            diagnostics: Existing diagnostics (e.g., from a frozen snapshot).

        Returns:
            A new DiagnosticLog containing the provided diagnostics.
        """
        return cls(items=list(diagnostics))

    def freeze(self) -> FrozenDiagnosticLog:
        """Return an immutable snapshot of this log's diagnostics."""
        return FrozenDiagnosticLog(items=tuple(self.items))

    def add(self, diagnostic: Diagnostic) -> None:
        """Append a diagnostic to the log.

        Args:
            diagnostic: The diagnostic object.
        """
        self.items.append(diagnostic)
        logger.trace("Adding [%s]: %r", diagnostic.level.value, diagnostic.message)

    def record(
        self,
        kind: ConditionKind,
        message: str,
        *,
        path: str | None = None,
        span: tuple[int, int] | None = None,
        level: DiagnosticLevel | None = None,
    ) -> Diagnostic:
        """Record a resolution condition at the severity implied by its kind.

        Args:
            kind: The condition category.
            message: The diagnostic message.
            path: Document the condition belongs to.
            span: Offending ``(start, end)`` offsets in that document.
            level: Severity overriding the kind's default.

        Returns:
            The recorded diagnostic.
        """
        diagnostic = Diagnostic(
            level or kind.default_level, message, kind=kind, path=path, span=span
        )
        self.add(diagnostic)
        return diagnostic

    def extend(self, diagnostics: Iterable[Diagnostic]) -> None:
        """Append several diagnostics, preserving their order."""
        for d in diagnostics:
            self.add(d)

    def add_info(self, message: str) -> None:
        """Add an ``info`` diagnostic to the diagnostic log."""
        self.add(Diagnostic(DiagnosticLevel.INFO, message))

    def add_warning(self, message: str) -> None:
        """Add a ``warning`` diagnostic to the diagnostic log."""
        self.add(Diagnostic(DiagnosticLevel.WARNING, message))

    def add_error(self, message: str) -> None:
        """Add an ``error`` diagnostic to the diagnostic log."""
        self.add(Diagnostic(DiagnosticLevel.ERROR, message))

    def of_kind(self, kind: ConditionKind) -> list[Diagnostic]:
        """Return the diagnostics recorded for ``kind``, in insertion order."""
        return [d for d in self.items if d.kind is kind]

    def stats(self) -> DiagnosticStats:
        """Return per-level counts for diagnostics in this log."""
        return compute_diagnostic_stats(self.items)

    def has_warning(self) -> bool:
        """Return True if the DiagnosticLog contains warning diagnostics."""
        return any(d.level == DiagnosticLevel.WARNING for d in self.items)

    def has_error(self) -> bool:
        """Return True if the DiagnosticLog contains error diagnostics."""
        return any(d.level == DiagnosticLevel.ERROR for d in self.items)

    def to_dict(self) -> dict[str, int]:
        """Return a JSON-friendly mapping of counts by severity."""
        return diagnostics_counts_to_dict(self.items)

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)


@dataclass(frozen=True, slots=True)
class FrozenDiagnosticLog:
    """Immutable diagnostic container.

    `FrozenDiagnosticLog` is the immutable counterpart to `DiagnosticLog`. It is
    stored on resolution results where mutation is not permitted.
    """

    items: tuple[Diagnostic, ...] = ()

    def __iter__(self) -> Iterator[Diagnostic]:
        """Iterate over contained diagnostics in insertion order."""
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def of_kind(self, kind: ConditionKind) -> list[Diagnostic]:
        """Return the diagnostics recorded for ``kind``, in insertion order."""
        return [d for d in self.items if d.kind is kind]

    def has_error(self) -> bool:
        """Return True if the log contains error diagnostics."""
        return any(d.level == DiagnosticLevel.ERROR for d in self.items)

    def stats(self) -> DiagnosticStats:
        """Return aggregated per-level counts for the contained diagnostics."""
        return compute_diagnostic_stats(self.items)

    def to_dict(self) -> dict[str, int]:
        """Return a JSON-friendly mapping of counts by severity."""
        return diagnostics_counts_to_dict(self.items)


def compute_diagnostic_stats(diagnostics: Iterable[Diagnostic]) -> DiagnosticStats:
    """Return per-level counts for a sequence of diagnostics.

    Args:
        diagnostics: the diagnostic log.

    Returns:
        Per-level counts for diagnostics in this log.
    """
    items: list[Diagnostic] = list(diagnostics)
    n_info: int = sum(1 for d in items if d.level == DiagnosticLevel.INFO)
    n_warn: int = sum(1 for d in items if d.level == DiagnosticLevel.WARNING)
    n_err: int = sum(1 for d in items if d.level == DiagnosticLevel.ERROR)
    return DiagnosticStats(n_info=n_info, n_warning=n_warn, n_error=n_err)


def diagnostics_counts_to_dict(diagnostics: Iterable[Diagnostic]) -> dict[str, int]:
    """Return a JSON-friendly mapping of counts by severity for any iterable."""
    stats: DiagnosticStats = compute_diagnostic_stats(diagnostics)
    return {
        "info": stats.n_info,
        "warning": stats.n_warning,
        "error": stats.n_error,
    }
