# topmark:header:start
#
#   project      : HTMLIncluder
#   file         : errors.py
#   file_relpath : src/htmlincluder/core/errors.py
#   license      : MIT
#   copyright    : (c) 2025 HTMLIncluder contributors
#
# topmark:header:end

"""Exceptions raised by the resolution core.

These are plain exceptions and carry no CLI concerns. The engine catches
`MissingFragmentError` and `EvaluationError` per directive and records them as
conditions; `CyclicIncludeError` propagates and fails the page being resolved.
"""

from __future__ import annotations


class IncluderError(Exception):
    """Base class for resolution errors.

    Attributes:
        path: Host document the error was raised for, if known.
        span: ``(start, end)`` offsets of the offending directive in that document.
    """

    def __init__(
        self,
        message: str,
        *,
        path: str | None = None,
        span: tuple[int, int] | None = None,
    ) -> None:
        super().__init__(message)
        self.message: str = message
        self.path: str | None = path
        self.span: tuple[int, int] | None = span

    def __str__(self) -> str:
        if self.path is None:
            return self.message
        if self.span is None:
            return f"{self.path}: {self.message}"
        return f"{self.path}[{self.span[0]}:{self.span[1]}]: {self.message}"


class MissingFragmentError(IncluderError, LookupError):
    """A fragment is neither registered nor loadable."""

    def __init__(
        self,
        fragment: str,
        *,
        path: str | None = None,
        span: tuple[int, int] | None = None,
    ) -> None:
        super().__init__(f"fragment not found: {fragment}", path=path, span=span)
        self.fragment: str = fragment


class EvaluationError(IncluderError):
    """An inline expression failed to parse, validate, run or settle."""

    def __init__(
        self,
        reason: str,
        *,
        path: str | None = None,
        span: tuple[int, int] | None = None,
    ) -> None:
        super().__init__(f"expression failed: {reason}", path=path, span=span)
        self.reason: str = reason


class CyclicIncludeError(IncluderError):
    """A fragment (directly or transitively) includes itself.

    Only raised when strict cycle detection is enabled.
    """

    def __init__(
        self,
        chain: tuple[str, ...],
        *,
        path: str | None = None,
        span: tuple[int, int] | None = None,
    ) -> None:
        super().__init__(f"cyclic include: {' -> '.join(chain)}", path=path, span=span)
        self.chain: tuple[str, ...] = chain
