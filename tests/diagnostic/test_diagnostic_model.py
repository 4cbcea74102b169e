# topmark:header:start
#
#   project      : HTMLIncluder
#   file         : test_diagnostic_model.py
#   file_relpath : tests/diagnostic/test_diagnostic_model.py
#   license      : MIT
#   copyright    : (c) 2025 HTMLIncluder contributors
#
# topmark:header:end

"""Tests for diagnostics, condition kinds and diagnostic logs."""

from __future__ import annotations

from htmlincluder.diagnostic.model import (
    ConditionKind,
    Diagnostic,
    DiagnosticLevel,
    DiagnosticLog,
)
from tests.conftest import parametrize


@parametrize(
    "kind, level",
    [
        (ConditionKind.INVALID_DIRECTIVE, DiagnosticLevel.WARNING),
        (ConditionKind.UNRESOLVED_DIRECTIVE, DiagnosticLevel.WARNING),
        (ConditionKind.MISSING_FRAGMENT, DiagnosticLevel.ERROR),
        (ConditionKind.EVALUATION_ERROR, DiagnosticLevel.ERROR),
        (ConditionKind.CYCLIC_INCLUDE, DiagnosticLevel.ERROR),
        (ConditionKind.OTHER, DiagnosticLevel.INFO),
    ],
)
def test_record_uses_the_default_level(kind: ConditionKind, level: DiagnosticLevel) -> None:
    """Each condition kind is recorded at its default severity."""
    log = DiagnosticLog()

    recorded = log.record(kind, "m", path="p.html", span=(1, 2))

    assert recorded.level is level
    assert log.of_kind(kind) == [recorded]


def test_render() -> None:
    """Rendering includes path, span, kind and message."""
    d = Diagnostic(
        DiagnosticLevel.ERROR,
        "fragment not found: -x.html",
        kind=ConditionKind.MISSING_FRAGMENT,
        path="index.html",
        span=(3, 30),
    )

    assert d.render() == "index.html[3:30]: missing-fragment: fragment not found: -x.html"
    assert Diagnostic(DiagnosticLevel.INFO, "hi").render() == "<unknown>: other: hi"


def test_log_counts_and_freeze() -> None:
    """Counts per level survive freezing; frozen logs are tuples."""
    log = DiagnosticLog()
    log.add_info("i")
    log.add_warning("w")
    log.add_error("e")
    frozen = log.freeze()

    assert log.to_dict() == {"info": 1, "warning": 1, "error": 1}
    assert frozen.to_dict() == log.to_dict()
    assert frozen.has_error() and log.has_warning()
    assert isinstance(frozen.items, tuple)
    assert [d.message for d in frozen] == ["i", "w", "e"]


def test_from_iterable_copies() -> None:
    """A log built from another one does not share its storage."""
    first = DiagnosticLog()
    first.add_info("a")
    second = DiagnosticLog.from_iterable(first)
    second.add_info("b")

    assert len(first) == 1
    assert len(second) == 2
