# topmark:header:start
#
#   project      : HTMLIncluder
#   file         : __init__.py
#   file_relpath : src/htmlincluder/diagnostic/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 HTMLIncluder contributors
#
# topmark:header:end

"""Diagnostic primitives and helpers.

This package provides strongly-typed diagnostic objects used throughout
HTMLIncluder to report resolution conditions in a consistent way.

Design:
    - Conditions are represented by immutable `Diagnostic` instances tagged
      with a `ConditionKind`.
    - During resolution, diagnostics are accumulated in a mutable `DiagnosticLog`.
    - Resolution results store diagnostics as an immutable `FrozenDiagnosticLog`.
"""

from __future__ import annotations

from htmlincluder.diagnostic.model import (
    ConditionKind,
    Diagnostic,
    DiagnosticLevel,
    DiagnosticLog,
    DiagnosticStats,
    FrozenDiagnosticLog,
    compute_diagnostic_stats,
    diagnostics_counts_to_dict,
)

__all__ = [
    "ConditionKind",
    "Diagnostic",
    "DiagnosticLevel",
    "DiagnosticLog",
    "DiagnosticStats",
    "FrozenDiagnosticLog",
    "compute_diagnostic_stats",
    "diagnostics_counts_to_dict",
]
