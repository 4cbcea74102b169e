# topmark:header:start
#
#   project      : HTMLIncluder
#   file         : registry.py
#   file_relpath : src/htmlincluder/core/registry.py
#   license      : MIT
#   copyright    : (c) 2025 HTMLIncluder contributors
#
# topmark:header:end

"""Fragment registry.

A `FragmentRegistry` stores every fragment known to one build, keyed by
normalized path and partitioned by `FragmentCategory`. The category is derived
once from the file name through `FragmentNaming`; clipping is applied once, at
registration, so every consumer only ever sees the clipped form.

A registry belongs to exactly one build. Builds create their own instance and
never share it; `reset()` clears every partition.
"""

from __future__ import annotations

import os
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from htmlincluder.config.logging import get_logger
from htmlincluder.core.clip import apply_clips
from htmlincluder.core.errors import MissingFragmentError
from htmlincluder.core.scanner import DEFAULT_SYNTAX
from htmlincluder.diagnostic.model import ConditionKind, Diagnostic, DiagnosticLevel

if TYPE_CHECKING:
    from collections.abc import Iterator

    from htmlincluder.config.logging import IncluderLogger
    from htmlincluder.core.clip import ClipResult
    from htmlincluder.core.directives import DirectiveSyntax

logger: IncluderLogger = get_logger(__name__)


class FragmentCategory(Enum):
    """Role of a fragment in a build."""

    PAGE = "page"
    INSERT = "insert"
    WRAP = "wrap"


@dataclass(frozen=True, slots=True)
class FragmentNaming:
    """File-name convention used to classify fragments.

    Attributes:
        insert_prefix: Names starting with this prefix are insert fragments.
        wrap_prefix: Names starting with this prefix are wrap layouts.
    """

    insert_prefix: str = "-"
    wrap_prefix: str = "_"

    def classify(self, path: str) -> FragmentCategory:
        """Return the category of the fragment stored at ``path``."""
        name: str = os.path.basename(path)
        if self.insert_prefix and name.startswith(self.insert_prefix):
            return FragmentCategory.INSERT
        if self.wrap_prefix and name.startswith(self.wrap_prefix):
            return FragmentCategory.WRAP
        return FragmentCategory.PAGE

    def is_dependency(self, path: str) -> bool:
        """Return True for insert fragments and wrap layouts."""
        return self.classify(path) is not FragmentCategory.PAGE


@dataclass(frozen=True, slots=True)
class FragmentRecord:
    """A registered fragment.

    Attributes:
        path: Normalized path the fragment is registered under.
        category: Category derived from the file name.
        content: Clip-processed content.
        loaded_at: Registration time (seconds since the epoch).
    """

    path: str
    category: FragmentCategory
    content: str
    loaded_at: float = field(default_factory=time.time)


def normalize_path(path: str) -> str:
    """Return the registry key for ``path``."""
    return os.path.normpath(path)


class FragmentRegistry:
    """Per-build store of fragments, partitioned by category."""

    def __init__(
        self,
        naming: FragmentNaming | None = None,
        syntax: DirectiveSyntax = DEFAULT_SYNTAX,
    ) -> None:
        self.naming: FragmentNaming = naming or FragmentNaming()
        self.syntax: DirectiveSyntax = syntax
        self._partitions: dict[FragmentCategory, dict[str, FragmentRecord]] = {
            category: {} for category in FragmentCategory
        }

    def register(self, path: str, content: str) -> tuple[FragmentRecord, list[Diagnostic]]:
        """Classify, clip and store a fragment, replacing any previous record.

        Insert and wrap fragments are stored with surrounding whitespace
        stripped so that they splice cleanly into their hosts.

        Args:
            path: Path of the fragment.
            content: Raw fragment text.

        Returns:
            tuple[FragmentRecord, list[Diagnostic]]: The stored record and one
            INVALID_DIRECTIVE diagnostic per malformed clip marker.
        """
        key: str = normalize_path(path)
        category: FragmentCategory = self.naming.classify(key)
        clipped: ClipResult = apply_clips(content, self.syntax)
        text: str = clipped.content
        if category is not FragmentCategory.PAGE:
            text = text.strip()
        diagnostics: list[Diagnostic] = [
            Diagnostic(
                DiagnosticLevel.WARNING,
                f"{tag.reason}: {tag.text}",
                kind=ConditionKind.INVALID_DIRECTIVE,
                path=key,
                span=tag.span.as_tuple(),
            )
            for tag in clipped.invalid
        ]
        record = FragmentRecord(path=key, category=category, content=text)
        for partition in self._partitions.values():
            partition.pop(key, None)
        self._partitions[category][key] = record
        logger.debug("Registered %s fragment %s", category.value, key)
        return record, diagnostics

    def get(self, path: str) -> FragmentRecord | None:
        """Return the record for ``path`` or None."""
        key: str = normalize_path(path)
        for partition in self._partitions.values():
            record: FragmentRecord | None = partition.get(key)
            if record is not None:
                return record
        return None

    def lookup(self, path: str) -> FragmentRecord:
        """Return the record for ``path``.

        Raises:
            MissingFragmentError: If no fragment is registered under ``path``.
        """
        record: FragmentRecord | None = self.get(path)
        if record is None:
            raise MissingFragmentError(normalize_path(path))
        return record

    def reset(self) -> None:
        """Forget every registered fragment."""
        for partition in self._partitions.values():
            partition.clear()
        logger.debug("Registry reset")

    def pages(self) -> list[FragmentRecord]:
        """Return page records in registration order."""
        return list(self._partitions[FragmentCategory.PAGE].values())

    def inserts(self) -> list[FragmentRecord]:
        """Return insert fragment records in registration order."""
        return list(self._partitions[FragmentCategory.INSERT].values())

    def wraps(self) -> list[FragmentRecord]:
        """Return wrap layout records in registration order."""
        return list(self._partitions[FragmentCategory.WRAP].values())

    def __contains__(self, path: object) -> bool:
        return isinstance(path, str) and self.get(path) is not None

    def __len__(self) -> int:
        return sum(len(p) for p in self._partitions.values())

    def __iter__(self) -> Iterator[FragmentRecord]:
        for partition in self._partitions.values():
            yield from partition.values()
