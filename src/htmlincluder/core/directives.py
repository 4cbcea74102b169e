# topmark:header:start
#
#   project      : HTMLIncluder
#   file         : directives.py
#   file_relpath : src/htmlincluder/core/directives.py
#   license      : MIT
#   copyright    : (c) 2025 HTMLIncluder contributors
#
# topmark:header:end

"""Directive model.

A directive is a comment tag of the form ``<!--#keyword name="value" ... -->``.
This module defines what a parsed directive looks like (`Directive`), which
kinds exist (`DirectiveKind`), how malformed tags are reported (`InvalidTag`)
and which keywords and attribute names are recognized (`DirectiveSyntax`).

Paired kinds (``wrap``/``endwrap`` and ``clipbetween``/``endclipbetween``)
are linked opener to closer through `Directive.closing`.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from collections.abc import Mapping

# Keyword of the include form accepted for SSI compatibility
COMPAT_INCLUDE_KEYWORD: Final[str] = "include"
# Attributes carrying the fragment path in the compatibility include form
COMPAT_INCLUDE_ATTRIBUTES: Final[tuple[str, ...]] = ("virtual", "file")


class DirectiveKind(Enum):
    """Recognized directive kinds."""

    INSERT = "insert"
    WRAP = "wrap"
    END_WRAP = "endwrap"
    DATA = "data"
    JSON_INSERT = "jsoninsert"
    CLIP_BEFORE = "clipbefore"
    CLIP_AFTER = "clipafter"
    CLIP_BETWEEN = "clipbetween"
    END_CLIP_BETWEEN = "endclipbetween"
    MIDDLE = "middle"

    @property
    def is_opener(self) -> bool:
        """Return True for the opening tag of a paired directive."""
        return self in (DirectiveKind.WRAP, DirectiveKind.CLIP_BETWEEN)

    @property
    def is_closer(self) -> bool:
        """Return True for the closing tag of a paired directive."""
        return self in (DirectiveKind.END_WRAP, DirectiveKind.END_CLIP_BETWEEN)

    @property
    def opener(self) -> DirectiveKind | None:
        """Return the opener kind a closer matches, or None for non-closers."""
        if self is DirectiveKind.END_WRAP:
            return DirectiveKind.WRAP
        if self is DirectiveKind.END_CLIP_BETWEEN:
            return DirectiveKind.CLIP_BETWEEN
        return None


@dataclass(frozen=True, slots=True)
class Span:
    """Half-open ``[start, end)`` offsets into a host text."""

    start: int
    end: int

    def as_tuple(self) -> tuple[int, int]:
        """Return the span as a ``(start, end)`` tuple."""
        return (self.start, self.end)

    def __len__(self) -> int:
        return self.end - self.start


@dataclass(frozen=True, slots=True)
class Directive:
    """A parsed directive occurrence.

    Attributes:
        kind: The directive kind.
        attributes: Attribute name to literal value, in source order.
        span: Offsets of the tag itself in the host text.
        text: The literal tag text.
        closing: For paired openers, the matched closing directive.
    """

    kind: DirectiveKind
    attributes: Mapping[str, str]
    span: Span
    text: str
    closing: Directive | None = None

    @property
    def block_span(self) -> Span:
        """Span covering the opener, the body and the closer (the tag span otherwise)."""
        if self.closing is None:
            return self.span
        return Span(self.span.start, self.closing.span.end)

    @property
    def inner_span(self) -> Span:
        """Span of the body between opener and closer (empty for single tags)."""
        if self.closing is None:
            return Span(self.span.end, self.span.end)
        return Span(self.span.end, self.closing.span.start)

    def get(self, name: str) -> str | None:
        """Return the value of attribute ``name`` or None."""
        return self.attributes.get(name)


@dataclass(frozen=True, slots=True)
class InvalidTag:
    """A tag that looked like a directive but could not be used.

    Attributes:
        span: Offsets of the tag in the host text.
        text: The literal tag text.
        reason: Why the tag was rejected.
        kind: The directive kind the tag was recognized as.
    """

    span: Span
    text: str
    reason: str
    kind: DirectiveKind | None = None


@dataclass(frozen=True, slots=True)
class DirectiveSyntax:
    """Keywords and attribute names recognized by the scanner and the engine.

    Attributes:
        insert_keyword: Keyword of the insert directive (lower case).
        insert_path_attribute: Attribute carrying the insert's fragment path.
        file_path_attribute: Attribute carrying the wrap's layout path.
        json_path_attribute: Attribute carrying a dotted data path.
        expression_attribute: Attribute carrying an inline expression.
        default_attribute: Attribute carrying the fallback for missing data.
    """

    insert_keyword: str = "insert"
    insert_path_attribute: str = "path"
    file_path_attribute: str = "path"
    json_path_attribute: str = "jsonPath"
    expression_attribute: str = "rawJson"
    default_attribute: str = "default"

    @classmethod
    def from_settings(
        cls,
        *,
        tag_keyword: str | None = None,
        file_path_attribute: str = "path",
        json_path_attribute: str = "jsonPath",
        expression_attribute: str = "rawJson",
    ) -> DirectiveSyntax:
        """Build a syntax from user-facing settings.

        A ``tag_keyword`` of the form ``"<keyword> <attribute>"`` (for instance
        ``"include virtual"``) sets both the insert keyword and the attribute
        carrying the insert's path.

        Args:
            tag_keyword: Alternate insert keyword, optionally with its path attribute.
            file_path_attribute: Attribute name for fragment paths.
            json_path_attribute: Attribute name for data paths.
            expression_attribute: Attribute name for inline expressions.

        Returns:
            DirectiveSyntax: The resulting syntax.
        """
        keyword: str = "insert"
        insert_attr: str = file_path_attribute
        if tag_keyword and tag_keyword.strip():
            parts: list[str] = tag_keyword.split()
            keyword = parts[0]
            if len(parts) > 1:
                insert_attr = parts[1]
        return cls(
            insert_keyword=keyword.lower(),
            insert_path_attribute=insert_attr,
            file_path_attribute=file_path_attribute,
            json_path_attribute=json_path_attribute,
            expression_attribute=expression_attribute,
        )

    def keyword_kind(self, keyword: str) -> DirectiveKind | None:
        """Map a tag keyword to its directive kind, or None when not a directive.

        Matching is case-insensitive. The compatibility ``include`` keyword
        always maps to `DirectiveKind.INSERT`.
        """
        word: str = keyword.lower()
        if word == self.insert_keyword or word == COMPAT_INCLUDE_KEYWORD:
            return DirectiveKind.INSERT
        try:
            kind = DirectiveKind(word)
        except ValueError:
            return None
        if kind is DirectiveKind.INSERT:
            # "insert" is only a keyword when it is the configured one
            return None
        return kind

    def fragment_path(self, directive: Directive) -> str | None:
        """Return the fragment path named by an INSERT or WRAP directive."""
        if directive.kind is DirectiveKind.WRAP:
            return directive.get(self.file_path_attribute)
        if directive.kind is not DirectiveKind.INSERT:
            return None
        value: str | None = directive.get(self.insert_path_attribute)
        if value is None:
            value = directive.get(self.file_path_attribute)
        if value is None:
            for name in COMPAT_INCLUDE_ATTRIBUTES:
                value = directive.get(name)
                if value is not None:
                    break
        return value

    def missing_attribute(self, kind: DirectiveKind, attributes: Mapping[str, str]) -> str | None:
        """Return a reason when a required attribute is missing, else None."""
        if kind is DirectiveKind.INSERT:
            names: tuple[str, ...] = (
                self.insert_path_attribute,
                self.file_path_attribute,
                *COMPAT_INCLUDE_ATTRIBUTES,
            )
            if not any(n in attributes for n in names):
                return f"missing required attribute '{self.insert_path_attribute}'"
        elif kind is DirectiveKind.WRAP:
            if self.file_path_attribute not in attributes:
                return f"missing required attribute '{self.file_path_attribute}'"
        elif kind in (DirectiveKind.DATA, DirectiveKind.JSON_INSERT):
            if (
                self.json_path_attribute not in attributes
                and self.expression_attribute not in attributes
            ):
                return (
                    f"missing required attribute '{self.json_path_attribute}'"
                    f" or '{self.expression_attribute}'"
                )
        return None
