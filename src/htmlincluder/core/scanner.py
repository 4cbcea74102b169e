# topmark:header:start
#
#   project      : HTMLIncluder
#   file         : scanner.py
#   file_relpath : src/htmlincluder/core/scanner.py
#   license      : MIT
#   copyright    : (c) 2025 HTMLIncluder contributors
#
# topmark:header:end

"""Directive scanner.

Tokenizes directive tags out of raw text. A tag is ``<!--#`` followed by a
keyword, zero or more ``name="value"`` (or ``name='value'``) attribute pairs,
optional whitespace and ``-->``. Tags whose keyword is not a directive (other
SSI commands such as ``echo``) are left alone and not reported.

Paired directives are matched with a stack per kind: each closer is bound to
the nearest unmatched opener, so nested pairs of the same kind match
innermost-first. Malformed tags are reported as `InvalidTag` entries and
skipped; scanning never stops at the first problem.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import TYPE_CHECKING, Final

from htmlincluder.config.logging import get_logger
from htmlincluder.core.directives import (
    Directive,
    DirectiveKind,
    DirectiveSyntax,
    InvalidTag,
    Span,
)

if TYPE_CHECKING:
    from htmlincluder.config.logging import IncluderLogger

logger: IncluderLogger = get_logger(__name__)

# Candidate tag: keyword plus everything up to the first comment close
TAG_RE: Final[re.Pattern[str]] = re.compile(r"<!--#([A-Za-z][\w-]*)(.*?)-->", re.DOTALL)

# One attribute pair, double or single quoted
ATTRIBUTE_RE: Final[re.Pattern[str]] = re.compile(
    r"""\s*([A-Za-z_][\w:.-]*)\s*=\s*(?:"([^"]*)"|'([^']*)')"""
)

DEFAULT_SYNTAX: Final[DirectiveSyntax] = DirectiveSyntax()


@dataclass(frozen=True, slots=True)
class ScanResult:
    """Outcome of one scan.

    Attributes:
        directives: Usable directives, ordered by start offset.
        invalid: Rejected tags, ordered by start offset.
    """

    directives: tuple[Directive, ...] = ()
    invalid: tuple[InvalidTag, ...] = ()

    def of_kind(self, *kinds: DirectiveKind) -> list[Directive]:
        """Return the directives of the given kinds, in source order."""
        return [d for d in self.directives if d.kind in kinds]


def parse_attributes(source: str) -> dict[str, str] | None:
    """Parse the attribute section of a tag.

    Args:
        source: The text between the keyword and the closing ``-->``.

    Returns:
        dict[str, str] | None: Attributes in source order, or None when the text
        holds anything besides well-formed attribute pairs and whitespace.
    """
    attributes: dict[str, str] = {}
    pos: int = 0
    while True:
        m: re.Match[str] | None = ATTRIBUTE_RE.match(source, pos)
        if m is None:
            break
        value: str = m.group(2) if m.group(2) is not None else m.group(3)
        attributes[m.group(1)] = value
        pos = m.end()
    if source[pos:].strip():
        return None
    return attributes


def scan(text: str, syntax: DirectiveSyntax = DEFAULT_SYNTAX) -> ScanResult:
    """Scan ``text`` for directives.

    Args:
        text: The host text.
        syntax: Recognized keywords and attribute names.

    Returns:
        ScanResult: Directives with exact spans plus rejected tags.
    """
    # (kind, attributes, span, text, usable) for every recognized tag
    tags: list[tuple[DirectiveKind, dict[str, str], Span, str, bool]] = []
    invalid: list[InvalidTag] = []

    for m in TAG_RE.finditer(text):
        kind: DirectiveKind | None = syntax.keyword_kind(m.group(1))
        if kind is None:
            continue
        span = Span(m.start(), m.end())
        attributes: dict[str, str] | None = parse_attributes(m.group(2))
        if attributes is None:
            invalid.append(InvalidTag(span, m.group(0), "unparseable attributes", kind))
            # keep openers on the pairing stack so their closer is not reported twice
            if kind.is_opener:
                tags.append((kind, {}, span, m.group(0), False))
            continue
        reason: str | None = syntax.missing_attribute(kind, attributes)
        if reason is not None:
            invalid.append(InvalidTag(span, m.group(0), reason, kind))
            if kind.is_opener:
                tags.append((kind, attributes, span, m.group(0), False))
            continue
        tags.append((kind, attributes, span, m.group(0), True))

    closer_of: dict[int, int] = {}
    dropped: set[int] = set()
    stacks: dict[DirectiveKind, list[int]] = {
        DirectiveKind.WRAP: [],
        DirectiveKind.CLIP_BETWEEN: [],
    }
    for index, (kind, _attrs, span, tag_text, usable) in enumerate(tags):
        if kind.is_opener:
            stacks[kind].append(index)
            continue
        opener_kind: DirectiveKind | None = kind.opener
        if opener_kind is None:
            continue
        stack: list[int] = stacks[opener_kind]
        if not stack:
            invalid.append(
                InvalidTag(span, tag_text, f"'{kind.value}' without opening tag", kind)
            )
            dropped.add(index)
            continue
        opener_index: int = stack.pop()
        if not tags[opener_index][4]:
            # closer of an already reported opener
            dropped.add(index)
            continue
        closer_of[opener_index] = index
    for stack in stacks.values():
        for opener_index in stack:
            kind, _attrs, span, tag_text, usable = tags[opener_index]
            if usable:
                invalid.append(
                    InvalidTag(span, tag_text, f"'{kind.value}' without closing tag", kind)
                )
            dropped.add(opener_index)

    built: dict[int, Directive] = {}
    for index, (kind, attrs, span, tag_text, usable) in enumerate(tags):
        if not usable or index in dropped:
            continue
        built[index] = Directive(kind, MappingProxyType(attrs), span, tag_text)
    for opener_index, closer_index in closer_of.items():
        if opener_index in built and closer_index in built:
            built[opener_index] = replace(built[opener_index], closing=built[closer_index])

    directives: tuple[Directive, ...] = tuple(built[i] for i in sorted(built))
    invalid.sort(key=lambda t: t.span.start)
    logger.trace("Scanned %d directive(s), %d invalid tag(s)", len(directives), len(invalid))
    return ScanResult(directives=directives, invalid=tuple(invalid))
