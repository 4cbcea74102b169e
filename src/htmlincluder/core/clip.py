# topmark:header:start
#
#   project      : HTMLIncluder
#   file         : clip.py
#   file_relpath : src/htmlincluder/core/clip.py
#   license      : MIT
#   copyright    : (c) 2025 HTMLIncluder contributors
#
# topmark:header:end

"""Registration-time clipping of fragment content.

Two clip forms let a fragment file carry standalone preview scaffolding that
is dropped when the fragment is reused:

* Bracketing: only the interior of the first ``clipbefore`` ... ``clipafter``
  span is kept.
* Excision: every top-level ``clipbetween`` ... ``endclipbetween`` block is
  removed, markers included.

Bracketing is applied first, excision then runs on what remains. A malformed
form (opener without closer or closer without opener) leaves the content
unclipped for that form and is reported.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from htmlincluder.config.logging import get_logger
from htmlincluder.core.directives import DirectiveKind, InvalidTag
from htmlincluder.core.scanner import DEFAULT_SYNTAX, scan

if TYPE_CHECKING:
    from htmlincluder.config.logging import IncluderLogger
    from htmlincluder.core.directives import Directive, DirectiveSyntax
    from htmlincluder.core.scanner import ScanResult

logger: IncluderLogger = get_logger(__name__)

EXCISION_KINDS: tuple[DirectiveKind, ...] = (
    DirectiveKind.CLIP_BETWEEN,
    DirectiveKind.END_CLIP_BETWEEN,
)


@dataclass(frozen=True, slots=True)
class ClipResult:
    """Clipped content plus the malformed markers that were ignored."""

    content: str
    invalid: tuple[InvalidTag, ...] = ()


def clip_bracketing(content: str, syntax: DirectiveSyntax) -> tuple[str, list[InvalidTag]]:
    """Keep only the interior of the first ``clipbefore`` ... ``clipafter`` span."""
    result: ScanResult = scan(content, syntax)
    befores: list[Directive] = result.of_kind(DirectiveKind.CLIP_BEFORE)
    afters: list[Directive] = result.of_kind(DirectiveKind.CLIP_AFTER)
    if not befores and not afters:
        return content, []
    if not befores:
        first_after: Directive = afters[0]
        return content, [
            InvalidTag(
                first_after.span,
                first_after.text,
                "'clipafter' without 'clipbefore'",
                DirectiveKind.CLIP_AFTER,
            )
        ]
    before: Directive = befores[0]
    after: Directive | None = next((a for a in afters if a.span.start >= before.span.end), None)
    if after is None:
        return content, [
            InvalidTag(
                before.span,
                before.text,
                "'clipbefore' without 'clipafter'",
                DirectiveKind.CLIP_BEFORE,
            )
        ]
    return content[before.span.end : after.span.start], []


def clip_excision(content: str, syntax: DirectiveSyntax) -> tuple[str, list[InvalidTag]]:
    """Remove every top-level ``clipbetween`` ... ``endclipbetween`` block."""
    result: ScanResult = scan(content, syntax)
    malformed: list[InvalidTag] = [t for t in result.invalid if t.kind in EXCISION_KINDS]
    if malformed:
        return content, malformed
    blocks: list[Directive] = result.of_kind(DirectiveKind.CLIP_BETWEEN)
    if not blocks:
        return content, []
    pieces: list[str] = []
    cursor: int = 0
    for block in blocks:
        span = block.block_span
        if span.start < cursor:
            # nested inside a block that is already removed
            continue
        pieces.append(content[cursor : span.start])
        cursor = span.end
    pieces.append(content[cursor:])
    return "".join(pieces), []


def apply_clips(content: str, syntax: DirectiveSyntax = DEFAULT_SYNTAX) -> ClipResult:
    """Apply both clip forms to ``content``.

    Args:
        content: Raw fragment text.
        syntax: Recognized keywords and attribute names.

    Returns:
        ClipResult: The clipped content and any malformed markers.
    """
    clipped, invalid = clip_bracketing(content, syntax)
    clipped, more = clip_excision(clipped, syntax)
    invalid.extend(more)
    if clipped != content:
        logger.trace("Clipped %d character(s)", len(content) - len(clipped))
    return ClipResult(content=clipped, invalid=tuple(invalid))
