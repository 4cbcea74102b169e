# topmark:header:start
#
#   project      : HTMLIncluder
#   file         : test_scanner.py
#   file_relpath : tests/core/test_scanner.py
#   license      : MIT
#   copyright    : (c) 2025 HTMLIncluder contributors
#
# topmark:header:end

"""Tests for the directive scanner: spans, attributes, pairing and malformed tags."""

from __future__ import annotations

from hypothesis import given
from hypothesis import strategies as st

from htmlincluder.core.directives import DirectiveKind, DirectiveSyntax
from htmlincluder.core.scanner import parse_attributes, scan
from tests.conftest import parametrize


def test_scan_returns_directives_left_to_right_with_exact_spans() -> None:
    """Spans slice back to the literal tag text."""
    text = 'a<!--#insert path="-x.html" -->b<!--#data jsonPath="site.title" -->c'
    result = scan(text)

    assert [d.kind for d in result.directives] == [DirectiveKind.INSERT, DirectiveKind.DATA]
    for d in result.directives:
        assert text[d.span.start : d.span.end] == d.text
    assert result.directives[0].get("path") == "-x.html"
    assert result.directives[1].get("jsonPath") == "site.title"
    assert result.invalid == ()


def test_plain_text_has_no_directives() -> None:
    """Ordinary comments and unrelated SSI commands are ignored silently."""
    text = '<p>hi</p><!-- comment --><!--#echo var="DATE_LOCAL" -->'
    result = scan(text)

    assert result.directives == ()
    assert result.invalid == ()


def test_keywords_are_case_insensitive() -> None:
    """``jsonInsert`` and ``JSONINSERT`` are the same directive."""
    result = scan('<!--#jsonInsert jsonPath="a" --><!--#JSONINSERT jsonPath="b" -->')

    assert [d.kind for d in result.directives] == [DirectiveKind.JSON_INSERT] * 2


def test_single_quoted_attributes_are_accepted() -> None:
    """Attribute values may use single quotes."""
    result = scan("<!--#insert path='-a.html' -->")

    assert result.directives[0].get("path") == "-a.html"


def test_insert_without_path_is_reported_and_skipped() -> None:
    """A missing required attribute yields an invalid tag; scanning continues."""
    text = '<!--#insert --> then <!--#insert path="-ok.html" -->'
    result = scan(text)

    assert len(result.directives) == 1
    assert result.directives[0].get("path") == "-ok.html"
    assert len(result.invalid) == 1
    bad = result.invalid[0]
    assert bad.span.start == 0
    assert "missing required attribute" in bad.reason


def test_unparseable_attributes_are_reported() -> None:
    """Garbage between the keyword and the comment end invalidates the tag."""
    result = scan('<!--#insert path=-x.html -->')

    assert result.directives == ()
    assert result.invalid[0].reason == "unparseable attributes"


def test_data_requires_json_path_or_expression() -> None:
    """``data`` needs one of its value attributes."""
    result = scan("<!--#data -->")

    assert result.directives == ()
    assert "jsonPath" in result.invalid[0].reason


def test_wrap_pairs_match_innermost_first() -> None:
    """Nested pairs of the same kind bind each closer to the nearest opener."""
    text = (
        '<!--#wrap path="_outer.html" -->'
        '<!--#wrap path="_inner.html" -->body<!--#endwrap -->'
        "<!--#endwrap -->"
    )
    result = scan(text)
    wraps = result.of_kind(DirectiveKind.WRAP)

    assert len(wraps) == 2
    outer, inner = wraps
    assert outer.closing is not None and inner.closing is not None
    assert inner.closing.span.end < outer.closing.span.start
    assert text[inner.inner_span.start : inner.inner_span.end] == "body"
    assert outer.block_span.as_tuple() == (0, len(text))


def test_unmatched_closer_is_reported() -> None:
    """A closer without an opener is invalid."""
    result = scan("x<!--#endwrap -->")

    assert result.directives == ()
    assert result.invalid[0].reason == "'endwrap' without opening tag"


def test_unclosed_opener_is_reported() -> None:
    """An opener without a closer is invalid and not dispatched."""
    result = scan('<!--#wrap path="_l.html" -->body')

    assert result.of_kind(DirectiveKind.WRAP) == []
    assert result.invalid[0].reason == "'wrap' without closing tag"


def test_closer_of_invalid_opener_is_not_reported_twice() -> None:
    """Only the malformed opener is reported, not its orphaned closer."""
    result = scan("<!--#wrap -->body<!--#endwrap -->")

    assert len(result.invalid) == 1
    assert result.invalid[0].kind is DirectiveKind.WRAP


def test_include_virtual_compatibility_form() -> None:
    """The SSI ``include virtual`` form is an insert."""
    syntax = DirectiveSyntax.from_settings(tag_keyword="include virtual")
    result = scan('<!--#include virtual="-nav.html" -->', syntax)

    assert result.directives[0].kind is DirectiveKind.INSERT
    assert syntax.fragment_path(result.directives[0]) == "-nav.html"


def test_custom_keyword_replaces_insert() -> None:
    """With a custom keyword, ``insert`` is no longer a directive."""
    syntax = DirectiveSyntax.from_settings(tag_keyword="partial")
    result = scan('<!--#partial path="-a.html" --><!--#insert path="-b.html" -->', syntax)

    assert len(result.directives) == 1
    assert result.directives[0].get("path") == "-a.html"


@parametrize(
    "source, expected",
    [
        ("", {}),
        ('  a="1" b=\'2\' ', {"a": "1", "b": "2"}),
        ('jsonPath="x.y"', {"jsonPath": "x.y"}),
        ("a=1", None),
        ('a="1" stray', None),
    ],
)
def test_parse_attributes(source: str, expected: dict[str, str] | None) -> None:
    """Attribute sections parse fully or not at all."""
    assert parse_attributes(source) == expected


_plain_text = st.text(alphabet=st.characters(exclude_characters="<"), max_size=40)


@given(pieces=st.lists(_plain_text, min_size=1, max_size=6))
def test_spans_round_trip_for_generated_documents(pieces: list[str]) -> None:
    """Every directive span slices back to its tag, for arbitrary surrounding text."""
    tags = [f'<!--#data jsonPath="k{i}" -->' for i in range(len(pieces))]
    text = "".join(p + t for p, t in zip(pieces, tags, strict=True))
    result = scan(text)

    assert [d.text for d in result.directives] == tags
    for d in result.directives:
        assert text[d.span.start : d.span.end] == d.text
    starts = [d.span.start for d in result.directives]
    assert starts == sorted(starts)
