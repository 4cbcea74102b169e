# topmark:header:start
#
#   project      : HTMLIncluder
#   file         : test_engine.py
#   file_relpath : tests/core/test_engine.py
#   license      : MIT
#   copyright    : (c) 2025 HTMLIncluder contributors
#
# topmark:header:end

"""Tests for the fixed-point resolution engine.

Fragments are served from in-memory mappings through the engine's loader
hook, so no test touches the file system.
"""

from __future__ import annotations

import copy
from typing import TYPE_CHECKING, Any

import pytest

from htmlincluder.core.engine import (
    MAX_INCLUDE_DEPTH,
    ResolutionEngine,
    ResolutionState,
    ResolverSettings,
    resolve_document,
)
from htmlincluder.core.errors import CyclicIncludeError, MissingFragmentError
from htmlincluder.core.registry import FragmentRegistry
from htmlincluder.diagnostic.model import ConditionKind
from tests.conftest import parametrize, run

if TYPE_CHECKING:
    from collections.abc import Callable

    from htmlincluder.core.engine import ResolutionResult


def _loader(files: dict[str, str]) -> Callable[[str], str | None]:
    return files.get


def _resolve(
    text: str,
    files: dict[str, str] | None = None,
    *,
    path: str = "index.html",
    data: Any = None,
    capabilities: dict[str, Any] | None = None,
    **settings: Any,
) -> ResolutionResult:
    return run(
        resolve_document(
            text,
            path=path,
            loader=_loader(files or {}),
            data=data,
            capabilities=capabilities,
            settings=ResolverSettings(**settings),
        )
    )


def _kinds(result: ResolutionResult) -> list[ConditionKind]:
    return [d.kind for d in result.diagnostics]


def test_document_without_directives_is_unchanged() -> None:
    """No directives: identical output, zero passes, stable."""
    text = "<html><!-- plain comment --><p>hello</p></html>\n"
    result = _resolve(text)

    assert result.content == text
    assert result.passes == 0
    assert result.state is ResolutionState.STABLE
    assert len(result.diagnostics) == 0


def test_insert_chain_resolves_depth_first_in_two_passes() -> None:
    """A -> B -> C yields C's content; each host with directives costs one pass."""
    files = {
        "-b.html": 'B[<!--#insert path="-c.html" -->]',
        "-c.html": "C",
    }
    result = _resolve('<!--#insert path="-b.html" -->', files)

    assert result.content == "B[C]"
    assert result.passes == 2
    assert result.is_stable


def test_inserted_fragment_contributes_only_its_clipped_interior() -> None:
    """Preview scaffolding around clip markers never reaches the host."""
    files = {
        "-nav.html": "<html><body><!--#clipbefore --><nav/><!--#clipafter --></body></html>",
    }
    result = _resolve('<header><!--#insert path="-nav.html" --></header>', files)

    assert result.content == "<header><nav/></header>"


def test_wrap_places_the_body_at_the_middle_marker() -> None:
    """The layout replaces the block; the body lands at ``middle``."""
    files = {"_layout.html": "\n<main><!--#middle --></main>\n"}
    result = _resolve('x<!--#wrap path="_layout.html" -->body<!--#endwrap -->y', files)

    assert result.content == "x<main>body</main>y"
    assert result.passes == 1


def test_wrap_waits_for_its_body_to_resolve() -> None:
    """Directives inside the body are resolved before the wrap is applied."""
    files = {
        "_layout.html": "<main><!--#middle --></main>",
        "-n.html": "N",
    }
    text = 'x<!--#wrap path="_layout.html" --><!--#insert path="-n.html" --><!--#endwrap -->y'
    result = _resolve(text, files)

    assert result.content == "x<main>N</main>y"
    assert result.passes == 2


def test_wrap_layout_without_middle_drops_the_body() -> None:
    """A layout without a ``middle`` marker is reported."""
    files = {"_layout.html": "<main></main>"}
    result = _resolve('<!--#wrap path="_layout.html" -->body<!--#endwrap -->', files)

    assert result.content == "<main></main>"
    assert _kinds(result) == [ConditionKind.INVALID_DIRECTIVE]


def test_cyclic_include_is_bounded_by_the_iteration_limit() -> None:
    """With a limit, a cycle stops after at most that many passes and is reported."""
    files = {
        "-a.html": 'A<!--#insert path="-b.html" -->',
        "-b.html": 'B<!--#insert path="-a.html" -->',
    }
    result = _resolve('<!--#insert path="-a.html" -->', files, iteration_limit=4)

    assert result.passes <= 4
    assert result.state is ResolutionState.ITERATION_EXCEEDED
    assert result.content.startswith("ABAB")
    assert ConditionKind.UNRESOLVED_DIRECTIVE in _kinds(result)


def test_cyclic_include_with_a_large_limit_stops_at_the_depth_bound() -> None:
    """A large limit ends the cycle at the include depth bound, not in a crash."""
    files = {
        "-a.html": 'A<!--#insert path="-b.html" -->',
        "-b.html": 'B<!--#insert path="-a.html" -->',
    }
    result = _resolve('<!--#insert path="-a.html" -->', files, iteration_limit=1000)

    assert result.passes < MAX_INCLUDE_DEPTH
    assert result.state is ResolutionState.ITERATION_EXCEEDED
    assert result.content.startswith("ABAB")
    assert '<!--#insert path="' in result.content
    assert _kinds(result) == [ConditionKind.UNRESOLVED_DIRECTIVE]
    assert f"include depth {MAX_INCLUDE_DEPTH}" in result.diagnostics.items[0].message


def test_cyclic_include_without_limit_is_skipped() -> None:
    """Without limit or strict mode the cyclic directive becomes empty text."""
    files = {
        "-a.html": 'A<!--#insert path="-b.html" -->',
        "-b.html": 'B<!--#insert path="-a.html" -->',
    }
    result = _resolve('<!--#insert path="-a.html" -->', files)

    assert result.content == "AB"
    assert result.is_stable
    assert _kinds(result) == [ConditionKind.UNRESOLVED_DIRECTIVE]


def test_cyclic_include_raises_in_strict_mode() -> None:
    """Strict mode fails the page with the include chain."""
    files = {"-a.html": '<!--#insert path="-a.html" -->'}

    with pytest.raises(CyclicIncludeError) as excinfo:
        _resolve('<!--#insert path="-a.html" -->', files, strict_cycles=True)

    assert excinfo.value.chain == ("index.html", "-a.html", "-a.html")


def test_failing_expression_does_not_affect_siblings() -> None:
    """A failing expression yields empty text and an EVALUATION_ERROR only for itself."""

    def boom() -> str:
        raise RuntimeError("down")

    text = '<!--#data rawJson="plugins.boom()" -->|<!--#data jsonPath="site.title" -->'
    result = _resolve(
        text,
        data={"site": {"title": "T"}},
        capabilities={"boom": boom},
    )

    assert result.content == "|T"
    assert _kinds(result) == [ConditionKind.EVALUATION_ERROR]
    assert result.diagnostics.items[0].span == (0, text.index("|"))


@parametrize("expression", ["lambda p, p: 1", "lambda p: await p.fetch()"])
def test_expression_that_does_not_compile_is_scoped_to_its_directive(expression: str) -> None:
    """Compile-time failures become an EVALUATION_ERROR and empty text."""
    text = f'<!--#data rawJson="{expression}" -->|<!--#data jsonPath="a" default="ok" -->'
    result = _resolve(text)

    assert result.content == "|ok"
    assert _kinds(result) == [ConditionKind.EVALUATION_ERROR]


def test_await_inside_an_expression() -> None:
    """``await`` on a capability call settles before splicing."""

    async def fetch() -> dict[str, str]:
        return {"name": "Ada"}

    text = '<!--#data rawJson="(await plugins.fetch())[\'name\']" -->'
    result = _resolve(text, capabilities={"fetch": fetch})

    assert result.content == "Ada"
    assert len(result.diagnostics) == 0


def test_expression_result_feeds_json_path() -> None:
    """``jsonPath`` applies to the expression's settled result."""

    async def posts() -> list[dict[str, str]]:
        return [{"title": "first"}, {"title": "second"}]

    text = '<!--#data rawJson="plugins.posts()" jsonPath="1.title" -->'
    result = _resolve(text, capabilities={"posts": posts})

    assert result.content == "second"


def test_resolution_is_pure() -> None:
    """Same inputs, same output; data and capabilities are not mutated."""
    data = {"site": {"title": "T", "tags": ["a", "b"]}}
    before = copy.deepcopy(data)
    files = {"-x.html": '<!--#jsonInsert jsonPath="site.tags" -->'}
    text = '<!--#insert path="-x.html" -->/<!--#data jsonPath="site.title" -->'

    first = _resolve(text, files, data=data)
    second = _resolve(text, files, data=data)

    assert first.content == second.content == '["a", "b"]/T'
    assert data == before


def test_missing_data_uses_default_or_empty_text() -> None:
    """Absent data yields the ``default`` attribute, else empty text."""
    text = (
        '[<!--#data jsonPath="a.b" default="none" -->]'
        '[<!--#data jsonPath="a.b" -->]'
        '[<!--#jsonInsert jsonPath="a.b" -->]'
    )
    result = _resolve(text, data={"a": {}})

    assert result.content == "[none][][]"
    assert len(result.diagnostics) == 0


def test_json_insert_keeps_a_present_empty_string() -> None:
    """Only absent values render as empty text; a present ``""`` stays JSON."""
    text = '[<!--#jsonInsert jsonPath="a.s" -->][<!--#data jsonPath="a.s" -->]'
    result = _resolve(text, data={"a": {"s": ""}})

    assert result.content == '[""][]'


def test_missing_fragment_is_replaced_by_empty_text() -> None:
    """Unloadable inserts are reported with the host path and tag span."""
    text = 'a<!--#insert path="-nope.html" -->b'
    result = _resolve(text)

    assert result.content == "ab"
    diag = result.diagnostics.of_kind(ConditionKind.MISSING_FRAGMENT)[0]
    assert diag.path == "index.html"
    assert diag.span == (1, len(text) - 1)
    assert "-nope.html" in diag.message


def test_invalid_tag_is_left_in_place_and_reported_once() -> None:
    """Malformed tags are skipped, not retried, and reported a single time."""
    text = '<!--#insert --><!--#insert path="-x.html" -->'
    result = _resolve(text, {"-x.html": "X"})

    assert result.content == "<!--#insert -->X"
    assert _kinds(result) == [ConditionKind.INVALID_DIRECTIVE]


def test_identical_invalid_tags_are_reported_separately() -> None:
    """Two malformed tags with the same text are two conditions."""
    text = "<!--#insert -->x<!--#insert -->"
    result = _resolve(text)

    assert _kinds(result) == [ConditionKind.INVALID_DIRECTIVE] * 2
    assert [d.span for d in result.diagnostics] == [(0, 15), (16, 31)]


def test_invalid_tag_in_a_reused_fragment_is_reported_once() -> None:
    """A fragment inserted twice reports its malformed tag a single time, under its own path."""
    files = {"-x.html": "<!--#insert -->X"}
    result = _resolve('<!--#insert path="-x.html" --><!--#insert path="-x.html" -->', files)

    assert result.content == "<!--#insert -->X<!--#insert -->X"
    [diag] = result.diagnostics.items
    assert diag.kind is ConditionKind.INVALID_DIRECTIVE
    assert diag.path == "-x.html"


def test_inserted_fragment_sees_a_scoped_data_tree() -> None:
    """``jsonPath`` on an insert narrows the data seen by the fragment."""
    files = {"-card.html": '<h2><!--#data jsonPath="title" --></h2>'}
    text = '<!--#insert path="-card.html" jsonPath="posts.0" -->'
    result = _resolve(text, files, data={"posts": [{"title": "Hello"}]})

    assert result.content == "<h2>Hello</h2>"


def test_paths_resolve_against_the_host_directory_and_the_root() -> None:
    """Relative references follow the host; a leading slash starts at the root."""
    seen: list[str] = []
    files = {"blog/-x.html": "X", "site/parts/-h.html": "H"}

    def loader(path: str) -> str | None:
        seen.append(path)
        return files.get(path)

    result = run(
        resolve_document(
            '<!--#insert path="-x.html" --><!--#insert path="/parts/-h.html" -->',
            path="blog/post.html",
            loader=loader,
            settings=ResolverSettings(root_dir="site"),
        )
    )

    assert result.content == "XH"
    assert seen == ["blog/-x.html", "site/parts/-h.html"]


def test_async_loader_is_awaited() -> None:
    """Coroutine loaders are supported."""

    async def loader(path: str) -> str | None:
        return {"-x.html": "async"}.get(path)

    result = run(resolve_document('<!--#insert path="-x.html" -->', loader=loader))

    assert result.content == "async"


def test_include_virtual_form() -> None:
    """The SSI compatibility form resolves like an insert."""
    result = _resolve(
        '<!--#include virtual="-x.html" -->',
        {"-x.html": "X"},
        tag_keyword="include virtual",
    )

    assert result.content == "X"


def test_engine_resolves_registered_pages() -> None:
    """With no content given, the page is taken from the registry."""
    registry = FragmentRegistry()
    registry.register("index.html", 'I<!--#insert path="-x.html" -->')
    registry.register("-x.html", "X")
    engine = ResolutionEngine(registry)

    assert run(engine.resolve("index.html")).content == "IX"
    with pytest.raises(MissingFragmentError):
        run(engine.resolve("other.html"))
