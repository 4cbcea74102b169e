# topmark:header:start
#
#   project      : HTMLIncluder
#   file         : test_registry.py
#   file_relpath : tests/core/test_registry.py
#   license      : MIT
#   copyright    : (c) 2025 HTMLIncluder contributors
#
# topmark:header:end

"""Tests for fragment classification, registration and lookup."""

from __future__ import annotations

import pytest

from htmlincluder.core.errors import MissingFragmentError
from htmlincluder.core.registry import FragmentCategory, FragmentNaming, FragmentRegistry
from htmlincluder.diagnostic.model import ConditionKind
from tests.conftest import parametrize


@parametrize(
    "path, category",
    [
        ("index.html", FragmentCategory.PAGE),
        ("parts/-nav.html", FragmentCategory.INSERT),
        ("layouts/_base.html", FragmentCategory.WRAP),
        ("-dir/page.html", FragmentCategory.PAGE),
    ],
)
def test_default_naming(path: str, category: FragmentCategory) -> None:
    """The category comes from the file name, not the directory."""
    assert FragmentNaming().classify(path) is category


def test_custom_prefixes() -> None:
    """Prefixes are configurable."""
    naming = FragmentNaming(insert_prefix="inc.", wrap_prefix="layout.")

    assert naming.classify("inc.nav.html") is FragmentCategory.INSERT
    assert naming.classify("layout.main.html") is FragmentCategory.WRAP
    assert naming.classify("-nav.html") is FragmentCategory.PAGE
    assert naming.is_dependency("inc.nav.html")


def test_register_strips_dependencies_but_not_pages() -> None:
    """Insert and wrap content is trimmed; page content is kept verbatim."""
    registry = FragmentRegistry()
    insert, _ = registry.register("-nav.html", "\n  <nav/>\n")
    page, _ = registry.register("index.html", "\n<p/>\n")

    assert insert.content == "<nav/>"
    assert page.content == "\n<p/>\n"
    assert registry.inserts() == [insert]
    assert registry.pages() == [page]
    assert registry.wraps() == []


def test_register_applies_clips_and_reports_malformed_markers() -> None:
    """Clipping runs once, at registration."""
    registry = FragmentRegistry()
    record, diags = registry.register(
        "-a.html", "<html><!--#clipbefore -->A<!--#clipafter --></html>"
    )
    bad, bad_diags = registry.register("-b.html", "B<!--#clipafter -->")

    assert record.content == "A"
    assert diags == []
    assert bad.content == "B<!--#clipafter -->"
    assert [d.kind for d in bad_diags] == [ConditionKind.INVALID_DIRECTIVE]
    assert bad_diags[0].path == "-b.html"


def test_paths_are_normalized() -> None:
    """Equivalent spellings of a path address the same record."""
    registry = FragmentRegistry()
    registry.register("parts/./-x.html", "X")

    assert "parts/-x.html" in registry
    assert registry.lookup("parts/sub/../-x.html").content == "X"


def test_re_registering_replaces_the_record() -> None:
    """The latest registration wins."""
    registry = FragmentRegistry()
    registry.register("-x.html", "old")
    registry.register("-x.html", "new")

    assert len(registry) == 1
    assert registry.lookup("-x.html").content == "new"


def test_lookup_miss_raises() -> None:
    """Unknown paths raise `MissingFragmentError` naming the fragment."""
    registry = FragmentRegistry()

    with pytest.raises(MissingFragmentError) as excinfo:
        registry.lookup("nowhere/-x.html")

    assert excinfo.value.fragment == "nowhere/-x.html"
    assert registry.get("nowhere/-x.html") is None


def test_reset_clears_every_partition() -> None:
    """A reset registry is empty."""
    registry = FragmentRegistry()
    registry.register("index.html", "p")
    registry.register("-x.html", "i")
    registry.register("_l.html", "w")
    registry.reset()

    assert len(registry) == 0
    assert list(registry) == []
