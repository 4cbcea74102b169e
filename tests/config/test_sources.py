# topmark:header:start
#
#   project      : HTMLIncluder
#   file         : test_sources.py
#   file_relpath : tests/config/test_sources.py
#   license      : MIT
#   copyright    : (c) 2025 HTMLIncluder contributors
#
# topmark:header:end

"""Tests for data tree and capability table loading."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from htmlincluder.config.sources import (
    DataSourceError,
    PluginLoadError,
    load_capabilities,
    load_data_tree,
)
from tests.conftest import make_config, parametrize, write_tree

PLUGIN_SOURCE = '''
from json import dumps


def year():
    return 2025


def _private():
    return None


TABLE = {"greet": lambda name: f"hi {name}", "answer": 42}
'''


@pytest.fixture
def plugin_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Directory holding throwaway plugin modules; ``sys.path`` is restored afterwards."""
    root: Path = tmp_path / "plugins_root"
    write_tree(
        root,
        {
            "hinc_plug_basic.py": PLUGIN_SOURCE,
            "hinc_plug_exported.py": (
                "__all__ = ['shown']\n\ndef shown():\n    return 1\n\ndef hidden():\n    return 2\n"
            ),
        },
    )
    monkeypatch.setattr(sys, "path", list(sys.path))
    for name in ("hinc_plug_basic", "hinc_plug_exported"):
        monkeypatch.delitem(sys.modules, name, raising=False)
    return root


def test_data_tree_merges_files_over_inline_data(tmp_path: Path) -> None:
    """``json_files`` are merged over ``json_input``, later files win."""
    write_tree(
        tmp_path,
        {"a.json": '{"site": {"title": "A"}, "a": 1}', "b.json": '{"site": {"title": "B"}}'},
    )
    cfg = make_config(
        tmp_path,
        json_input={"site": {"title": "inline"}, "inline": True},
        json_files=[tmp_path / "a.json", tmp_path / "b.json"],
    )

    assert load_data_tree(cfg) == {"site": {"title": "B"}, "a": 1, "inline": True}


@parametrize("content", ["[1, 2]", "{not json"])
def test_unusable_data_files_raise(tmp_path: Path, content: str) -> None:
    """Non-object or invalid JSON files fail the build setup."""
    write_tree(tmp_path, {"d.json": content})
    cfg = make_config(tmp_path, json_files=[tmp_path / "d.json"])

    with pytest.raises(DataSourceError):
        load_data_tree(cfg)


def test_missing_data_file_raises_oserror(tmp_path: Path) -> None:
    """Unreadable data files surface as `OSError`."""
    cfg = make_config(tmp_path, json_files=[tmp_path / "missing.json"])

    with pytest.raises(OSError):
        load_data_tree(cfg)


def test_module_spec_contributes_public_callables(plugin_root: Path) -> None:
    """Only callables defined in the module itself are exposed."""
    table = load_capabilities(["hinc_plug_basic"], search_path=plugin_root)

    assert set(table) == {"year"}
    assert table["year"]() == 2025


def test_module_all_is_respected(plugin_root: Path) -> None:
    """``__all__`` selects the exported names."""
    table = load_capabilities(["hinc_plug_exported"], search_path=plugin_root)

    assert set(table) == {"shown"}


def test_attribute_specs(plugin_root: Path) -> None:
    """Mappings contribute their entries, other attributes their own name."""
    table = load_capabilities(
        ["hinc_plug_basic:TABLE", "hinc_plug_basic:year"], search_path=plugin_root
    )

    assert set(table) == {"greet", "answer", "year"}
    assert table["greet"]("x") == "hi x"


def test_unknown_specs_raise(plugin_root: Path) -> None:
    """Import and attribute failures raise `PluginLoadError`."""
    with pytest.raises(PluginLoadError, match="cannot import"):
        load_capabilities(["hinc_plug_nowhere"], search_path=plugin_root)
    with pytest.raises(PluginLoadError, match="no attribute"):
        load_capabilities(["hinc_plug_basic:missing"], search_path=plugin_root)


def test_no_specs_no_capabilities() -> None:
    """An empty spec list yields an empty table."""
    assert load_capabilities([]) == {}
