# topmark:header:start
#
#   project      : HTMLIncluder
#   file         : test_api.py
#   file_relpath : tests/api/test_api.py
#   license      : MIT
#   copyright    : (c) 2025 HTMLIncluder contributors
#
# topmark:header:end

"""Tests for the public, synchronous Python API."""

from __future__ import annotations

from pathlib import Path

import pytest

from htmlincluder import api
from htmlincluder.cli_shared.exit_codes import ExitCode
from htmlincluder.config.model import Config
from htmlincluder.core.engine import ResolverSettings
from tests.conftest import make_config, write_tree


def test_process_directory_with_mapping_config(tmp_path: Path) -> None:
    """A TOML-shaped mapping configures a build without discovery."""
    src: Path = write_tree(
        tmp_path / "site",
        {"index.html": '<h1><!--#data jsonPath="site.title" --></h1>'},
    )
    report = api.process_directory(
        {
            "build": {"src_dir": str(src), "dest_dir": str(tmp_path / "public")},
            "data": {"json_input": {"site": {"title": "Example"}}},
        }
    )

    assert report.exit_code is ExitCode.SUCCESS
    assert (tmp_path / "public" / "index.html").read_text(encoding="utf-8") == "<h1>Example</h1>"


def test_process_directory_discovers_project_config(isolation: Path) -> None:
    """Without a config the working directory's project config is used."""
    write_tree(
        isolation,
        {
            "htmlincluder.toml": '[build]\ndest_dir = "out"\n',
            "src/index.html": "plain",
        },
    )

    report = api.process_directory()

    assert [p.name for p in report.written] == ["index.html"]
    assert (isolation / "out" / "index.html").is_file()


def test_invalid_mapping_config_raises() -> None:
    """Configuration errors surface as `InvalidConfigError`."""
    with pytest.raises(api.InvalidConfigError) as excinfo:
        api.load_config(no_config=True, overrides={"dev": {"limit_iterations": 0}})

    assert any("positive integer" in m for m in excinfo.value.messages)


def test_load_config_returns_frozen_config(tmp_path: Path) -> None:
    """`load_config` merges overrides last."""
    cfg = api.load_config(start=tmp_path, overrides={"directives": {"capability_name": "x"}})

    assert isinstance(cfg, Config)
    assert cfg.capability_name == "x"


def test_process_single_file_and_content(tmp_path: Path) -> None:
    """Single files and strings resolve against the fragments of ``src_dir``."""
    src: Path = write_tree(
        tmp_path / "src",
        {"page.html": '<!--#insert path="-x.html" -->', "-x.html": "X"},
    )
    cfg: Config = make_config(src)

    assert api.process_single_file(src / "page.html", cfg).content == "X"
    assert api.process_content('(<!--#insert path="-x.html" -->)', src, cfg).content == "(X)"


def test_resolve_without_configuration() -> None:
    """`resolve` works from in-memory inputs only."""
    fragments = {"-x.html": '<!--#data rawJson="lambda p: p.greet()" -->'}
    result = api.resolve(
        'a<!--#insert path="-x.html" -->',
        loader=fragments.get,
        capabilities={"greet": lambda: "hello"},
        settings=ResolverSettings(iteration_limit=5),
    )

    assert result.content == "ahello"
    assert result.passes == 2


def test_version() -> None:
    """The version matches the installed distribution."""
    assert api.version()
