# topmark:header:start
#
#   project      : HTMLIncluder
#   file         : test_config_io.py
#   file_relpath : tests/config/test_config_io.py
#   license      : MIT
#   copyright    : (c) 2025 HTMLIncluder contributors
#
# topmark:header:end

"""Tests for TOML loading, typed getters and template rendering."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import tomlkit

from htmlincluder.config.io import (
    get_int_value_or_none_checked,
    get_string_list_value_checked,
    get_string_value_or_none,
    get_table_value,
    load_toml_dict,
    render_config_template,
    to_toml,
)
from htmlincluder.diagnostic.model import DiagnosticLog

if TYPE_CHECKING:
    from pathlib import Path


def test_load_toml_dict_returns_plain_dicts(tmp_path: Path) -> None:
    """Parsed documents are unwrapped into builtin types."""
    path: Path = tmp_path / "c.toml"
    path.write_text('[build]\nsrc_dir = "s"\n', encoding="utf-8")

    data = load_toml_dict(path)

    assert data == {"build": {"src_dir": "s"}}
    assert type(data["build"]) is dict


def test_load_toml_dict_records_failures(tmp_path: Path) -> None:
    """Unreadable or invalid files yield an empty dict plus an error."""
    bad: Path = tmp_path / "bad.toml"
    bad.write_text("= nope", encoding="utf-8")
    log = DiagnosticLog()

    assert load_toml_dict(bad, log) == {}
    assert load_toml_dict(tmp_path / "missing.toml", log) == {}
    assert len(log) == 2
    assert log.has_error()


def test_getters() -> None:
    """Typed getters coerce or reject values predictably."""
    table: dict[str, Any] = {"s": "x", "n": 3, "b": True, "t": {"k": 1}, "l": ["a", 2, "b"]}
    log = DiagnosticLog()

    assert get_string_value_or_none(table, "s") == "x"
    assert get_string_value_or_none(table, "n") == "3"
    assert get_string_value_or_none(table, "t") is None
    assert get_table_value(table, "t") == {"k": 1}
    assert get_table_value(table, "s") == {}
    assert get_int_value_or_none_checked(table, "n", where="[x]", diagnostics=log) == 3
    assert get_int_value_or_none_checked(table, "b", where="[x]", diagnostics=log) is None
    assert get_string_list_value_checked(table, "l", where="[x]", diagnostics=log) == ["a", "b"]
    assert get_string_list_value_checked(table, "missing", where="[x]", diagnostics=log) is None
    assert [d.level.value for d in log] == ["error", "warning"]


def test_standalone_template_matches_runtime_defaults() -> None:
    """The ``init`` template parses and carries the runtime defaults."""
    text: str = render_config_template(for_pyproject=False)
    data: Any = tomlkit.parse(text).unwrap()

    assert not text.startswith("# topmark:header")
    assert data["build"]["src_dir"] == "src"
    assert data["directives"]["tag_keyword"] == "insert"
    assert data["fragments"] == {"insert_prefix": "-", "wrap_prefix": "_"}


def test_pyproject_template_is_nested() -> None:
    """``--pyproject`` nests every table under ``[tool.htmlincluder]``."""
    data: Any = tomlkit.parse(render_config_template(for_pyproject=True)).unwrap()

    assert set(data) == {"tool"}
    section: Any = data["tool"]["htmlincluder"]
    assert section["build"]["dest_dir"] == "dist"
    assert section["dev"]["strict_cycles"] is False


def test_to_toml_drops_none_values() -> None:
    """``None`` has no TOML representation and is dropped."""
    text: str = to_toml({"dev": {"limit_iterations": None, "strict_cycles": True}})

    assert tomlkit.parse(text).unwrap() == {"dev": {"strict_cycles": True}}
