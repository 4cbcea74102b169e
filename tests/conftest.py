# topmark:header:start
#
#   project      : HTMLIncluder
#   file         : conftest.py
#   file_relpath : tests/conftest.py
#   license      : MIT
#   copyright    : (c) 2025 HTMLIncluder contributors
#
# topmark:header:end

"""Pytest configuration for the HTMLIncluder test suite.

Sets up TRACE logging for the whole run, typed wrappers around pytest
decorators and small helpers shared by the test packages.

Notes:
    Tests respect the immutable/mutable configuration split: build configs
    with `MutableConfig`, then `freeze()` into a `Config`. To tweak a frozen
    `Config`, call `Config.thaw()`, edit, and `freeze()` again.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Coroutine
from pathlib import Path
from typing import TYPE_CHECKING, Any, TypeVar, cast

import pytest

from htmlincluder.config import logging
from htmlincluder.config.logging import LOG_LEVEL_ENV_VAR
from htmlincluder.config.model import MutableConfig

if TYPE_CHECKING:
    from htmlincluder.config.model import Config

F = TypeVar("F", bound=Callable[..., object])
T = TypeVar("T")

# This defines the type for the decorator function itself:
# It takes a Callable (F) and returns the same Callable (F).
DecoratorType = Callable[[F], F]


def as_typed_mark(mark: Any) -> DecoratorType[Any]:
    """Wrap a pytest mark so static type checkers preserve the function type.

    Args:
        mark (Any): A pytest mark decorator such as `pytest.mark.cli`.

    Returns:
        DecoratorType[Any]: A decorator that preserves the wrapped function's type.
    """

    def _decorator(func: F) -> F:
        return cast("F", mark(func))

    return _decorator


mark_cli: DecoratorType[Any] = as_typed_mark(pytest.mark.cli)


def parametrize(*args: Any, **kwargs: Any) -> Callable[[F], F]:
    """Typed wrapper for `pytest.mark.parametrize`."""
    mark: pytest.MarkDecorator = pytest.mark.parametrize(*args, **kwargs)
    return as_typed_mark(mark)


def hookimpl(*args: Any, **kwargs: Any) -> Callable[[F], F]:
    """Typed wrapper for `pytest.hookimpl`."""
    return as_typed_mark(pytest.hookimpl(*args, **kwargs))


def fixture(*args: Any, **kwargs: Any) -> Callable[[F], F]:
    """Typed wrapper for `pytest.fixture`."""
    return as_typed_mark(pytest.fixture(*args, **kwargs))


@pytest.fixture(autouse=True)
def silence_env_logging(monkeypatch: pytest.MonkeyPatch) -> None:
    """Ensure the runtime log level is not forced via env during tests.

    Args:
        monkeypatch (pytest.MonkeyPatch): Used to remove the environment variable.
    """
    monkeypatch.delenv(LOG_LEVEL_ENV_VAR, raising=False)


@hookimpl(tryfirst=True)
def pytest_configure(config: pytest.Config) -> None:  # pylint: disable=unused-argument
    """Set the logging level to TRACE for all tests.

    Args:
        config (pytest.Config): The pytest configuration object.
    """
    logging.setup_logging(level=logging.TRACE_LEVEL)


def run(coro: Coroutine[Any, Any, T]) -> T:
    """Drive a coroutine to completion (tests are synchronous)."""
    return asyncio.run(coro)


def write_tree(root: Path, files: dict[str, str]) -> Path:
    """Create ``files`` (relative path -> content) below ``root`` and return ``root``."""
    for rel, content in files.items():
        target: Path = root / rel
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
    return root


def make_config(src_dir: Path, dest_dir: Path | None = None, **overrides: Any) -> Config:
    """Return a frozen `Config` built from defaults, directories and field overrides.

    Args:
        src_dir (Path): Source directory.
        dest_dir (Path | None): Output directory (None = do not write).
        **overrides (Any): `MutableConfig` field values.

    Returns:
        Config: The frozen configuration.
    """
    draft: MutableConfig = MutableConfig.from_defaults()
    draft.src_dir = src_dir
    draft.dest_dir = dest_dir
    for key, value in overrides.items():
        setattr(draft, key, value)
    return draft.freeze()


@pytest.fixture
def isolation(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run a test in an isolated project directory (the CWD).

    Args:
        tmp_path (Path): The pytest-provided temporary directory for the test.
        monkeypatch (pytest.MonkeyPatch): Fixture to change the working directory.

    Returns:
        Path: The project root, containing an empty ``src`` directory.
    """
    cwd: Path = tmp_path / "proj"
    (cwd / "src").mkdir(parents=True)
    monkeypatch.chdir(cwd)
    return cwd
