# topmark:header:start
#
#   project      : HTMLIncluder
#   file         : __init__.py
#   file_relpath : src/htmlincluder/api/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 HTMLIncluder contributors
#
# topmark:header:end

"""Public HTMLIncluder API (stable surface).

Synchronous wrappers around the asynchronous build layer, for integrations
that want to run HTMLIncluder without going through the CLI.

Configuration contract
----------------------
- Every function accepts ``config`` as a frozen `htmlincluder.config.model.Config`,
  a plain **mapping** mirroring the TOML shape, or ``None``.
- ``None`` runs the same discovery as the CLI (project config in the CWD).
- A mapping is merged over the built-in defaults only (no discovery).

```python
from htmlincluder import api

report = api.process_directory(
    config={
        "build": {"src_dir": "site", "dest_dir": "public"},
        "data": {"json_input": {"site": {"title": "Example"}}},
    },
)
```
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any

from htmlincluder.build import runner
from htmlincluder.config.logging import get_logger
from htmlincluder.config.model import Config, MutableConfig
from htmlincluder.constants import HTMLINCLUDER_VERSION
from htmlincluder.core.engine import resolve_document

if TYPE_CHECKING:
    from collections.abc import Iterable

    from htmlincluder.build.runner import BuildReport
    from htmlincluder.config.logging import IncluderLogger
    from htmlincluder.core.engine import FragmentLoader, ResolutionResult, ResolverSettings

logger: IncluderLogger = get_logger(__name__)

ConfigLike = Config | Mapping[str, Any] | None


class InvalidConfigError(ValueError):
    """Raised when the effective configuration has errors.

    Attributes:
        messages: The error messages recorded while loading and validating.
    """

    def __init__(self, messages: list[str]) -> None:
        self.messages: list[str] = messages
        super().__init__("; ".join(messages) or "invalid configuration")


def load_config(
    *,
    start: Path | None = None,
    config_files: Iterable[Path] | None = None,
    no_config: bool = False,
    overrides: Mapping[str, Any] | None = None,
) -> Config:
    """Discover, merge and freeze the configuration.

    Args:
        start (Path | None): Directory searched for project config (CWD if None).
        config_files (Iterable[Path] | None): Explicit config files, merged after discovery.
        no_config (bool): Skip project discovery.
        overrides (Mapping[str, Any] | None): TOML-shaped values merged last.

    Returns:
        Config: The frozen configuration.

    Raises:
        InvalidConfigError: If loading or validation recorded an error.
    """
    draft: MutableConfig = MutableConfig.load_merged(
        start=start, extra_config_files=config_files, no_config=no_config
    )
    if overrides:
        draft = draft.merge_with(MutableConfig.from_toml_dict(dict(overrides)))
    config: Config = draft.freeze()
    if config.has_errors():
        raise InvalidConfigError(config.error_messages())
    return config


def _ensure_config(config: ConfigLike) -> Config:
    if isinstance(config, Config):
        return config
    if config is None:
        return load_config()
    return load_config(no_config=True, overrides=config)


def process_directory(config: ConfigLike = None, *, write: bool = True) -> BuildReport:
    """Resolve every page of the configured source directory.

    Args:
        config (ConfigLike): Configuration, see the module docstring.
        write (bool): Write results to ``dest_dir``.

    Returns:
        BuildReport: Per-page results, written files and the build's exit code.
    """
    return asyncio.run(runner.process_directory(_ensure_config(config), write=write))


def process_single_file(path: Path | str, config: ConfigLike = None) -> ResolutionResult:
    """Resolve one file against the fragments of the source directory."""
    return asyncio.run(runner.process_single_file(Path(path), _ensure_config(config)))


def process_content(
    text: str, base_path: Path | str = ".", config: ConfigLike = None
) -> ResolutionResult:
    """Resolve a string as a virtual document located in ``base_path``."""
    return asyncio.run(runner.process_content(text, Path(base_path), _ensure_config(config)))


def resolve(
    text: str,
    *,
    path: str = "document.html",
    loader: FragmentLoader | None = None,
    data: Any = None,
    capabilities: Mapping[str, Any] | None = None,
    settings: ResolverSettings | None = None,
) -> ResolutionResult:
    """Resolve ``text`` without any configuration or filesystem access.

    Fragments are obtained from ``loader`` only.
    """
    return asyncio.run(
        resolve_document(
            text,
            path=path,
            loader=loader,
            data=data,
            capabilities=capabilities,
            settings=settings,
        )
    )


def version() -> str:
    """Return the installed HTMLIncluder version."""
    return HTMLINCLUDER_VERSION


__all__ = [
    "InvalidConfigError",
    "load_config",
    "process_content",
    "process_directory",
    "process_single_file",
    "resolve",
    "version",
]
