# topmark:header:start
#
#   project      : HTMLIncluder
#   file         : discovery.py
#   file_relpath : src/htmlincluder/build/discovery.py
#   license      : MIT
#   copyright    : (c) 2025 HTMLIncluder contributors
#
# topmark:header:end

"""Discover the HTML sources of a build.

Every ``*.html`` file below ``src_dir`` is a candidate. Include patterns (if
any) keep only matching candidates, exclude patterns then remove matches.
Patterns use git wildmatch semantics and are matched against the path
relative to ``src_dir``. The result is sorted for deterministic builds.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from pathspec import PathSpec
from pathspec.patterns.gitwildmatch import GitWildMatchPattern

from htmlincluder.config.logging import get_logger

if TYPE_CHECKING:
    from htmlincluder.config.logging import IncluderLogger
    from htmlincluder.config.model import Config

logger: IncluderLogger = get_logger(__name__)

HTML_GLOB: str = "*.html"


def _rel_for_match(path: Path, base: Path) -> str:
    """Return a POSIX-style relative path (or the path itself as fallback) for matching."""
    try:
        return path.resolve().relative_to(base.resolve()).as_posix()
    except ValueError:
        return path.as_posix()


def list_html_files(base_dir: Path) -> list[Path]:
    """Return every ``*.html`` file below ``base_dir``, sorted."""
    if not base_dir.is_dir():
        logger.warning("Source directory not found: %s", base_dir)
        return []
    return sorted(p for p in base_dir.rglob(HTML_GLOB) if p.is_file())


def discover_files(config: Config) -> list[Path]:
    """Return the HTML files of a build, filtered by include/exclude patterns.

    Args:
        config (Config): The runtime configuration.

    Returns:
        list[Path]: Sorted list of selected files (pages and fragments).
    """
    src_dir: Path = config.src_dir
    candidates: list[Path] = list_html_files(src_dir)
    logger.debug("Discovered %d HTML file(s) under %s", len(candidates), src_dir)

    if config.include_patterns:
        include_spec: PathSpec = PathSpec.from_lines(
            GitWildMatchPattern, list(config.include_patterns)
        )
        candidates = [p for p in candidates if include_spec.match_file(_rel_for_match(p, src_dir))]

    if config.exclude_patterns:
        exclude_spec: PathSpec = PathSpec.from_lines(
            GitWildMatchPattern, list(config.exclude_patterns)
        )
        candidates = [
            p for p in candidates if not exclude_spec.match_file(_rel_for_match(p, src_dir))
        ]

    logger.trace("Files selected: %d -- %s", len(candidates), candidates)
    return candidates
