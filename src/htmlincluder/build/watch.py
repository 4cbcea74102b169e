# topmark:header:start
#
#   project      : HTMLIncluder
#   file         : watch.py
#   file_relpath : src/htmlincluder/build/watch.py
#   license      : MIT
#   copyright    : (c) 2025 HTMLIncluder contributors
#
# topmark:header:end

"""Rebuild on source changes.

The watcher polls modification times of every file below ``src_dir`` (plus
the configured JSON data files). Once a change is seen it waits until the tree
has been quiet for the debounce delay, then runs a full build. Every rebuild
goes through `process_directory`, which creates a fresh registry, so no
fragment survives from one build to the next.
"""

from __future__ import annotations

import asyncio
import time
from typing import TYPE_CHECKING

from htmlincluder.build.runner import process_directory
from htmlincluder.config.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from htmlincluder.build.runner import BuildReport
    from htmlincluder.config.logging import IncluderLogger
    from htmlincluder.config.model import Config

    Snapshot = dict[Path, int]

logger: IncluderLogger = get_logger(__name__)

DEFAULT_POLL_INTERVAL: float = 0.5
DEFAULT_DEBOUNCE: float = 0.2


def snapshot(config: Config) -> Snapshot:
    """Return the modification time of every watched file."""
    state: dict[Path, int] = {}
    if config.src_dir.is_dir():
        for path in config.src_dir.rglob("*"):
            try:
                if path.is_file():
                    state[path] = path.stat().st_mtime_ns
            except OSError:
                # removed between listing and stat
                continue
    for path in config.json_files:
        try:
            state[path] = path.stat().st_mtime_ns
        except OSError:
            continue
    return state


def changed_paths(before: Snapshot, after: Snapshot) -> list[Path]:
    """Return files added, removed or modified between two snapshots."""
    keys: set[Path] = set(before) | set(after)
    return sorted(p for p in keys if before.get(p) != after.get(p))


def watch(
    config: Config,
    on_build: Callable[[BuildReport], None],
    *,
    interval: float = DEFAULT_POLL_INTERVAL,
    debounce: float = DEFAULT_DEBOUNCE,
    max_builds: int | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """Build once, then rebuild whenever watched files change.

    Args:
        config (Config): The runtime configuration.
        on_build (Callable[[BuildReport], None]): Called after every build.
        interval (float): Seconds between polls.
        debounce (float): Quiet period required before a rebuild.
        max_builds (int | None): Stop after this many builds (None = run until interrupted).
        sleep (Callable[[float], None]): Sleep function.

    Returns:
        int: Number of builds run.
    """
    builds: int = 0

    def _build() -> None:
        nonlocal builds
        report: BuildReport = asyncio.run(process_directory(config))
        builds += 1
        on_build(report)

    _build()
    current: Snapshot = snapshot(config)
    logger.info("Watching %s for changes", config.src_dir)

    while max_builds is None or builds < max_builds:
        sleep(interval)
        latest: Snapshot = snapshot(config)
        if latest == current:
            continue
        # wait for the tree to settle
        while True:
            sleep(debounce)
            settled: Snapshot = snapshot(config)
            if settled == latest:
                break
            latest = settled
        changes: list[Path] = changed_paths(current, latest)
        logger.info("Change detected: %s", ", ".join(str(p) for p in changes))
        current = latest
        _build()
    return builds
