# topmark:header:start
#
#   project      : HTMLIncluder
#   file         : writer.py
#   file_relpath : src/htmlincluder/build/writer.py
#   license      : MIT
#   copyright    : (c) 2025 HTMLIncluder contributors
#
# topmark:header:end

"""Write resolved pages to the output directory."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from htmlincluder.config.logging import get_logger

if TYPE_CHECKING:
    from htmlincluder.config.logging import IncluderLogger

logger: IncluderLogger = get_logger(__name__)


def output_path_for(page: Path, src_dir: Path, dest_dir: Path) -> Path:
    """Return where ``page`` is written.

    Pages below ``src_dir`` keep their relative location; any other page is
    written at the top of ``dest_dir``.
    """
    try:
        relative: Path = page.resolve().relative_to(src_dir.resolve())
    except ValueError:
        relative = Path(page.name)
    return dest_dir / relative


def write_output(content: str, target: Path) -> Path:
    """Write ``content`` to ``target``, creating parent directories.

    Raises:
        OSError: If the file cannot be written.
    """
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(content, encoding="utf-8")
    logger.debug("Wrote %s (%d chars)", target, len(content))
    return target
