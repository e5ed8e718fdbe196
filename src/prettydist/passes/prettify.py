"""
Turn flat pages into "pretty URL" directories: about.html -> about/index.html.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from ..config import PostbuildConfig
from ..util import ensure_directory
from .report import PassReport, display_path
from .walker import iter_files

PASS_NAME = "prettify-urls"

logger = logging.getLogger(__name__)


def pretty_target(path: Path, config: PostbuildConfig) -> Optional[Path]:
    """
    Return where a page should live, or None if it stays put.

    Index pages are terminal, which is what keeps repeated runs from nesting
    pages ever deeper.
    """
    name = path.name
    if name == config.index_filename or not name.endswith(config.html_extension):
        return None
    stem = name[: -len(config.html_extension)]
    if not stem:
        return None
    return path.parent / stem / config.index_filename


def prettify_urls(config: PostbuildConfig, *, dry_run: bool = False) -> PassReport:
    """
    Move every non-index page X.html to X/index.html.

    An existing X/index.html is replaced. A regular file named X makes the
    directory creation fail with FileExistsError, which aborts the pass.
    """
    root = config.resolved_root
    report = PassReport(name=PASS_NAME)
    for node in iter_files(root):
        report.files_seen += 1
        if node.name == config.html_extension:
            logger.warning("Skipping %s (nothing before %s)", display_path(node.path, root), config.html_extension)
            continue
        target = pretty_target(node.path, config)
        if target is None:
            continue
        if dry_run:
            logger.info("Dry-run: would move %s -> %s", display_path(node.path, root), display_path(target, root))
        else:
            ensure_directory(target.parent)
            node.path.replace(target)
            logger.info("Moved %s -> %s", display_path(node.path, root), display_path(target, root))
        report.record("move", node.path, target)
    return report
